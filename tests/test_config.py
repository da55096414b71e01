import logging

import numpy as np
import pytest

from lossgraph import Loss, Reduction, config
from lossgraph.core.errors import ConfigurationError, UnknownLossError


@pytest.fixture(autouse=True)
def restore_settings():
    saved = dict(config._settings)
    yield
    config._settings.update(saved)


def test_defaults():
    cfg = config.load_config(apply=False)
    assert cfg["floatx"] == "float32"
    assert cfg["epsilon"] == pytest.approx(1e-7)
    assert cfg["losses"] == {}


def test_setters_validate():
    config.set_floatx("float64")
    assert config.floatx() == "float64"
    config.set_floatx(np.float16)
    assert config.floatx() == "float16"
    with pytest.raises(ConfigurationError):
        config.set_floatx("int32")
    with pytest.raises(ConfigurationError):
        config.set_floatx("not-a-type")
    with pytest.raises(ConfigurationError):
        config.set_floatx(None)
    assert config.floatx() == "float16"
    config.set_epsilon("1e-5")
    assert config.epsilon() == pytest.approx(1e-5)
    with pytest.raises(ConfigurationError):
        config.set_epsilon(0)
    with pytest.raises(ConfigurationError):
        config.set_epsilon("tiny")


def test_floatx_drives_integer_promotion():
    config.set_floatx("float64")
    assert Loss("LogCosh")([[0, 1]], [[1, 1]]).dtype == np.float64


def test_load_yaml_and_build(tmp_path, caplog):
    path = tmp_path / "losses.yaml"
    path.write_text(
        "floatx: float64\n"
        "epsilon: 1.0e-6\n"
        "reduction: sum\n"
        "losses:\n"
        "  recon:\n"
        "    kind: LogCosh\n"
        "  robust:\n"
        "    kind: huber\n"
        "    delta: 0.5\n"
        "    reduction: none\n",
        encoding="utf-8",
    )
    with caplog.at_level(logging.INFO, logger="lossgraph.config"):
        cfg = config.load_config(path)
    assert "loaded config" in caplog.text
    assert config.floatx() == "float64"
    assert config.epsilon() == pytest.approx(1e-6)

    built = config.build_losses(cfg)
    assert built["recon"] == Loss("LogCosh", name="recon", reduction="sum")
    assert built["robust"].kind == "Huber"
    assert built["robust"].reduction is Reduction.NONE
    assert built["robust"].params == {"delta": 0.5}


def test_load_mapping_without_apply_leaves_settings():
    config.load_config({"epsilon": 0.1}, apply=False)
    assert config.epsilon() == pytest.approx(1e-7)


@pytest.mark.parametrize("raw", [
    {"bogus": 1},
    {"floatx": "int8"},
    {"epsilon": -1},
    {"losses": ["LogCosh"]},
    {"reduction": "bogus"},
    {"floatx": None},
])
def test_invalid_configs(raw):
    with pytest.raises(ConfigurationError):
        config.load_config(raw, apply=False)


def test_invalid_yaml(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("losses: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        config.load_config(path)
    with pytest.raises(ConfigurationError):
        config.load_config(tmp_path / "missing.yaml")


def test_build_losses_errors_name_the_entry():
    with pytest.raises(ConfigurationError) as info:
        config.build_losses({"losses": {"a": {"reduction": "sum"}}})
    assert info.value.field_path == "losses.a"

    with pytest.raises(UnknownLossError) as info:
        config.build_losses({"losses": {"b": {"kind": "Nope"}}})
    assert info.value.field_path == "losses.b"

    with pytest.raises(ConfigurationError) as info:
        config.build_losses({"losses": {"c": {"kind": "LogCosh", "delta": 1.0}}})
    assert info.value.field_path == "losses.c"

    with pytest.raises(ConfigurationError) as info:
        config.build_losses({"losses": {"d": {"kind": "LogCosh", "reduction": "bogus"}}})
    assert info.value.field_path == "losses.d"


def test_bad_top_level_reduction_names_the_field():
    with pytest.raises(ConfigurationError) as info:
        config.load_config({"reduction": "mean-ish"}, apply=False)
    assert info.value.field_path == "reduction"
    assert config.load_config({"reduction": "SUM"}, apply=False)["reduction"] == "sum"
