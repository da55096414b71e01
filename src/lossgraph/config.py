# src/lossgraph/config.py
"""
Backend settings (float type, fuzz factor) and YAML/dict loss configuration.

A config file looks like:

    floatx: float32
    epsilon: 1.0e-7
    reduction: auto          # default for entries that don't set one
    losses:
      recon:
        kind: LogCosh
      robust:
        kind: Huber
        delta: 0.5
        reduction: sum
"""

from __future__ import annotations

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Union

import numpy as np
import yaml

from .core.errors import ConfigurationError, InvalidArgumentError

logger = logging.getLogger(__name__)

DEFAULT_CFG: Dict[str, Any] = {
    "floatx": "float32",
    "epsilon": 1e-7,
    "reduction": "auto",
    "losses": {},
}

_FLOAT_TYPES = ("float16", "float32", "float64")


def _check_floatx(value) -> str:
    # np.dtype(None) is float64, so None has to be turned away up front
    if value is None:
        raise ConfigurationError("float type must be set", {"expected": _FLOAT_TYPES}, field_path="floatx")
    try:
        name = str(np.dtype(value))
    except TypeError:
        name = None
    if name not in _FLOAT_TYPES:
        raise ConfigurationError(
            f"unsupported float type {value!r}", {"expected": _FLOAT_TYPES}, field_path="floatx"
        )
    return name


def _check_epsilon(value) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"epsilon must be a number, got {value!r}", field_path="epsilon") from None
    if not value > 0:
        raise ConfigurationError(f"epsilon must be positive, got {value!r}", field_path="epsilon")
    return value


def _check_reduction(value) -> str:
    from .losses.reductions import Reduction

    try:
        return Reduction.of(value).value
    except InvalidArgumentError as e:
        raise ConfigurationError(str(e), field_path="reduction") from e


_settings: Dict[str, Any] = {
    "floatx": _check_floatx(os.environ.get("LOSSGRAPH_FLOATX", DEFAULT_CFG["floatx"])),
    "epsilon": _check_epsilon(os.environ.get("LOSSGRAPH_EPSILON", DEFAULT_CFG["epsilon"])),
}


def floatx() -> str:
    """Float type integer predictions are promoted to."""
    return _settings["floatx"]


def set_floatx(value) -> None:
    _settings["floatx"] = _check_floatx(value)


def epsilon() -> float:
    """Fuzz factor used to keep logs and divisions finite."""
    return _settings["epsilon"]


def set_epsilon(value) -> None:
    _settings["epsilon"] = _check_epsilon(value)


def _deep_update(base: Dict, extra: Mapping) -> Dict:
    out = copy.deepcopy(base)
    for k, v in (extra or {}).items():
        if isinstance(v, Mapping) and isinstance(out.get(k), dict):
            out[k] = _deep_update(out[k], v)
        else:
            out[k] = copy.deepcopy(v)
    return out


def load_config(source: Union[str, Path, Mapping, None] = None, apply: bool = True) -> Dict[str, Any]:
    """
    Merges a mapping or YAML file over DEFAULT_CFG and validates it.
    With apply=True the floatx/epsilon settings take effect immediately.
    """
    if source is None:
        raw: Mapping = {}
    elif isinstance(source, Mapping):
        raw = source
    else:
        path = Path(source)
        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except OSError as e:
            raise ConfigurationError(f"cannot read config file: {e}", {"path": str(path)}) from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"invalid YAML: {e}", {"path": str(path)}) from e
        if not isinstance(raw, Mapping):
            raise ConfigurationError("config file must hold a mapping", {"path": str(path)})

    unknown = set(raw) - set(DEFAULT_CFG)
    if unknown:
        raise ConfigurationError("unknown config keys", {"keys": sorted(unknown)})

    cfg = _deep_update(DEFAULT_CFG, raw)
    cfg["floatx"] = _check_floatx(cfg["floatx"])
    cfg["epsilon"] = _check_epsilon(cfg["epsilon"])
    if not isinstance(cfg["losses"], Mapping):
        raise ConfigurationError("must be a mapping of name -> loss entry", field_path="losses")
    cfg["reduction"] = _check_reduction(cfg["reduction"])

    if apply:
        set_floatx(cfg["floatx"])
        set_epsilon(cfg["epsilon"])
    logger.info("loaded config: floatx=%s epsilon=%g losses=%d",
                cfg["floatx"], cfg["epsilon"], len(cfg["losses"]))
    return cfg


def build_losses(cfg: Mapping[str, Any]) -> Dict[str, Any]:
    """Builds one Loss per entry of cfg["losses"], keyed by entry name."""
    from .losses.base import Loss

    default_reduction = cfg.get("reduction", DEFAULT_CFG["reduction"])
    out = {}
    for name, entry in (cfg.get("losses") or {}).items():
        path = f"losses.{name}"
        if not isinstance(entry, Mapping) or "kind" not in entry:
            raise ConfigurationError("loss entry needs a 'kind'", field_path=path)
        entry = dict(entry)
        entry.setdefault("name", name)
        entry.setdefault("reduction", default_reduction)
        try:
            out[name] = Loss.from_config(entry)
        except ConfigurationError as e:
            e.field_path = e.field_path or path
            raise
        except (TypeError, InvalidArgumentError) as e:
            # unexpected keyword for the loss function, or a bad reduction
            raise ConfigurationError(str(e), field_path=path) from e
    return out
