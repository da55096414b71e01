import numpy as np
import pytest

from lossgraph import Loss, config, losses
from lossgraph.core.errors import InvalidArgumentError

rng = np.random.default_rng(42)
Y = rng.uniform(0.1, 1.0, size=(4, 3))
P = rng.uniform(0.1, 1.0, size=(4, 3))
EPS = 1e-7


def per_example(kind, labels=Y, predictions=P, **params):
    return Loss(kind, reduction="none", **params)(labels, predictions).evaluate()


def test_registry_lists_every_kind():
    assert losses.available() == sorted([
        "BinaryCrossentropy", "CosineSimilarity", "Hinge", "Huber", "KLDivergence",
        "LogCosh", "MeanAbsoluteError", "MeanAbsolutePercentageError",
        "MeanSquaredError", "MeanSquaredLogarithmicError", "Poisson", "SquaredHinge",
    ])
    assert losses.get("MSE")[0] == "MeanSquaredError"


def test_mse_mae():
    np.testing.assert_allclose(per_example("mse"), np.mean((P - Y) ** 2, axis=-1))
    np.testing.assert_allclose(per_example("mae"), np.mean(np.abs(P - Y), axis=-1))


def test_mape():
    expected = 100.0 * np.mean(np.abs((Y - P) / np.maximum(np.abs(Y), EPS)), axis=-1)
    np.testing.assert_allclose(per_example("mape"), expected)
    # zero labels don't blow up
    assert np.all(np.isfinite(per_example("mape", labels=np.zeros((2, 2)), predictions=np.ones((2, 2)))))


def test_msle():
    expected = np.mean((np.log1p(np.maximum(P, EPS)) - np.log1p(np.maximum(Y, EPS))) ** 2, axis=-1)
    np.testing.assert_allclose(per_example("msle"), expected)


def test_huber():
    labels = np.array([[0.0, 0.0, 0.0]])
    predictions = np.array([[0.5, 1.0, 3.0]])
    # quadratic 0.125, boundary 0.5, linear 0.5 + 2.0
    np.testing.assert_allclose(per_example("huber", labels, predictions), [(0.125 + 0.5 + 2.5) / 3])
    np.testing.assert_allclose(
        per_example("huber", labels, predictions, delta=2.0), [(0.125 + 0.5 + (2.0 + 2.0)) / 3]
    )
    with pytest.raises(InvalidArgumentError):
        Loss("huber", delta=0.0)(labels, predictions)


def test_poisson():
    expected = np.mean(P - Y * np.log(P + EPS), axis=-1)
    np.testing.assert_allclose(per_example("poisson"), expected)


def test_kl_divergence():
    y = Y / Y.sum(axis=-1, keepdims=True)
    p = P / P.sum(axis=-1, keepdims=True)
    np.testing.assert_allclose(per_example("kld", y, p), np.sum(y * np.log(y / p), axis=-1))
    np.testing.assert_allclose(per_example("kld", y, y), np.zeros(4), atol=1e-12)


def test_binary_crossentropy_probabilities_and_logits_agree():
    labels = np.array([[0.0, 1.0, 1.0, 0.0]])
    logits = np.array([[-2.0, 3.0, 0.5, 1.0]])
    probs = 1.0 / (1.0 + np.exp(-logits))
    expected = -np.mean(labels * np.log(probs) + (1 - labels) * np.log(1 - probs), axis=-1)
    np.testing.assert_allclose(per_example("bce", labels, probs), expected, rtol=1e-6)
    np.testing.assert_allclose(per_example("bce", labels, logits, from_logits=True), expected, rtol=1e-6)


def test_binary_crossentropy_extreme_logits_stay_finite():
    out = per_example("bce", [[1.0, 0.0]], [[-1000.0, 1000.0]], from_logits=True)
    np.testing.assert_allclose(out, [1000.0])


def test_binary_crossentropy_label_smoothing():
    labels = np.array([[1.0, 0.0]])
    probs = np.array([[0.9, 0.2]])
    smoothed = labels * 0.8 + 0.1
    expected = -np.mean(smoothed * np.log(probs) + (1 - smoothed) * np.log(1 - probs), axis=-1)
    np.testing.assert_allclose(per_example("bce", labels, probs, label_smoothing=0.2), expected, rtol=1e-6)
    with pytest.raises(InvalidArgumentError):
        Loss("bce", label_smoothing=1.5)(labels, probs)


def test_cosine_similarity():
    np.testing.assert_allclose(per_example("cosine_similarity", Y, 3.0 * Y), -np.ones(4), rtol=1e-6)
    np.testing.assert_allclose(per_example("cosine_similarity", [[1.0, 0.0]], [[0.0, 1.0]]), [0.0], atol=1e-12)


def test_hinge_converts_binary_labels():
    labels01 = np.array([[0.0, 1.0, 1.0]])
    labels_pm = 2 * labels01 - 1
    predictions = np.array([[0.3, -0.5, 2.0]])
    expected = np.mean(np.maximum(1 - labels_pm * predictions, 0), axis=-1)
    np.testing.assert_allclose(per_example("hinge", labels01, predictions), expected)
    np.testing.assert_allclose(per_example("hinge", labels_pm, predictions), expected)
    np.testing.assert_allclose(
        per_example("squared_hinge", labels01, predictions),
        np.mean(np.maximum(1 - labels_pm * predictions, 0) ** 2, axis=-1),
    )


def test_epsilon_setting_is_used(monkeypatch):
    monkeypatch.setitem(config._settings, "epsilon", 0.5)
    out = per_example("mape", labels=np.zeros((1, 1)), predictions=np.ones((1, 1)))
    np.testing.assert_allclose(out, [200.0])
