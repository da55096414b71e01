# src/lossgraph/losses/regression.py
"""
Regression losses. Each returns per-example losses: the elementwise
error term averaged over the last axis.
"""
import math

from .. import config
from ..core.errors import InvalidArgumentError
from .registry import register
from .utils import prepare


@register("LogCosh", "log_cosh", "logcosh")
def log_cosh(tf, labels, predictions):
    """
    log(cosh(e)) for e = predictions - labels.

    Written as e + softplus(-2e) - log(2), which equals
    log((exp(e) + exp(-e)) / 2) but never overflows: for large |e| it
    tends to |e| - log(2).
    """
    labels, predictions = prepare(tf, labels, predictions)
    diff = predictions - labels
    logcosh = diff + tf.softplus(-2.0 * diff) - math.log(2.0)
    return tf.reduce_mean(logcosh, axis=-1)


@register("MeanSquaredError", "mse", "mean_squared_error")
def mean_squared_error(tf, labels, predictions):
    labels, predictions = prepare(tf, labels, predictions)
    return tf.reduce_mean(tf.square(predictions - labels), axis=-1)


@register("MeanAbsoluteError", "mae", "mean_absolute_error")
def mean_absolute_error(tf, labels, predictions):
    labels, predictions = prepare(tf, labels, predictions)
    return tf.reduce_mean(tf.abs(predictions - labels), axis=-1)


@register("MeanAbsolutePercentageError", "mape", "mean_absolute_percentage_error")
def mean_absolute_percentage_error(tf, labels, predictions):
    labels, predictions = prepare(tf, labels, predictions)
    # |label| floored at epsilon so zero labels don't divide by zero
    denom = tf.maximum(tf.abs(labels), config.epsilon())
    return 100.0 * tf.reduce_mean(tf.abs((labels - predictions) / denom), axis=-1)


@register("MeanSquaredLogarithmicError", "msle", "mean_squared_logarithmic_error")
def mean_squared_logarithmic_error(tf, labels, predictions):
    labels, predictions = prepare(tf, labels, predictions)
    eps = config.epsilon()
    first = tf.log1p(tf.maximum(predictions, eps))
    second = tf.log1p(tf.maximum(labels, eps))
    return tf.reduce_mean(tf.square(first - second), axis=-1)


@register("Huber", "huber")
def huber(tf, labels, predictions, delta=1.0):
    """Quadratic for |e| <= delta, linear beyond."""
    if not delta > 0:
        raise InvalidArgumentError("huber delta must be positive", {"delta": delta})
    labels, predictions = prepare(tf, labels, predictions)
    abs_error = tf.abs(predictions - labels)
    quadratic = tf.minimum(abs_error, delta)
    linear = abs_error - quadratic
    return tf.reduce_mean(0.5 * tf.square(quadratic) + delta * linear, axis=-1)
