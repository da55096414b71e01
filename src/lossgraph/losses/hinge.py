# src/lossgraph/losses/hinge.py
from .registry import register
from .utils import prepare


def _margin(tf, labels, predictions):
    labels, predictions = prepare(tf, labels, predictions)
    labels = tf.convert_binary_labels(labels)
    return tf.maximum(1.0 - labels * predictions, 0.0)


@register("Hinge", "hinge")
def hinge(tf, labels, predictions):
    """Labels are expected in {-1, 1}; {0, 1} labels are converted."""
    return tf.reduce_mean(_margin(tf, labels, predictions), axis=-1)


@register("SquaredHinge", "squared_hinge")
def squared_hinge(tf, labels, predictions):
    return tf.reduce_mean(tf.square(_margin(tf, labels, predictions)), axis=-1)
