# src/lossgraph/losses/probabilistic.py
from .. import config
from ..core.errors import InvalidArgumentError
from .registry import register
from .utils import prepare


@register("Poisson", "poisson")
def poisson(tf, labels, predictions):
    labels, predictions = prepare(tf, labels, predictions)
    return tf.reduce_mean(predictions - labels * tf.log(predictions + config.epsilon()), axis=-1)


@register("KLDivergence", "kld", "kl_divergence", "kullback_leibler_divergence")
def kl_divergence(tf, labels, predictions):
    # both sides are treated as distributions over the last axis
    labels, predictions = prepare(tf, labels, predictions)
    eps = config.epsilon()
    labels = tf.clip(labels, eps, 1.0)
    predictions = tf.clip(predictions, eps, 1.0)
    return tf.reduce_sum(labels * tf.log(labels / predictions), axis=-1)


@register("BinaryCrossentropy", "bce", "binary_crossentropy")
def binary_crossentropy(tf, labels, predictions, from_logits=False, label_smoothing=0.0):
    """
    With from_logits the predictions are raw scores and the loss is built
    from log-sigmoid terms; otherwise they are probabilities clipped to
    [eps, 1 - eps]. label_smoothing pulls labels towards 0.5.
    """
    if not 0.0 <= label_smoothing <= 1.0:
        raise InvalidArgumentError(
            "label_smoothing must be in [0, 1]", {"label_smoothing": label_smoothing}
        )
    labels, predictions = prepare(tf, labels, predictions)
    if label_smoothing:
        labels = labels * (1.0 - label_smoothing) + 0.5 * label_smoothing

    if from_logits:
        # -(y log s(x) + (1 - y) log s(-x))
        bce = -(labels * tf.log_sigmoid(predictions) + (1.0 - labels) * tf.log_sigmoid(-predictions))
    else:
        eps = config.epsilon()
        p = tf.clip(predictions, eps, 1.0 - eps)
        bce = -(labels * tf.log(p) + (1.0 - labels) * tf.log(1.0 - p))
    return tf.reduce_mean(bce, axis=-1)


@register("CosineSimilarity", "cosine_similarity")
def cosine_similarity(tf, labels, predictions, axis=-1):
    # negated so that minimising the loss maximises similarity
    labels, predictions = prepare(tf, labels, predictions)
    labels = tf.l2_normalize(labels, axis=axis)
    predictions = tf.l2_normalize(predictions, axis=axis)
    return -tf.reduce_sum(labels * predictions, axis=axis)
