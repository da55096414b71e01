"""
Input preparation shared by every loss function
"""

from __future__ import annotations
from typing import Tuple

import numpy as np

from .. import config
from ..core.ops import Ops
from ..core.tensor import Tensor
from ..core.utils import ensure_numeric, is_floating


def resolve_ops(*values) -> Ops:
    # Build in the graph of the first symbolic argument. Plain arrays on
    # their own get a fresh graph so losses can be evaluated on numpy data.
    for v in values:
        if isinstance(v, Tensor):
            return Ops(v.graph)
    return Ops()


def remove_squeezable_dimensions(tf: Ops, labels: Tensor, predictions: Tensor) -> Tuple[Tensor, Tensor]:
    # (batch, 1) vs (batch,) is a common mismatch, drop the trailing 1
    if labels.rank is None or predictions.rank is None:
        return labels, predictions
    diff = predictions.rank - labels.rank
    if diff == 1 and predictions.shape[-1] == 1:
        predictions = tf.squeeze(predictions, -1)
    elif diff == -1 and labels.shape[-1] == 1:
        labels = tf.squeeze(labels, -1)
    return labels, predictions


def prepare(tf: Ops, labels, predictions) -> Tuple[Tensor, Tensor]:
    """
    Converts both inputs into tensors of `tf`'s graph, checks they are real
    numeric, promotes integer predictions to config.floatx() and casts the
    labels to the prediction type.
    """
    predictions = tf.convert(predictions)
    ensure_numeric(predictions.dtype, "predictions")
    if not is_floating(predictions.dtype):
        predictions = tf.cast(predictions, config.floatx())

    labels = tf.convert(labels)
    # bool labels are fine for classification-style losses
    if labels.dtype != np.bool_:
        ensure_numeric(labels.dtype, "labels")
    labels = tf.cast(labels, predictions.dtype)
    return remove_squeezable_dimensions(tf, labels, predictions)
