# src/lossgraph/losses/reductions.py
from __future__ import annotations

from enum import Enum
from typing import Union

from ..core.errors import ShapeIncompatibleError, UnsupportedReductionError
from ..core.ops import Ops
from ..core.tensor import Tensor
from ..core.utils import can_broadcast_to, ensure_numeric


class Reduction(Enum):
    """How per-example losses collapse into the returned value."""
    AUTO = "auto"                                # same as SUM_OVER_BATCH_SIZE
    NONE = "none"                                # per-example losses, unreduced
    SUM = "sum"                                  # scalar sum
    SUM_OVER_BATCH_SIZE = "sum_over_batch_size"  # scalar sum / element count

    @classmethod
    def of(cls, value: Union["Reduction", str]) -> "Reduction":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise UnsupportedReductionError(
            f"unsupported reduction {value!r}", {"expected": [r.value for r in cls]}
        )


def reconcile_weights(tf: Ops, losses: Tensor, sample_weight) -> Tensor:
    """
    Lines sample weights up with the loss tensor: a trailing size-1 dim is
    dropped, a missing trailing dim is added, then the weights must broadcast
    to the loss shape without widening it.
    """
    weights = tf.convert(sample_weight)
    ensure_numeric(weights.dtype, "sample_weight")
    weights = tf.cast(weights, losses.dtype)
    if weights.rank is not None and losses.rank is not None and weights.rank > 0:
        diff = weights.rank - losses.rank
        if diff == 1 and weights.shape[-1] in (1, None):
            weights = tf.squeeze(weights, -1)
        elif diff == -1:
            weights = tf.expand_dims(weights, -1)
    if not can_broadcast_to(weights.shape, losses.shape):
        raise ShapeIncompatibleError(
            "sample_weight cannot be broadcast to the loss shape",
            {"sample_weight": weights.shape, "losses": losses.shape},
        )
    return weights


def compute_weighted_loss(tf: Ops, losses: Tensor, reduction: Union[Reduction, str] = Reduction.AUTO,
                          sample_weight=None) -> Tensor:
    reduction = Reduction.of(reduction)
    if sample_weight is not None:
        losses = losses * reconcile_weights(tf, losses, sample_weight)
    if reduction is Reduction.NONE:
        return losses
    total = tf.reduce_sum(losses)
    if reduction is Reduction.SUM:
        return total
    # AUTO / SUM_OVER_BATCH_SIZE: mean over loss elements, weights only scale
    return tf.div_no_nan(total, tf.size(losses, losses.dtype))
