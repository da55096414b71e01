"""
NumPy kernels backing the graph ops.

The graph runtime looks kernels up by op type in KERNELS and calls them with
the evaluated inputs followed by the node attributes as keyword arguments.
The transcendental ones are written in numerically stable form.
"""

from __future__ import annotations
from typing import Callable, Dict

import numpy as np

Array = np.ndarray


# Core numerically stable ops

def softplus(x: Array) -> Array:
    # softplus(x) = log(1 + exp(x)) = logaddexp(0, x), never overflows
    x = np.asarray(x)
    return np.logaddexp(np.zeros((), dtype=x.dtype), x)


def stable_sigmoid(logits: Array) -> Array:
    # piecewise so exp() only ever sees non-positive arguments
    x = np.asarray(logits)
    out = np.empty_like(x, dtype=np.float64)
    pos = x >= 0
    neg = ~pos
    out[pos] = 1.0 / (1.0 + np.exp(-x[pos]))
    ex = np.exp(x[neg])
    out[neg] = ex / (1.0 + ex)
    # NaN compares False on both sides of `x >= 0`, so it went down the neg
    # branch and came out NaN already
    return out.astype(x.dtype, copy=False)


def log_sigmoid(logits: Array) -> Array:
    # log(sigmoid(x)) = -softplus(-x)
    return -softplus(-np.asarray(logits))


def l2_normalize(x: Array, axis=-1, epsilon: float = 1e-12) -> Array:
    x = np.asarray(x)
    sq = np.sum(np.square(x), axis=axis, keepdims=True)
    return x / np.sqrt(np.maximum(sq, epsilon)).astype(x.dtype, copy=False)


def div_no_nan(x: Array, y: Array) -> Array:
    # x / y, but 0 wherever y == 0
    x, y = np.asarray(x), np.asarray(y)
    out_dtype = np.result_type(x, y)
    safe = np.where(y == 0, np.ones((), dtype=out_dtype), y)
    return np.where(y == 0, np.zeros((), dtype=out_dtype), x / safe).astype(out_dtype, copy=False)


def convert_binary_labels(labels: Array) -> Array:
    # hinge losses want {-1, 1}; {0, 1} labels are mapped over, anything else
    # is passed through untouched
    labels = np.asarray(labels)
    if labels.size and np.all((labels == 0) | (labels == 1)):
        return (2 * labels - 1).astype(labels.dtype, copy=False)
    return labels


def _const(value):
    return value


def _placeholder(**_):
    # placeholders are substituted with fed values before dispatch
    raise RuntimeError("placeholder reached kernel dispatch")


def _cast(x, dtype):
    return np.asarray(x).astype(dtype, copy=False)


def _reduce(fn):
    def kernel(x, axis=None, keepdims=False):
        x = np.asarray(x)
        out = fn(x, axis=axis, keepdims=keepdims)
        return np.asarray(out, dtype=x.dtype)
    return kernel


def _size(x, dtype):
    return np.asarray(np.asarray(x).size, dtype=dtype)


def _clip(x, lo, hi):
    return np.clip(x, lo, hi)


KERNELS: Dict[str, Callable[..., Array]] = {
    "Const": _const,
    "Placeholder": _placeholder,
    "Cast": _cast,
    # unary
    "Neg": np.negative,
    "Abs": np.abs,
    "Square": np.square,
    "Sqrt": np.sqrt,
    "Exp": np.exp,
    "Log": np.log,
    "Log1p": np.log1p,
    "Softplus": softplus,
    "Sigmoid": stable_sigmoid,
    "LogSigmoid": log_sigmoid,
    "ConvertBinaryLabels": convert_binary_labels,
    # binary
    "Add": np.add,
    "Sub": np.subtract,
    "Mul": np.multiply,
    "Div": np.true_divide,
    "DivNoNan": div_no_nan,
    "Maximum": np.maximum,
    "Minimum": np.minimum,
    "Clip": _clip,
    # reductions and shapes
    "Sum": _reduce(np.sum),
    "Mean": _reduce(np.mean),
    "Size": _size,
    "Squeeze": lambda x, axis: np.squeeze(x, axis=axis),
    "ExpandDims": lambda x, axis: np.expand_dims(x, axis),
    "L2Normalize": l2_normalize,
}
