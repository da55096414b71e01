"""
Ops: the graph-builder capability the losses are written against.

Every method returns a new symbolic Tensor; nothing is evaluated here.
Shapes and dtypes are inferred as nodes are added, so shape mismatches
surface while the graph is being built rather than when it runs.
"""

from __future__ import annotations

from typing import Optional, Sequence, Union

import numpy as np

from .errors import InvalidArgumentError, ShapeIncompatibleError, UnsupportedElementTypeError
from .graph import Graph
from .tensor import Tensor
from .utils import (
    as_dtype,
    broadcast_shapes,
    is_floating,
    normalize_axis,
    normalize_shape,
    reduced_shape,
)

Axis = Union[int, Sequence[int], None]


class Ops:
    def __init__(self, graph: Optional[Graph] = None):
        self.graph = graph if graph is not None else Graph()

    def __repr__(self) -> str:
        return f"Ops({self.graph!r})"

    def name_scope(self, name: str):
        return self.graph.name_scope(name)

    # sources

    def constant(self, value, dtype=None, name: Optional[str] = None) -> Tensor:
        arr = np.asarray(value, dtype=None if dtype is None else as_dtype(dtype))
        return self.graph.add_node(
            "Const", attrs={"value": arr}, shape=arr.shape, dtype=arr.dtype, name=name
        )

    def placeholder(self, dtype, shape=None, name: Optional[str] = None) -> Tensor:
        return self.graph.add_node(
            "Placeholder", shape=normalize_shape(shape), dtype=as_dtype(dtype), name=name
        )

    def convert(self, value, dtype=None, name: Optional[str] = None) -> Tensor:
        """Passes tensors of this graph through (casting if asked), wraps anything else as a constant."""
        if isinstance(value, Tensor):
            if value.graph is not self.graph:
                raise InvalidArgumentError(
                    "tensor belongs to a different graph", {"tensor": value.name}
                )
            if dtype is not None and value.dtype != as_dtype(dtype):
                return self.cast(value, dtype)
            return value
        return self.constant(value, dtype, name)

    def cast(self, x, dtype) -> Tensor:
        x = self.convert(x)
        dtype = as_dtype(dtype)
        if x.dtype == dtype:
            return x
        return self.graph.add_node("Cast", (x,), {"dtype": dtype}, x.shape, dtype)

    # elementwise

    def _unary(self, op: str, x, floating: bool = True) -> Tensor:
        x = self.convert(x)
        if floating and not is_floating(x.dtype):
            raise UnsupportedElementTypeError(
                f"{op} needs a floating point input", {"tensor": x.name, "dtype": str(x.dtype)}
            )
        return self.graph.add_node(op, (x,), shape=x.shape, dtype=x.dtype)

    def neg(self, x):
        return self._unary("Neg", x, floating=False)

    def abs(self, x):
        return self._unary("Abs", x, floating=False)

    def square(self, x):
        return self._unary("Square", x, floating=False)

    def sqrt(self, x):
        return self._unary("Sqrt", x)

    def exp(self, x):
        return self._unary("Exp", x)

    def log(self, x):
        return self._unary("Log", x)

    def log1p(self, x):
        return self._unary("Log1p", x)

    def softplus(self, x):
        return self._unary("Softplus", x)

    def sigmoid(self, x):
        return self._unary("Sigmoid", x)

    def log_sigmoid(self, x):
        return self._unary("LogSigmoid", x)

    def convert_binary_labels(self, x):
        return self._unary("ConvertBinaryLabels", x, floating=False)

    def _binary(self, op: str, x, y) -> Tensor:
        # python scalars / arrays take the dtype of the tensor they meet
        if isinstance(x, Tensor) and not isinstance(y, Tensor):
            y = self.convert(y, x.dtype)
        elif isinstance(y, Tensor) and not isinstance(x, Tensor):
            x = self.convert(x, y.dtype)
        else:
            x, y = self.convert(x), self.convert(y)
        dtype = np.result_type(x.dtype, y.dtype)
        x, y = self.cast(x, dtype), self.cast(y, dtype)
        try:
            shape = broadcast_shapes(x.shape, y.shape)
        except ShapeIncompatibleError as e:
            raise e.with_context(op=op, x=x.name, y=y.name)
        return self.graph.add_node(op, (x, y), shape=shape, dtype=dtype)

    def add(self, x, y):
        return self._binary("Add", x, y)

    def sub(self, x, y):
        return self._binary("Sub", x, y)

    def mul(self, x, y):
        return self._binary("Mul", x, y)

    def div(self, x, y):
        return self._binary("Div", x, y)

    def div_no_nan(self, x, y):
        return self._binary("DivNoNan", x, y)

    def maximum(self, x, y):
        return self._binary("Maximum", x, y)

    def minimum(self, x, y):
        return self._binary("Minimum", x, y)

    def clip(self, x, lo: float, hi: float) -> Tensor:
        x = self.convert(x)
        if lo > hi:
            raise InvalidArgumentError("clip bounds are reversed", {"lo": lo, "hi": hi})
        return self.graph.add_node(
            "Clip", (x,), {"lo": x.dtype.type(lo), "hi": x.dtype.type(hi)}, x.shape, x.dtype
        )

    # reductions

    def _reduce(self, op: str, x, axis: Axis, keepdims: bool) -> Tensor:
        x = self.convert(x)
        axes = normalize_axis(axis, x.rank)
        return self.graph.add_node(
            op, (x,), {"axis": axes, "keepdims": keepdims},
            reduced_shape(x.shape, axes, keepdims), x.dtype,
        )

    def reduce_sum(self, x, axis: Axis = None, keepdims: bool = False):
        return self._reduce("Sum", x, axis, keepdims)

    def reduce_mean(self, x, axis: Axis = None, keepdims: bool = False):
        return self._reduce("Mean", x, axis, keepdims)

    def size(self, x, dtype="int32") -> Tensor:
        x = self.convert(x)
        dtype = as_dtype(dtype)
        return self.graph.add_node("Size", (x,), {"dtype": dtype}, (), dtype)

    def l2_normalize(self, x, axis: int = -1) -> Tensor:
        x = self.convert(x)
        if not is_floating(x.dtype):
            raise UnsupportedElementTypeError(
                "l2_normalize needs a floating point input", {"tensor": x.name, "dtype": str(x.dtype)}
            )
        (axis,) = normalize_axis(axis, x.rank)
        return self.graph.add_node("L2Normalize", (x,), {"axis": axis}, x.shape, x.dtype)

    # shapes

    def squeeze(self, x, axis: int = -1) -> Tensor:
        x = self.convert(x)
        if x.shape is None:
            raise InvalidArgumentError("cannot squeeze a tensor of unknown rank", {"tensor": x.name})
        (axis,) = normalize_axis(axis, x.rank)
        if x.shape[axis] not in (1, None):
            raise ShapeIncompatibleError(
                "can only squeeze a dimension of size 1", {"tensor": x.name, "shape": x.shape, "axis": axis}
            )
        shape = x.shape[:axis] + x.shape[axis + 1:]
        return self.graph.add_node("Squeeze", (x,), {"axis": axis}, shape, x.dtype)

    def expand_dims(self, x, axis: int = -1) -> Tensor:
        x = self.convert(x)
        if x.shape is None:
            raise InvalidArgumentError("cannot expand a tensor of unknown rank", {"tensor": x.name})
        (axis,) = normalize_axis(axis, x.rank + 1)
        shape = x.shape[:axis] + (1,) + x.shape[axis:]
        return self.graph.add_node("ExpandDims", (x,), {"axis": axis}, shape, x.dtype)
