from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np

from .utils import Shape, num_elements

"""
Symbolic Tensor
A handle to a node in a Graph. It does not hold numbers, it records
- op: the operation that produces it (Add, Mul, Const, ...)
- _prev: the tensors it was computed from, so the graph can be walked
- attrs: op parameters (axis, constant value, target dtype, ...)
- shape / dtype: statically inferred when the node is built

Nothing is computed until the graph is run:

    tf = Ops()
    x = tf.placeholder("float32", (None, 2))
    y = (x - 1.0) * 2.0
    y.evaluate({x: [[1., 2.]]})   # -> [[0., 2.]]

Operator overloads just forward to the Ops builder of the tensor's graph,
so `x - 1.0` and `tf.sub(x, 1.0)` build the same node.
"""
class Tensor:
    __slots__ = ("graph", "op", "name", "attrs", "shape", "dtype", "_prev")

    def __init__(self, graph, op: str, name: str, inputs=(), attrs: Optional[Dict[str, Any]] = None,
                 shape: Shape = None, dtype=np.float32):
        self.graph = graph
        self.op = op
        self.name = name
        self.attrs = dict(attrs or {})
        self.shape = shape
        self.dtype = np.dtype(dtype)
        self._prev: Tuple[Tensor, ...] = tuple(inputs)  # tuple over set to keep operand order

    @property
    def inputs(self) -> Tuple["Tensor", ...]:
        return self._prev

    @property
    def rank(self) -> Optional[int]:
        return None if self.shape is None else len(self.shape)

    @property
    def size(self) -> Optional[int]:
        """Static element count, None if any dim is unknown."""
        return num_elements(self.shape)

    def evaluate(self, feed_dict=None) -> np.ndarray:
        return self.graph.run(self, feed_dict)

    def _ops(self):
        from .ops import Ops
        return Ops(self.graph)

    def __add__(self, other):
        return self._ops().add(self, other)

    def __radd__(self, other):
        return self._ops().add(other, self)

    def __sub__(self, other):
        return self._ops().sub(self, other)

    def __rsub__(self, other):
        return self._ops().sub(other, self)

    def __mul__(self, other):
        return self._ops().mul(self, other)

    def __rmul__(self, other):
        return self._ops().mul(other, self)

    def __truediv__(self, other):
        return self._ops().div(self, other)

    def __rtruediv__(self, other):
        return self._ops().div(other, self)

    def __neg__(self):
        return self._ops().neg(self)

    def __abs__(self):
        return self._ops().abs(self)

    def __repr__(self) -> str:
        shape = "<unknown>" if self.shape is None else self.shape
        return f"<Tensor {self.name!r} op={self.op} shape={shape} dtype={self.dtype}>"
