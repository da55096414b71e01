import numpy as np
from typing import Optional, Sequence, Tuple, Union

from .errors import ShapeIncompatibleError, UnsupportedElementTypeError

# static shapes: None for unknown rank, None entries for unknown dims
Shape = Optional[Tuple[Optional[int], ...]]


def as_dtype(dtype) -> np.dtype:
    """Normalizes a dtype-like (string, numpy type, np.dtype) to np.dtype."""
    try:
        return np.dtype(dtype)
    except TypeError as e:
        raise UnsupportedElementTypeError(f"not a dtype: {dtype!r}") from e


def is_numeric(dtype) -> bool:
    """Real integer or floating point; bool and complex don't count."""
    dtype = np.dtype(dtype)
    return dtype.kind in "iuf"


def is_floating(dtype) -> bool:
    return np.dtype(dtype).kind == "f"


def ensure_numeric(dtype, what: str = "tensor") -> np.dtype:
    dtype = np.dtype(dtype)
    if not is_numeric(dtype):
        raise UnsupportedElementTypeError(
            f"{what} must have a real numeric element type", {"dtype": str(dtype)}
        )
    return dtype


def normalize_shape(shape) -> Shape:
    if shape is None:
        return None
    if isinstance(shape, (int, np.integer)):
        shape = (shape,)
    return tuple(None if d is None or d < 0 else int(d) for d in shape)


def broadcast_shapes(a: Shape, b: Shape) -> Shape:
    """
    Static counterpart of numpy broadcasting.
    Unknown dims stay unknown unless the other side pins them to something > 1.
    """
    if a is None or b is None:
        return None
    ndim = max(len(a), len(b))
    a = (1,) * (ndim - len(a)) + tuple(a)
    b = (1,) * (ndim - len(b)) + tuple(b)
    out = []
    for da, db in zip(a, b):
        if da == 1:
            out.append(db)
        elif db == 1:
            out.append(da)
        elif da is None:
            out.append(db)
        elif db is None or da == db:
            out.append(da)
        else:
            raise ShapeIncompatibleError(
                "shapes are not broadcast-compatible", {"a": a, "b": b}
            )
    return tuple(out)


def can_broadcast_to(shape: Shape, target: Shape) -> bool:
    """True if `shape` broadcasts to exactly `target` (target is not widened)."""
    if shape is None or target is None:
        return True
    if len(shape) > len(target):
        return False
    for ds, dt in zip(reversed(shape), reversed(target)):
        if ds == 1 or ds is None or dt is None or ds == dt:
            continue
        return False
    return True


def normalize_axis(axis: Union[int, Sequence[int], None], ndim: Optional[int]):
    if axis is None:
        return None
    axes = (axis,) if isinstance(axis, (int, np.integer)) else tuple(axis)
    if ndim is None:
        return tuple(int(a) for a in axes)
    out = []
    for a in axes:
        if not -ndim <= a < max(ndim, 1):
            raise ShapeIncompatibleError(
                "axis out of range", {"axis": int(a), "ndim": ndim}
            )
        out.append(int(a) % max(ndim, 1))
    return tuple(sorted(set(out)))


def reduced_shape(shape: Shape, axes, keepdims: bool) -> Shape:
    if shape is None:
        return None
    if axes is None:
        return (1,) * len(shape) if keepdims else ()
    if keepdims:
        return tuple(1 if i in axes else d for i, d in enumerate(shape))
    return tuple(d for i, d in enumerate(shape) if i not in axes)


def num_elements(shape: Shape) -> Optional[int]:
    if shape is None or any(d is None for d in shape):
        return None
    return int(np.prod(shape, dtype=np.int64))


def topo_sort(root) -> list:
    """
    Performs a topological sort of the computation graph rooted at `root`
    (a tensor or a sequence of tensors), returning nodes inputs-first so
    every node is evaluated after the nodes it depends on.
    """
    roots = root if isinstance(root, (list, tuple)) else [root]
    visited = set()
    order = []

    # iterative DFS, loss graphs can get deep when losses are chained
    for r in roots:
        stack = [(r, False)]
        while stack:
            v, expanded = stack.pop()
            if expanded:
                order.append(v)
                continue
            if id(v) in visited:
                continue
            visited.add(id(v))
            stack.append((v, True))
            for p in reversed(v._prev):
                if id(p) not in visited:
                    stack.append((p, False))
    return order
