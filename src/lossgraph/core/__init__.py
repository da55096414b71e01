from .errors import (
    ConfigurationError,
    InvalidArgumentError,
    LossGraphError,
    ShapeIncompatibleError,
    UnknownLossError,
    UnsupportedElementTypeError,
    UnsupportedReductionError,
)
from .graph import Graph
from .ops import Ops
from .tensor import Tensor

__all__ = [
    "Graph",
    "Ops",
    "Tensor",
    "LossGraphError",
    "InvalidArgumentError",
    "ShapeIncompatibleError",
    "UnsupportedReductionError",
    "UnsupportedElementTypeError",
    "ConfigurationError",
    "UnknownLossError",
]
