"""
lossgraph: named loss functions that build deferred computation graphs,
with a small numpy runtime to evaluate them.
"""
import logging

from . import config
from .core import (
    ConfigurationError,
    Graph,
    InvalidArgumentError,
    LossGraphError,
    Ops,
    ShapeIncompatibleError,
    Tensor,
    UnknownLossError,
    UnsupportedElementTypeError,
    UnsupportedReductionError,
)
from .losses import Loss, Reduction, compute_weighted_loss

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "config",
    "Graph",
    "Ops",
    "Tensor",
    "Loss",
    "Reduction",
    "compute_weighted_loss",
    "LossGraphError",
    "InvalidArgumentError",
    "ShapeIncompatibleError",
    "UnsupportedReductionError",
    "UnsupportedElementTypeError",
    "ConfigurationError",
    "UnknownLossError",
]
