# src/lossgraph/losses/__init__.py
from .reductions import Reduction, compute_weighted_loss
from .registry import available, get, register
from .base import Loss
from .regression import (
    huber,
    log_cosh,
    mean_absolute_error,
    mean_absolute_percentage_error,
    mean_squared_error,
    mean_squared_logarithmic_error,
)
from .probabilistic import binary_crossentropy, cosine_similarity, kl_divergence, poisson
from .hinge import hinge, squared_hinge

__all__ = [
    "Loss",
    "Reduction",
    "compute_weighted_loss",
    "register",
    "get",
    "available",
    "log_cosh",
    "mean_squared_error",
    "mean_absolute_error",
    "mean_absolute_percentage_error",
    "mean_squared_logarithmic_error",
    "huber",
    "poisson",
    "kl_divergence",
    "binary_crossentropy",
    "cosine_similarity",
    "hinge",
    "squared_hinge",
]
