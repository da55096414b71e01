# src/lossgraph/core/errors.py
"""
Exception hierarchy for graph construction, loss invocation and configuration.

Every error carries a message plus a context dict so callers can see which
shapes, dtypes or config fields were involved.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class LossGraphError(Exception):
    """Base class for all lossgraph errors."""
    message: str
    context: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        if not self.context:
            return self.message
        ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        return f"{self.message} [{ctx}]"

    def with_context(self, **kwargs: Any) -> "LossGraphError":
        self.context.update(kwargs)
        return self


@dataclass
class InvalidArgumentError(LossGraphError):
    """An argument cannot be used to build or run the requested computation."""


@dataclass
class ShapeIncompatibleError(InvalidArgumentError):
    """Shapes cannot be broadcast together."""


@dataclass
class UnsupportedReductionError(InvalidArgumentError):
    """Reduction policy is not one of the known values."""


@dataclass
class UnsupportedElementTypeError(InvalidArgumentError):
    """Element type is not a real numeric type."""


@dataclass
class ConfigurationError(LossGraphError):
    """Invalid configuration mapping or file."""
    field_path: str = ""

    def __str__(self) -> str:
        base = super().__str__()
        return f"[{self.field_path}] {base}" if self.field_path else base


@dataclass
class UnknownLossError(ConfigurationError):
    """No loss is registered under the requested kind."""
