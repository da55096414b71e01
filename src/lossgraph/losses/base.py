# src/lossgraph/losses/base.py
from __future__ import annotations

import inspect
import logging
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

from ..core.errors import ConfigurationError
from ..core.ops import Ops
from ..core.tensor import Tensor
from . import registry
from .reductions import Reduction, compute_weighted_loss
from .utils import resolve_ops

logger = logging.getLogger(__name__)


class Loss:
    """
    A named loss function bound to a reduction policy.

        loss = Loss("LogCosh", reduction="sum")
        result = loss(labels, predictions, sample_weight)   # symbolic Tensor
        result.evaluate()

    `kind` picks the per-example function from the registry (case-insensitive,
    aliases like "mse" work), `name` defaults to the kind and is used as the
    name scope of the nodes each call builds, and any extra keyword arguments
    (e.g. Huber's `delta`) are passed through to the function.

    Instances are immutable and keep no state between calls, so one Loss can
    be shared and called any number of times.
    """

    __slots__ = ("_kind", "_fn", "_name", "_reduction", "_params")

    def __init__(self, kind: str, name: Optional[str] = None,
                 reduction: Union[Reduction, str] = Reduction.AUTO, **params: Any):
        canonical, fn = registry.get(kind)
        # fail on bad policies / params here, before any graph work happens
        reduction = Reduction.of(reduction)
        inspect.signature(fn).bind(None, None, None, **params)
        object.__setattr__(self, "_kind", canonical)
        object.__setattr__(self, "_fn", fn)
        object.__setattr__(self, "_name", name or canonical)
        object.__setattr__(self, "_reduction", reduction)
        object.__setattr__(self, "_params", MappingProxyType(dict(params)))

    def __setattr__(self, key, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    @property
    def kind(self) -> str:
        return self._kind

    @property
    def name(self) -> str:
        return self._name

    @property
    def reduction(self) -> Reduction:
        return self._reduction

    @property
    def params(self) -> Mapping[str, Any]:
        return self._params

    def __call__(self, labels, predictions, sample_weight=None, tf: Optional[Ops] = None) -> Tensor:
        """
        Builds the loss for one batch and returns its (unevaluated) result.
        NONE keeps one value per example, the other policies give a scalar.
        """
        tf = tf if tf is not None else resolve_ops(predictions, labels, sample_weight)
        with tf.name_scope(self._name):
            losses = self._fn(tf, labels, predictions, **self._params)
            result = compute_weighted_loss(tf, losses, self._reduction, sample_weight)
        logger.debug("built %s (%s, reduction=%s) -> %s",
                     self._name, self._kind, self._reduction.value, result.name)
        return result

    def get_config(self) -> Dict[str, Any]:
        return {"kind": self._kind, "name": self._name,
                "reduction": self._reduction.value, **self._params}

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any]) -> "Loss":
        cfg = dict(cfg)
        if "kind" not in cfg:
            raise ConfigurationError("loss config needs a 'kind'", {"keys": sorted(cfg)})
        kind = cfg.pop("kind")
        name = cfg.pop("name", None)
        reduction = cfg.pop("reduction", Reduction.AUTO)
        return cls(kind, name=name, reduction=reduction, **cfg)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Loss):
            return NotImplemented
        return self.get_config() == other.get_config()

    def __hash__(self) -> int:
        return hash((self._kind, self._name, self._reduction))

    def __repr__(self) -> str:
        extra = "".join(f", {k}={v!r}" for k, v in self._params.items())
        return f"Loss({self._kind!r}, name={self._name!r}, reduction={self._reduction.value!r}{extra})"
