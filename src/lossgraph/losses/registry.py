# src/lossgraph/losses/registry.py
from __future__ import annotations

from typing import Callable, Dict, List, Tuple

from ..core.errors import UnknownLossError

# kind -> per-example loss function fn(tf, labels, predictions, **params)
_REGISTRY: Dict[str, Callable] = {}
# lowercased kind or alias -> kind
_LOOKUP: Dict[str, str] = {}


def register(kind: str, *aliases: str):
    def deco(fn: Callable) -> Callable:
        if kind in _REGISTRY:
            raise ValueError(f"loss kind {kind!r} already registered")
        _REGISTRY[kind] = fn
        for key in (kind, *aliases):
            _LOOKUP[key.lower()] = kind
        fn.kind = kind
        return fn
    return deco


def get(kind: str) -> Tuple[str, Callable]:
    """Returns (canonical kind, function); lookup ignores case and accepts aliases."""
    canonical = _LOOKUP.get(str(kind).lower())
    if canonical is None:
        raise UnknownLossError(f"unknown loss {kind!r}", {"available": available()})
    return canonical, _REGISTRY[canonical]


def available() -> List[str]:
    return sorted(_REGISTRY)
