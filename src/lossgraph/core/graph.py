"""
Graph: owns symbolic nodes, hands out unique scoped names and runs fetches.

Running is a plain topological walk over numpy kernels; there is no
scheduling, caching between runs or gradient support.
"""

from __future__ import annotations

import logging
from collections import Counter
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Mapping, Optional

import numpy as np

from .errors import InvalidArgumentError, ShapeIncompatibleError
from .kernels import KERNELS
from .tensor import Tensor
from .utils import Shape, topo_sort

logger = logging.getLogger(__name__)


class Graph:
    def __init__(self, name: str = "graph"):
        self.name = name
        self._nodes: List[Tensor] = []
        self._by_name: Dict[str, Tensor] = {}
        self._name_counts: Counter = Counter()
        self._scopes: List[str] = []

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"<Graph {self.name!r} nodes={len(self._nodes)}>"

    @property
    def nodes(self) -> List[Tensor]:
        return list(self._nodes)

    def get(self, name: str) -> Tensor:
        try:
            return self._by_name[name]
        except KeyError:
            raise InvalidArgumentError(f"no node named {name!r}", {"graph": self.name}) from None

    # naming

    @contextmanager
    def name_scope(self, name: str) -> Iterator[str]:
        """Prefixes every node built inside the block with `name/`."""
        # reusing a scope name gives name_1, name_2, ... like node names do
        scope = self._unique("/".join(self._scopes + [name]))
        self._scopes.append(scope.rsplit("/", 1)[-1])
        try:
            yield "/".join(self._scopes)
        finally:
            self._scopes.pop()

    def _unique(self, name: str) -> str:
        n = self._name_counts[name]
        self._name_counts[name] += 1
        return name if n == 0 else f"{name}_{n}"

    def unique_name(self, base: str) -> str:
        return self._unique("/".join(self._scopes + [base]))

    # building

    def add_node(self, op: str, inputs=(), attrs: Optional[Dict[str, Any]] = None,
                 shape: Shape = None, dtype=np.float32, name: Optional[str] = None) -> Tensor:
        if op not in KERNELS:
            raise InvalidArgumentError(f"unknown op type {op!r}")
        for t in inputs:
            if t.graph is not self:
                raise InvalidArgumentError(
                    "input belongs to a different graph",
                    {"input": t.name, "graph": self.name},
                )
        node = Tensor(self, op, self.unique_name(name or op), inputs, attrs, shape, dtype)
        self._nodes.append(node)
        self._by_name[node.name] = node
        logger.debug("add %s shape=%s dtype=%s", node.name, shape, node.dtype)
        return node

    # running

    def run(self, fetches, feed_dict: Optional[Mapping] = None):
        """
        Evaluates `fetches` (a Tensor, or a list/tuple/dict of them) and
        returns numpy values in the same structure.
        Placeholders are looked up in `feed_dict`, keyed by Tensor or name.
        """
        if isinstance(fetches, Tensor):
            flat = [fetches]
        elif isinstance(fetches, dict):
            flat = list(fetches.values())
        elif isinstance(fetches, (list, tuple)):
            flat = list(fetches)
        else:
            raise InvalidArgumentError(f"cannot fetch {type(fetches).__name__}")
        for t in flat:
            if not isinstance(t, Tensor) or t.graph is not self:
                raise InvalidArgumentError(
                    "fetch is not a tensor of this graph", {"fetch": repr(t), "graph": self.name}
                )

        feeds = self._resolve_feeds(feed_dict or {})
        values: Dict[int, np.ndarray] = {}
        order = topo_sort(flat)
        logger.debug("run %d fetches over %d nodes", len(flat), len(order))
        for node in order:
            if node.op == "Placeholder":
                values[id(node)] = self._fed_value(node, feeds)
                continue
            args = [values[id(p)] for p in node._prev]
            try:
                with np.errstate(all="ignore"):
                    out = KERNELS[node.op](*args, **node.attrs)
            except ValueError as e:
                # unknown dims only get checked here, against the fed values
                raise ShapeIncompatibleError(
                    str(e), {"node": node.name, "shapes": [np.shape(a) for a in args]}
                ) from e
            values[id(node)] = np.asarray(out)

        if isinstance(fetches, Tensor):
            return values[id(fetches)]
        if isinstance(fetches, dict):
            return {k: values[id(t)] for k, t in fetches.items()}
        results = [values[id(t)] for t in flat]
        if hasattr(fetches, "_fields"):
            # namedtuple
            return type(fetches)(*results)
        return type(fetches)(results)

    def _resolve_feeds(self, feed_dict: Mapping) -> Dict[int, Any]:
        feeds = {}
        for key, value in feed_dict.items():
            node = self.get(key) if isinstance(key, str) else key
            if not isinstance(node, Tensor) or node.graph is not self:
                raise InvalidArgumentError("feed key is not a tensor of this graph", {"key": repr(key)})
            if node.op != "Placeholder":
                raise InvalidArgumentError("only placeholders can be fed", {"node": node.name})
            feeds[id(node)] = value
        return feeds

    @staticmethod
    def _fed_value(node: Tensor, feeds: Dict[int, Any]) -> np.ndarray:
        if id(node) not in feeds:
            raise InvalidArgumentError("no value fed for placeholder", {"placeholder": node.name})
        value = np.asarray(feeds[id(node)]).astype(node.dtype, copy=False)
        if node.shape is not None:
            ok = value.ndim == len(node.shape) and all(
                d is None or d == v for d, v in zip(node.shape, value.shape)
            )
            if not ok:
                raise ShapeIncompatibleError(
                    "fed value does not match placeholder shape",
                    {"placeholder": node.name, "expected": node.shape, "got": value.shape},
                )
        return value
