"""Base class for factor nodes."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from enum import StrEnum, auto
from itertools import count
from typing import TYPE_CHECKING, Any, ClassVar

import numpy as np

if TYPE_CHECKING:
    from fglab._rules import RuleSet, Signature, UpdateRule


class NodeKind(StrEnum):
    """The kind of a factor node."""

    EQUALITY = auto()
    CONSTANT = auto()
    ADDITION = auto()
    FIXED_GAIN = auto()
    GAIN_EQUALITY = auto()


_id_counters: defaultdict[NodeKind, count[int]] = defaultdict(lambda: count(1))


def generate_node_id(kind: NodeKind) -> str:
    """Generate a fresh node id such as ``equality3``."""
    return f"{kind}{next(_id_counters[kind])}"


@dataclass(frozen=True, slots=True, eq=False, kw_only=True)
class Node:
    """A factor node: a kind, static parameters and a fixed set of ports.

    Nodes are immutable descriptions. The per-port state (partner, message,
    validity) lives in the :class:`~fglab.FactorGraph` that holds the node,
    so a node can be inspected or replaced without touching cached messages.

    Attributes:
        id: Unique identifier within a graph. Generated from the node kind
            when omitted.

    """

    kind: ClassVar[NodeKind]
    rules: ClassVar[RuleSet]
    ports: ClassVar[tuple[str, ...]] = ()

    id: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            object.__setattr__(self, "id", generate_node_id(self.kind))

    @property
    def num_interfaces(self) -> int:
        return len(self.ports)

    def port_index(self, port: int | str) -> int:
        """Resolve a port name or index to an index.

        Raises:
            IndexError: If an index is out of range.
            KeyError: If the node has no port with the given name.

        """
        if isinstance(port, str):
            try:
                return self.ports.index(port)
            except ValueError:
                msg = f"{self.kind} node '{self.id}' has no port named '{port}'"
                raise KeyError(msg) from None
        if not 0 <= port < self.num_interfaces:
            msg = f"{self.kind} node '{self.id}' has no interface {port} (it has {self.num_interfaces})"
            raise IndexError(msg)
        return port

    def resolve_rule(self, outbound_index: int, signature: Signature) -> UpdateRule:
        return self.rules.resolve(outbound_index, signature)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"


def frozen_gain(value: Any) -> np.ndarray:
    """Copy a scalar or matrix gain into a read-only 2-D float array."""
    arr = np.atleast_2d(np.array(value, dtype=float))
    if arr.ndim != 2:  # noqa: PLR2004
        msg = f"Gain must be a scalar or a matrix, got shape {arr.shape}"
        raise ValueError(msg)
    arr.flags.writeable = False
    return arr
