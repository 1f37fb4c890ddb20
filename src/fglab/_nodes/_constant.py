"""Constant node: a single port that always emits a predefined message."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from fglab._messages import Family, General, Message
from fglab._rules import ELIDED, RuleSet

from ._base import Node, NodeKind

if TYPE_CHECKING:
    from fglab._rules import Inbound, Signature

CONSTANT_RULES = RuleSet("constant")


@dataclass(frozen=True, slots=True, eq=False)
class ConstantNode(Node):
    """A source node holding a constant message, e.g. a prior or an observation."""

    kind: ClassVar[NodeKind] = NodeKind.CONSTANT
    rules: ClassVar[RuleSet] = CONSTANT_RULES
    ports: ClassVar[tuple[str, ...]] = ("out",)

    value: Message = field(default_factory=lambda: General(1.0))


def _only_port(outbound_index: int, signature: Signature) -> bool:
    return outbound_index == 0 and signature == (ELIDED,)


@CONSTANT_RULES.register(*Family, applicable=_only_port)
def sp_constant(node: Node, outbound_index: int, inbound: Inbound) -> Message:  # noqa: ARG001
    assert isinstance(node, ConstantNode)
    return node.value
