"""Addition node: ``out = in1 + in2``."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from fglab._messages import Family, Gaussian
from fglab._rules import RuleSet, at_port, inbound_messages, uniform

from ._base import Node, NodeKind
from ._gaussian_ops import check_dimensions

if TYPE_CHECKING:
    from fglab._rules import Inbound, Signature

ADDITION_RULES = RuleSet("addition")

_OUT = 2
_GAUSSIANS = uniform(Family.GAUSSIAN, Family.MV_GAUSSIAN, arity=3)


@dataclass(frozen=True, slots=True, eq=False)
class AdditionNode(Node):
    """Deterministic sum of two inputs."""

    kind: ClassVar[NodeKind] = NodeKind.ADDITION
    rules: ClassVar[RuleSet] = ADDITION_RULES
    ports: ClassVar[tuple[str, ...]] = ("in1", "in2", "out")


@ADDITION_RULES.register(Family.GAUSSIAN, Family.MV_GAUSSIAN, applicable=at_port(_OUT, _GAUSSIANS))
def sp_addition_gaussian_forward(node: Node, outbound_index: int, inbound: Inbound) -> Gaussian:  # noqa: ARG001
    """Message towards ``out``: means and covariances add."""
    x, y = (msg.to_moment() for msg in inbound_messages(inbound))  # type: ignore[union-attr]
    check_dimensions([x, y])
    return type(x)(m=x.m + y.m, V=x.V + y.V)


def _towards_input(outbound_index: int, signature: Signature) -> bool:
    return outbound_index != _OUT and _GAUSSIANS(outbound_index, signature)


@ADDITION_RULES.register(Family.GAUSSIAN, Family.MV_GAUSSIAN, applicable=_towards_input)
def sp_addition_gaussian_backward(node: Node, outbound_index: int, inbound: Inbound) -> Gaussian:  # noqa: ARG001
    """Message towards ``in1`` or ``in2``: subtract the other input from ``out``."""
    other, out = (msg.to_moment() for msg in inbound_messages(inbound))  # type: ignore[union-attr]
    check_dimensions([other, out])
    return type(out)(m=out.m - other.m, V=out.V + other.V)
