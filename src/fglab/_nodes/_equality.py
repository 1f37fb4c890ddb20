"""Equality-constraint node.

The equality node has a variable number (at least three) of symmetric,
unnamed ports and constrains all of them to carry the same value. Its
sum-product rules are those of node 1 in Table 4.1 of Korl (2005),
"A factor graph approach to signal modelling, system identification and
filtering", and Table 5.2 for the inverted gamma case.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

import numpy as np

from fglab._errors import PreconditionError
from fglab._messages import Family, Gamma, Gaussian, General, values_equal
from fglab._rules import RuleSet, inbound_messages, uniform

from ._base import Node, NodeKind
from ._gaussian_ops import canonical_sum, check_dimensions

if TYPE_CHECKING:
    from collections.abc import Sequence

    from fglab._rules import Inbound

_MIN_INTERFACES = 3

EQUALITY_RULES = RuleSet("equality")


@dataclass(frozen=True, slots=True, eq=False)
class EqualityNode(Node):
    """Equality constraint over ``arity`` ports.

    Example:
        >>> EqualityNode()  # three ports
        >>> EqualityNode(5, id="five_port_equality")

    """

    kind: ClassVar[NodeKind] = NodeKind.EQUALITY
    rules: ClassVar[RuleSet] = EQUALITY_RULES

    arity: int = 3

    def __post_init__(self) -> None:
        Node.__post_init__(self)
        if self.arity < _MIN_INTERFACES:
            msg = f"An equality node needs at least {_MIN_INTERFACES} interfaces, got {self.arity}"
            raise ValueError(msg)

    @property
    def num_interfaces(self) -> int:
        return self.arity


# =============================================================================
# Gaussian
# =============================================================================


def _equality_m(m_x: np.ndarray, m_y: np.ndarray, W_x: np.ndarray, W_y: np.ndarray) -> np.ndarray:  # noqa: N803
    return np.linalg.pinv(W_x + W_y) @ (W_x @ m_x + W_y @ m_y)


def _equality_V(V_x: np.ndarray, V_y: np.ndarray) -> np.ndarray:  # noqa: N802, N803
    return V_x @ np.linalg.pinv(V_x + V_y) @ V_y


@EQUALITY_RULES.register(
    Family.GAUSSIAN,
    Family.MV_GAUSSIAN,
    applicable=uniform(Family.GAUSSIAN, Family.MV_GAUSSIAN, min_arity=_MIN_INTERFACES),
)
def sp_equality_gaussian(node: Node, outbound_index: int, inbound: Inbound) -> Gaussian:  # noqa: ARG001
    """Combine Gaussian messages by multiplying their densities.

    With three ports the parameterisation of the result follows the inputs,
    so that no matrix has to be inverted when both inputs already hold
    ``(m, W)`` or ``(xi, V)``. Otherwise, and always with more than three
    ports, every input is converted to ``(xi, W)`` and summed.
    """
    return multiply_gaussians(inbound_messages(inbound))  # type: ignore[arg-type]


def multiply_gaussians(messages: Sequence[Gaussian]) -> Gaussian:
    """Product of Gaussian densities, in the cheapest available parameterisation."""
    check_dimensions(messages)
    cls = type(messages[0])

    if len(messages) == 2:  # noqa: PLR2004
        x, y = messages
        if x.has("m", "W") and y.has("m", "W"):
            return cls(m=_equality_m(x.m, y.m, x.W, y.W), W=x.W + y.W)
        if x.has("xi", "V") and y.has("xi", "V"):
            return cls(xi=x.xi + y.xi, V=_equality_V(x.V, y.V))

    xi, W = canonical_sum(messages)  # noqa: N806
    return cls(xi=xi, W=W)


# =============================================================================
# General
# =============================================================================


@EQUALITY_RULES.register(Family.GENERAL, applicable=uniform(Family.GENERAL, min_arity=_MIN_INTERFACES))
def sp_equality_general(node: Node, outbound_index: int, inbound: Inbound) -> General:  # noqa: ARG001
    """Pass the common value through, or a zero value when the inputs disagree.

    The zero value has the shape of the first inbound value and signals a
    conflict between the inputs; it is not an error.
    """
    messages: list[General] = inbound_messages(inbound)  # type: ignore[assignment]
    first = messages[0]
    if all(values_equal(msg.value, first.value) for msg in messages[1:]):
        return General(first.value)
    return first.zeros_like()


# =============================================================================
# Gamma
# =============================================================================


@EQUALITY_RULES.register(Family.GAMMA, applicable=uniform(Family.GAMMA, arity=_MIN_INTERFACES))
def sp_equality_gamma(node: Node, outbound_index: int, inbound: Inbound) -> Gamma:  # noqa: ARG001
    """Combine inverted gamma messages on a three-port equality node."""
    if len(inbound) != _MIN_INTERFACES:
        msg = f"The gamma equality rule is only defined for {_MIN_INTERFACES} interfaces, got {len(inbound)}"
        raise PreconditionError(msg)
    messages: list[Gamma] = inbound_messages(inbound)  # type: ignore[assignment]
    if not all(msg.inverted for msg in messages):
        msg = "The gamma equality rule is only defined for inverted gamma messages"
        raise PreconditionError(msg)
    return Gamma(
        a=1.0 + sum(msg.a for msg in messages),
        b=sum(msg.b for msg in messages),
        inverted=True,
    )
