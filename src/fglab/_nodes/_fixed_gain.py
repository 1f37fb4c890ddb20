"""Fixed-gain node: ``out = A * in``."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar

import numpy as np

from fglab._errors import PreconditionError
from fglab._messages import Family, Gaussian
from fglab._rules import RuleSet, at_port, inbound_messages, uniform

from ._base import Node, NodeKind, frozen_gain
from ._gaussian_ops import gaussian_class

if TYPE_CHECKING:
    from fglab._rules import Inbound

FIXED_GAIN_RULES = RuleSet("fixed_gain")

_IN, _OUT = 0, 1
_GAUSSIAN = uniform(Family.GAUSSIAN, Family.MV_GAUSSIAN, arity=2)


@dataclass(frozen=True, slots=True, eq=False)
class FixedGainNode(Node):
    """Multiplication by a constant gain matrix ``A`` of shape ``(d_out, d_in)``."""

    kind: ClassVar[NodeKind] = NodeKind.FIXED_GAIN
    rules: ClassVar[RuleSet] = FIXED_GAIN_RULES
    ports: ClassVar[tuple[str, ...]] = ("in", "out")

    A: Any = field(default=1.0)

    def __post_init__(self) -> None:
        Node.__post_init__(self)
        object.__setattr__(self, "A", frozen_gain(self.A))


def _check_gain(A: np.ndarray, dimension: int, axis: int) -> None:  # noqa: N803
    if A.shape[axis] != dimension:
        msg = f"Gain of shape {A.shape} does not fit a message of dimension {dimension}"
        raise PreconditionError(msg)


def gain_forward(A: np.ndarray, message: Gaussian) -> Gaussian:  # noqa: N803
    """Push ``message`` through ``A`` in moment form."""
    _check_gain(A, message.dimension, axis=1)
    moment = message.to_moment()
    cls = gaussian_class(message, A.shape[0])
    return cls(m=A @ moment.m, V=A @ moment.V @ A.T)


def gain_backward(A: np.ndarray, message: Gaussian) -> Gaussian:  # noqa: N803
    """Pull ``message`` back through ``A`` in canonical form."""
    _check_gain(A, message.dimension, axis=0)
    canonical = message.to_canonical()
    cls = gaussian_class(message, A.shape[1])
    return cls(xi=A.T @ canonical.xi, W=A.T @ canonical.W @ A)


@FIXED_GAIN_RULES.register(Family.GAUSSIAN, Family.MV_GAUSSIAN, applicable=at_port(_OUT, _GAUSSIAN))
def sp_fixed_gain_gaussian_forward(node: Node, outbound_index: int, inbound: Inbound) -> Gaussian:  # noqa: ARG001
    assert isinstance(node, FixedGainNode)
    (message,) = inbound_messages(inbound)
    return gain_forward(node.A, message)  # type: ignore[arg-type]


@FIXED_GAIN_RULES.register(Family.GAUSSIAN, Family.MV_GAUSSIAN, applicable=at_port(_IN, _GAUSSIAN))
def sp_fixed_gain_gaussian_backward(node: Node, outbound_index: int, inbound: Inbound) -> Gaussian:  # noqa: ARG001
    assert isinstance(node, FixedGainNode)
    (message,) = inbound_messages(inbound)
    return gain_backward(node.A, message)  # type: ignore[arg-type]
