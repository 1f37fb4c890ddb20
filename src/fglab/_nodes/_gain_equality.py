"""Composite gain-equality node: ``A^-1 * out = in1 = in2``.

Combines an equality node and a fixed-gain node into one factor
for computational efficiency::

         _________
     in1 |       | in2
    -----|->[=]<-|-----
         |   |   |
         |   v   |
         |  [A]  |
         |___|___|
             | out
             v
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar

import numpy as np

from fglab._errors import PreconditionError
from fglab._messages import Family, Gaussian, inverse
from fglab._rules import RuleSet, at_port, inbound_messages, uniform

from ._base import Node, NodeKind, frozen_gain
from ._equality import multiply_gaussians
from ._fixed_gain import gain_forward
from ._gaussian_ops import check_dimensions

if TYPE_CHECKING:
    from fglab._rules import Inbound, Signature

logger = logging.getLogger(__name__)

GAIN_EQUALITY_RULES = RuleSet("gain_equality")

_OUT = 2
_GAUSSIANS = uniform(Family.GAUSSIAN, Family.MV_GAUSSIAN, arity=3)


@dataclass(frozen=True, slots=True, eq=False)
class GainEqualityNode(Node):
    """Equality between ``in1`` and ``in2`` followed by a square gain ``A`` towards ``out``.

    ``A_inv`` is pre-computed when ``A`` is invertible, and ``None`` otherwise.
    """

    kind: ClassVar[NodeKind] = NodeKind.GAIN_EQUALITY
    rules: ClassVar[RuleSet] = GAIN_EQUALITY_RULES
    ports: ClassVar[tuple[str, ...]] = ("in1", "in2", "out")

    A: Any = field(default=1.0)
    A_inv: np.ndarray | None = field(init=False, default=None, repr=False)

    def __post_init__(self) -> None:
        Node.__post_init__(self)
        A = frozen_gain(self.A)  # noqa: N806
        if A.shape[0] != A.shape[1]:
            msg = f"Gain-equality node '{self.id}' needs a square gain, got shape {A.shape}"
            raise ValueError(msg)
        object.__setattr__(self, "A", A)
        try:
            A_inv = np.linalg.inv(A)  # noqa: N806
        except np.linalg.LinAlgError:
            logger.warning(
                "The gain of %s '%s' is not invertible. This might cause problems.",
                self.kind,
                self.id,
            )
        else:
            A_inv.flags.writeable = False
            object.__setattr__(self, "A_inv", A_inv)


@GAIN_EQUALITY_RULES.register(Family.GAUSSIAN, Family.MV_GAUSSIAN, applicable=at_port(_OUT, _GAUSSIANS))
def sp_gain_equality_gaussian_forward(node: Node, outbound_index: int, inbound: Inbound) -> Gaussian:  # noqa: ARG001
    """Message towards ``out``: equality of the inputs, then the gain."""
    assert isinstance(node, GainEqualityNode)
    product = multiply_gaussians(inbound_messages(inbound))  # type: ignore[arg-type]
    if node.A_inv is not None and product.has("xi", "W"):
        if product.dimension != node.A_inv.shape[0]:
            msg = f"Gain of shape {node.A.shape} does not fit a message of dimension {product.dimension}"
            raise PreconditionError(msg)
        return type(product)(xi=node.A_inv.T @ product.xi, W=node.A_inv.T @ product.W @ node.A_inv)
    return gain_forward(node.A, product)


def _towards_input(outbound_index: int, signature: Signature) -> bool:
    return outbound_index != _OUT and _GAUSSIANS(outbound_index, signature)


@GAIN_EQUALITY_RULES.register(Family.GAUSSIAN, Family.MV_GAUSSIAN, applicable=_towards_input)
def sp_gain_equality_gaussian_backward(node: Node, outbound_index: int, inbound: Inbound) -> Gaussian:  # noqa: ARG001
    """Message towards ``in1`` or ``in2``.

    Parameterisations are tried from least to most computationally intensive.
    """
    assert isinstance(node, GainEqualityNode)
    x, y = inbound_messages(inbound)  # the other input, then out
    assert isinstance(x, Gaussian)
    assert isinstance(y, Gaussian)
    if node.A.shape[0] != check_dimensions([x, y]):
        msg = f"Gain of shape {node.A.shape} does not fit a message of dimension {x.dimension}"
        raise PreconditionError(msg)
    A = node.A  # noqa: N806
    cls = type(x)

    if x.has("m", "V") and y.has("m", "V") and not (x.has("xi", "W") and y.has("xi", "W")):
        gain = x.V @ A.T @ inverse(y.V + A @ x.V @ A.T)
        return cls(m=x.m + gain @ (y.m - A @ x.m), V=x.V - gain @ A @ x.V)

    x, y = x.to_canonical(), y.to_canonical()
    return cls(xi=x.xi + A.T @ y.xi, W=x.W + A.T @ y.W @ A)
