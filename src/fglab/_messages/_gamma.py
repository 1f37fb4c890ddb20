"""Gamma messages."""

import math
from dataclasses import dataclass
from typing import ClassVar, Self

from ._base import Family, Message

_VAGUE_RATE = 1e-3


@dataclass(frozen=True, slots=True)
class Gamma(Message):
    """Gamma message in shape/rate parameterisation.

    With ``inverted`` set, the message describes an inverse-gamma density
    with the same ``a`` and ``b``.
    """

    family: ClassVar[Family] = Family.GAMMA

    a: float = 1.0
    b: float = 1.0
    inverted: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "a", float(self.a))
        object.__setattr__(self, "b", float(self.b))
        if not (math.isfinite(self.a) and self.a > 0):
            msg = f"Gamma shape must be positive and finite, got {self.a}"
            raise ValueError(msg)
        if not (math.isfinite(self.b) and self.b > 0):
            msg = f"Gamma rate must be positive and finite, got {self.b}"
            raise ValueError(msg)

    @classmethod
    def from_scale(cls, a: float, scale: float, *, inverted: bool = False) -> Self:
        """Build a message from shape/scale parameters."""
        return cls(a=a, b=1.0 / scale, inverted=inverted)

    @property
    def scale(self) -> float:
        return 1.0 / self.b

    def mean(self) -> float:
        if not self.inverted:
            return self.a / self.b
        if self.a <= 1.0:
            return math.inf
        return self.b / (self.a - 1.0)

    def uninformative(self) -> Self:
        return type(self)(a=1.0, b=_VAGUE_RATE, inverted=self.inverted)
