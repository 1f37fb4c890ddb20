"""Bernoulli and Beta messages."""

import math
from dataclasses import dataclass
from typing import ClassVar, Self

from ._base import Family, Message


@dataclass(frozen=True, slots=True)
class Bernoulli(Message):
    """Bernoulli message with success probability ``p``."""

    family: ClassVar[Family] = Family.BERNOULLI

    p: float = 0.5

    def __post_init__(self) -> None:
        object.__setattr__(self, "p", float(self.p))
        if not 0.0 <= self.p <= 1.0:
            msg = f"Bernoulli probability must lie in [0, 1], got {self.p}"
            raise ValueError(msg)

    @classmethod
    def from_logit(cls, logit: float) -> Self:
        """Build a message from log-odds."""
        return cls(p=1.0 / (1.0 + math.exp(-logit)))

    @property
    def logit(self) -> float:
        if self.p in (0.0, 1.0):
            return math.copysign(math.inf, self.p - 0.5)
        return math.log(self.p / (1.0 - self.p))

    def uninformative(self) -> Self:
        return type(self)(p=0.5)


@dataclass(frozen=True, slots=True)
class Beta(Message):
    """Beta message with pseudo-counts ``a`` and ``b``."""

    family: ClassVar[Family] = Family.BETA

    a: float = 1.0
    b: float = 1.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "a", float(self.a))
        object.__setattr__(self, "b", float(self.b))
        if self.a <= 0 or self.b <= 0:
            msg = f"Beta parameters must be positive, got a={self.a}, b={self.b}"
            raise ValueError(msg)

    @classmethod
    def from_mean(cls, mean: float, concentration: float) -> Self:
        """Build a message from its mean and concentration ``a + b``."""
        return cls(a=mean * concentration, b=(1.0 - mean) * concentration)

    @property
    def mean(self) -> float:
        return self.a / (self.a + self.b)

    @property
    def concentration(self) -> float:
        return self.a + self.b

    def uninformative(self) -> Self:
        return type(self)(a=1.0, b=1.0)
