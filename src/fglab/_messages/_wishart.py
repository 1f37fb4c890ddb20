"""Wishart messages."""

from dataclasses import dataclass
from typing import Any, ClassVar, Self

import numpy as np

from ._base import Family, Message, format_array, frozen_matrix, inverse

_VAGUE_SCALE = 1e3


@dataclass(frozen=True, slots=True, eq=False)
class Wishart(Message):
    """Wishart message with scale matrix ``V`` and ``nu`` degrees of freedom."""

    family: ClassVar[Family] = Family.WISHART

    V: np.ndarray
    nu: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "V", frozen_matrix(self.V, "V"))
        object.__setattr__(self, "nu", float(self.nu))
        if self.nu <= self.dimension - 1:
            msg = f"Wishart degrees of freedom must exceed {self.dimension - 1}, got {self.nu}"
            raise ValueError(msg)

    @classmethod
    def from_inverse_scale(cls, W: Any, nu: float) -> Self:  # noqa: N803
        """Build a message from the inverse of the scale matrix."""
        return cls(V=inverse(frozen_matrix(W, "W")), nu=nu)

    @property
    def dimension(self) -> int:
        return self.V.shape[0]

    @property
    def inverse_scale(self) -> np.ndarray:
        return inverse(self.V)

    def mean(self) -> np.ndarray:
        return self.nu * self.V

    def uninformative(self) -> Self:
        d = self.dimension
        return type(self)(V=_VAGUE_SCALE * np.eye(d), nu=float(d))

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        assert isinstance(other, Wishart)
        return self.V.shape == other.V.shape and bool(np.allclose(self.V, other.V)) and self.nu == other.nu

    def __repr__(self) -> str:
        return f"Wishart(V={format_array(self.V)}, nu={self.nu})"
