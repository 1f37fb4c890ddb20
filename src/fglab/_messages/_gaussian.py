"""Gaussian messages in canonical and moment parameterisation."""

from dataclasses import dataclass
from enum import StrEnum, auto
from typing import ClassVar, Self

import numpy as np

from ._base import Family, Message, format_array, frozen_matrix, frozen_vector, inverse


class GaussianForm(StrEnum):
    """Parameterisations of a Gaussian message."""

    CANONICAL = auto()  # (xi, W)
    MOMENT = auto()  # (m, V)


_VECTOR_FIELDS = ("m", "xi")
_MATRIX_FIELDS = ("V", "W")


@dataclass(frozen=True, slots=True, eq=False)
class Gaussian(Message):
    """Univariate Gaussian message.

    Any of the four parameters may be absent (``None``), but a message must
    hold a location (``m`` or ``xi``) and a spread (``V`` or ``W``). Values
    are stored as read-only arrays of shape ``(d,)`` and ``(d, d)``.

    Attributes:
        m: Mean.
        V: Covariance.
        W: Precision.
        xi: Precision-weighted mean, ``W @ m``.

    Example:
        >>> Gaussian(m=0.0, V=1.0).to_canonical()
        Gaussian(xi=[0.], W=[[1.]])

    """

    family: ClassVar[Family] = Family.GAUSSIAN

    m: np.ndarray | None = None
    V: np.ndarray | None = None
    W: np.ndarray | None = None
    xi: np.ndarray | None = None

    def __post_init__(self) -> None:
        for name in _VECTOR_FIELDS:
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, frozen_vector(value, name))
        for name in _MATRIX_FIELDS:
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, frozen_matrix(value, name))

        if self.m is None and self.xi is None:
            msg = f"{type(self).__name__} requires a location parameter (m or xi)"
            raise ValueError(msg)
        if self.V is None and self.W is None:
            msg = f"{type(self).__name__} requires a spread parameter (V or W)"
            raise ValueError(msg)

        held = [getattr(self, name) for name in (*_VECTOR_FIELDS, *_MATRIX_FIELDS)]
        dims = {value.shape[0] for value in held if value is not None}
        if len(dims) != 1:
            msg = f"Inconsistent parameter dimensions in {type(self).__name__}: {sorted(dims)}"
            raise ValueError(msg)
        self._check_dimension(dims.pop())

    def _check_dimension(self, dimension: int) -> None:
        if dimension != 1:
            msg = f"Gaussian is univariate, got dimension {dimension}; use MvGaussian"
            raise ValueError(msg)

    @property
    def dimension(self) -> int:
        location = self.m if self.m is not None else self.xi
        assert location is not None
        return location.shape[0]

    def has(self, *names: str) -> bool:
        """Check whether all named parameters are present."""
        return all(getattr(self, name) is not None for name in names)

    def to_canonical(self) -> Self:
        """Return the same distribution holding only ``(xi, W)``."""
        W = self.W if self.W is not None else inverse(self.V)  # noqa: N806
        xi = self.xi if self.xi is not None else W @ self.m
        return type(self)(xi=xi, W=W)

    def to_moment(self) -> Self:
        """Return the same distribution holding only ``(m, V)``."""
        V = self.V if self.V is not None else inverse(self.W)  # noqa: N806
        m = self.m if self.m is not None else V @ self.xi
        return type(self)(m=m, V=V)

    def to_form(self, form: GaussianForm) -> Self:
        match form:
            case GaussianForm.CANONICAL:
                return self.to_canonical()
            case GaussianForm.MOMENT:
                return self.to_moment()

    def uninformative(self, mean: float = 0.0, variance: float = 1e3) -> Self:
        d = self.dimension
        return type(self)(m=np.full(d, mean), V=variance * np.eye(d))

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        assert isinstance(other, Gaussian)
        if self.dimension != other.dimension:
            return False
        mine, theirs = self.to_canonical(), other.to_canonical()
        return bool(np.allclose(mine.xi, theirs.xi) and np.allclose(mine.W, theirs.W))

    def __repr__(self) -> str:
        held = [
            f"{name}={format_array(getattr(self, name))}"
            for name in ("m", "V", "xi", "W")
            if getattr(self, name) is not None
        ]
        return f"{type(self).__name__}({', '.join(held)})"


@dataclass(frozen=True, slots=True, eq=False)
class MvGaussian(Gaussian):
    """Multivariate Gaussian message of any dimension."""

    family: ClassVar[Family] = Family.MV_GAUSSIAN

    def _check_dimension(self, dimension: int) -> None:
        pass
