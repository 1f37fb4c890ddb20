"""General (scalar or array) messages."""

from dataclasses import dataclass
from typing import Any, ClassVar, Self

import numpy as np

from ._base import Family, Message


@dataclass(frozen=True, slots=True, eq=False)
class General(Message):
    """A message that carries a plain value instead of a distribution.

    Scalars are stored as ``float``, anything array-like as a read-only
    float array.
    """

    family: ClassVar[Family] = Family.GENERAL

    value: float | np.ndarray = 1.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", _freeze_value(self.value))

    @property
    def is_array(self) -> bool:
        return isinstance(self.value, np.ndarray)

    def zeros_like(self) -> Self:
        """Return a zero value of the same shape."""
        if isinstance(self.value, np.ndarray):
            return type(self)(np.zeros(self.value.shape))
        return type(self)(0.0)

    def uninformative(self) -> Self:
        return self.zeros_like()

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        assert isinstance(other, General)
        return values_equal(self.value, other.value)

    def __repr__(self) -> str:
        value = self.value.tolist() if isinstance(self.value, np.ndarray) else self.value
        return f"General({value!r})"


def _freeze_value(value: Any) -> float | np.ndarray:
    if isinstance(value, (list, tuple, np.ndarray)):
        arr = np.array(value, dtype=float)
        arr.flags.writeable = False
        return arr
    return float(value)


def values_equal(left: float | np.ndarray, right: float | np.ndarray) -> bool:
    """Exact equality of two general values, including their shape."""
    if isinstance(left, np.ndarray) or isinstance(right, np.ndarray):
        return isinstance(left, np.ndarray) and isinstance(right, np.ndarray) and np.array_equal(left, right)
    return left == right
