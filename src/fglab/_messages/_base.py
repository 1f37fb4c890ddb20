"""Shared definitions for message families."""

import logging
from enum import StrEnum, auto
from typing import Any, ClassVar, Self

import numpy as np

logger = logging.getLogger(__name__)


class Family(StrEnum):
    """Distribution family carried by a message."""

    GAUSSIAN = auto()
    MV_GAUSSIAN = auto()
    GAMMA = auto()
    BERNOULLI = auto()
    BETA = auto()
    WISHART = auto()
    GENERAL = auto()


class Message:
    """Base class of all message families.

    Concrete messages are frozen dataclasses. A message never changes after
    construction; producing a new belief means producing a new message.
    """

    __slots__ = ()

    family: ClassVar[Family]

    def uninformative(self) -> Self:
        """Return a vague message of the same family and shape."""
        raise NotImplementedError


def frozen_vector(value: Any, name: str) -> np.ndarray:
    """Copy ``value`` into a read-only 1-D float array."""
    arr = np.atleast_1d(np.array(value, dtype=float))
    if arr.ndim != 1:
        msg = f"Parameter '{name}' must be a scalar or a vector, got shape {arr.shape}"
        raise ValueError(msg)
    arr.flags.writeable = False
    return arr


def frozen_matrix(value: Any, name: str) -> np.ndarray:
    """Copy ``value`` into a read-only square float matrix.

    Scalars are promoted to 1x1 matrices.
    """
    arr = np.array(value, dtype=float)
    if arr.ndim == 0:
        arr = arr.reshape(1, 1)
    if arr.ndim != 2 or arr.shape[0] != arr.shape[1]:  # noqa: PLR2004
        msg = f"Parameter '{name}' must be a scalar or a square matrix, got shape {arr.shape}"
        raise ValueError(msg)
    arr.flags.writeable = False
    return arr


def inverse(matrix: np.ndarray) -> np.ndarray:
    """Invert a matrix, falling back to the pseudo-inverse when it is singular."""
    try:
        return np.linalg.inv(matrix)
    except np.linalg.LinAlgError:
        logger.warning("Singular %s matrix, using the pseudo-inverse", matrix.shape)
        return np.linalg.pinv(matrix)


def format_array(arr: np.ndarray) -> str:
    return np.array2string(arr, precision=6, separator=", ")
