"""Helpers shared by the Gaussian update rules."""

from collections.abc import Sequence

import numpy as np

from fglab._errors import PreconditionError
from fglab._messages import Gaussian, MvGaussian


def check_dimensions(messages: Sequence[Gaussian]) -> int:
    """Return the common dimension of ``messages``.

    Raises:
        PreconditionError: If the messages disagree on their dimension.

    """
    dims = {msg.dimension for msg in messages}
    if len(dims) != 1:
        msg = f"Gaussian messages of different dimensions: {sorted(dims)}"
        raise PreconditionError(msg)
    return dims.pop()


def gaussian_class(template: Gaussian, dimension: int) -> type[Gaussian]:
    """Pick the Gaussian class for an outbound message of ``dimension``."""
    if isinstance(template, MvGaussian) or dimension != 1:
        return MvGaussian
    return Gaussian


def canonical_sum(messages: Sequence[Gaussian]) -> tuple[np.ndarray, np.ndarray]:
    """Sum ``(xi, W)`` over ``messages`` after converting each to canonical form."""
    canonical = [msg.to_canonical() for msg in messages]
    xi = np.sum([msg.xi for msg in canonical], axis=0)
    W = np.sum([msg.W for msg in canonical], axis=0)  # noqa: N806
    return xi, W
