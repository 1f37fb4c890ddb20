"""Message families.

A message is an immutable parameterisation of a probability distribution
sent along an edge. Each family is a frozen dataclass tagged with a
:class:`Family` member.
"""

from ._base import Family, Message, inverse
from ._gamma import Gamma
from ._gaussian import Gaussian, GaussianForm, MvGaussian
from ._general import General, values_equal
from ._probability import Bernoulli, Beta
from ._wishart import Wishart

__all__ = [
    "Bernoulli",
    "Beta",
    "Family",
    "Gamma",
    "Gaussian",
    "GaussianForm",
    "General",
    "Message",
    "MvGaussian",
    "Wishart",
    "inverse",
    "values_equal",
]
