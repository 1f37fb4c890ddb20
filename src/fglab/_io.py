"""Reading and writing messages as TOML tables.

A message file holds one table per message, tagged by its family:

    [forward]
    family = "gaussian"
    m = 1.0
    V = 2.0

    [backward]
    family = "gaussian"
    xi = 0.5
    W = 0.25
"""

import logging
import tomllib
from pathlib import Path
from typing import Annotated, Any, Literal

import numpy as np
import tomli_w
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from ._messages import Bernoulli, Beta, Gamma, Gaussian, General, Message, MvGaussian, Wishart

logger = logging.getLogger(__name__)

Scalar = float
Vector = list[float]
Matrix = list[list[float]]


# =============================================================================
# Message specs
# =============================================================================


class _MessageSpec(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class GaussianSpec(_MessageSpec):
    """Gaussian message in any combination of ``m``, ``V``, ``W`` and ``xi``."""

    family: Literal["gaussian", "mv_gaussian"]
    m: Scalar | Vector | None = None
    V: Scalar | Matrix | None = None
    W: Scalar | Matrix | None = None
    xi: Scalar | Vector | None = None

    def to_message(self) -> Gaussian:
        cls = MvGaussian if self.family == "mv_gaussian" else Gaussian
        return cls(m=self.m, V=self.V, W=self.W, xi=self.xi)


class GammaSpec(_MessageSpec):
    family: Literal["gamma"]
    a: float = 1.0
    b: float = 1.0
    inverted: bool = False

    def to_message(self) -> Gamma:
        return Gamma(a=self.a, b=self.b, inverted=self.inverted)


class GeneralSpec(_MessageSpec):
    family: Literal["general"]
    value: Scalar | Vector | Matrix

    def to_message(self) -> General:
        return General(self.value)


class BernoulliSpec(_MessageSpec):
    family: Literal["bernoulli"]
    p: float

    def to_message(self) -> Bernoulli:
        return Bernoulli(self.p)


class BetaSpec(_MessageSpec):
    family: Literal["beta"]
    a: float
    b: float

    def to_message(self) -> Beta:
        return Beta(self.a, self.b)


class WishartSpec(_MessageSpec):
    family: Literal["wishart"]
    V: Scalar | Matrix
    nu: float

    def to_message(self) -> Wishart:
        return Wishart(self.V, self.nu)


MessageSpec = Annotated[
    GaussianSpec | GammaSpec | GeneralSpec | BernoulliSpec | BetaSpec | WishartSpec,
    Field(discriminator="family"),
]

_MESSAGE_TABLE = TypeAdapter(dict[str, MessageSpec])


# =============================================================================
# Loading
# =============================================================================


def toml_to_messages(toml_contents: dict[str, Any]) -> dict[str, Message]:
    """Validate parsed TOML contents and build the messages they describe.

    Raises:
        pydantic.ValidationError: If a table does not describe a message.
        ValueError: If the parameters are rejected by the message constructor.

    """
    specs = _MESSAGE_TABLE.validate_python(toml_contents)
    return {name: spec.to_message() for name, spec in specs.items()}


def load_messages_from_toml(input_path: Path | str) -> dict[str, Message]:
    """Load named messages from a TOML file.

    Args:
        input_path: Path to a TOML file with one table per message

    Returns:
        A dictionary mapping table names to messages, in file order

    """
    input_path = Path(input_path)
    with input_path.open("rb") as f:
        toml_contents = tomllib.load(f)

    messages = toml_to_messages(toml_contents)
    logger.debug(f"Loaded {len(messages)} messages from {input_path}")
    return messages


# =============================================================================
# Export
# =============================================================================


def _serialize_array(value: np.ndarray, *, scalar: bool) -> Any:
    """Convert an array to TOML-native floats, unwrapping univariate values."""
    if scalar:
        return float(value.reshape(-1)[0])
    return value.tolist()


def message_to_dict(message: Message) -> dict[str, Any]:  # noqa: PLR0911
    """Convert a message to a TOML-compatible dictionary.

    Absent Gaussian parameters are omitted, since TOML has no null value.
    Univariate Gaussian parameters are written as plain numbers.

    Raises:
        TypeError: If the message family cannot be exported.

    """
    match message:
        case Gaussian():
            scalar = type(message) is Gaussian
            data: dict[str, Any] = {"family": str(message.family)}
            for name in ("m", "V", "W", "xi"):
                value = getattr(message, name)
                if value is not None:
                    data[name] = _serialize_array(value, scalar=scalar)
            return data
        case Gamma(a=a, b=b, inverted=inverted):
            return {"family": str(message.family), "a": a, "b": b, "inverted": inverted}
        case General(value=value):
            serialized = value.tolist() if isinstance(value, np.ndarray) else value
            return {"family": str(message.family), "value": serialized}
        case Bernoulli(p=p):
            return {"family": str(message.family), "p": p}
        case Beta(a=a, b=b):
            return {"family": str(message.family), "a": a, "b": b}
        case Wishart(V=V, nu=nu):
            return {"family": str(message.family), "V": V.tolist(), "nu": nu}
        case _:
            msg = f"Cannot export message of type {type(message).__name__}"
            raise TypeError(msg)


def export_messages_to_toml(messages: dict[str, Message], output_path: Path | str) -> None:
    """Export named messages to a TOML file, one table per message.

    Args:
        messages: Messages keyed by table name
        output_path: Path to the output TOML file

    """
    toml_data = {name: message_to_dict(message) for name, message in messages.items()}

    output_path = Path(output_path)
    with output_path.open("wb") as f:
        tomli_w.dump(toml_data, f)

    logger.debug(f"Exported {len(messages)} messages to {output_path}")
