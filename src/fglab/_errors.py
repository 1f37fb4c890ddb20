"""Exception hierarchy for the message-passing engine.

Every failure is fatal to the requested operation and propagates to the
caller unchanged; nothing in the engine retries.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ._graph import InterfaceRef


class FactorGraphError(Exception):
    """Base class for all factor graph errors."""


class StructuralError(FactorGraphError):
    """The graph does not have the shape an operation requires."""


class SelfLoopError(StructuralError):
    """Two interfaces of the same node were connected."""


class DisconnectedInterfaceError(StructuralError):
    """An interface without a partner was used as an inbound source."""


class OwnershipError(StructuralError):
    """An interface was paired with a node it does not belong to."""


class NoFreeInterfaceError(StructuralError):
    """A node has no unconnected interface left."""


class InterfaceInUseError(StructuralError):
    """An interface that already has a partner was connected again."""


class TypeMismatchError(StructuralError):
    """Two messages that must share a family do not."""


class MissingMessageError(StructuralError):
    """An interface holds no message where one is required."""


class RuleNotFoundError(FactorGraphError):
    """No update rule matches an outbound port and inbound family tuple."""


class PreconditionError(FactorGraphError):
    """An update rule was invoked on inputs it is not defined for."""


class UpstreamUnavailableError(FactorGraphError):
    """A required inbound message could not be produced."""

    def __init__(self, message: str, interface: InterfaceRef) -> None:
        super().__init__(message)
        self.interface = interface
