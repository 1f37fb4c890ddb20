"""Inbound message collection and fallback resolution for the evaluator."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fglab._errors import DisconnectedInterfaceError, UpstreamUnavailableError
from fglab._messages import Gaussian, Message
from fglab._rules import ELIDED, Elided

if TYPE_CHECKING:
    from fglab._config import EngineSettings
    from fglab._graph import FactorGraph, InterfaceRef
    from fglab._rules import Inbound


def collect_inbound(graph: FactorGraph, outbound: InterfaceRef) -> Inbound:
    """Collect the inbound messages of the node owning ``outbound``.

    Inbound messages are read from the partners of the node's other
    interfaces, in port order. The slot of ``outbound`` itself is
    :data:`~fglab._rules.ELIDED`.

    Args:
        graph: The graph holding the node.
        outbound: The interface whose outbound message is being computed.

    Returns:
        Tuple with one entry per port of the node.

    Raises:
        DisconnectedInterfaceError: If another interface has no partner.
        UpstreamUnavailableError: If a partner holds no valid message.

    """
    inbound: list[Message | Elided] = []
    for ref in graph.interfaces(outbound.node_id):
        if ref == outbound:
            inbound.append(ELIDED)
            continue
        partner = graph.partner(ref)
        if partner is None:
            msg = f"Cannot receive messages on disconnected interface {ref}"
            raise DisconnectedInterfaceError(msg)
        state = graph.state(partner)
        if not state.valid or state.message is None:
            msg = f"No valid inbound message on interface {ref} (from {partner})"
            raise UpstreamUnavailableError(msg, ref)
        inbound.append(state.message)
    return tuple(inbound)


def fallback_message(graph: FactorGraph, interface: InterfaceRef, settings: EngineSettings) -> Message:
    """Message used when the depth budget is exhausted at ``interface``.

    The fallback is an uninformative message of the family and shape of the
    message the interface last held, or else of the message its partner
    holds. When neither is known, it is a univariate Gaussian built from
    ``settings.fallback_mean`` and ``settings.fallback_variance``.
    """
    for ref in (interface, graph.partner(interface)):
        if ref is None:
            continue
        known = graph.message(ref)
        if isinstance(known, Gaussian):
            return known.uninformative(mean=settings.fallback_mean, variance=settings.fallback_variance)
        if known is not None:
            return known.uninformative()
    return Gaussian(m=settings.fallback_mean, V=settings.fallback_variance)
