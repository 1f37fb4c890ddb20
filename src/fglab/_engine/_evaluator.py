"""Demand-driven, memoising message evaluator."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fglab._config import EngineSettings, get_settings
from fglab._errors import DisconnectedInterfaceError, OwnershipError, UpstreamUnavailableError
from fglab._rules import signature_of

from ._resolution import collect_inbound, fallback_message

if TYPE_CHECKING:
    from fglab._graph import Edge, FactorGraph, InterfaceRef
    from fglab._messages import Message
    from fglab._nodes import Node

_logger = logging.getLogger(__name__)


def calculate_message(
    graph: FactorGraph,
    interface: InterfaceRef,
    node: Node | None = None,
    *,
    depth_budget: int | None = None,
    settings: EngineSettings | None = None,
    logger: logging.Logger | None = None,
) -> Message:
    """Calculate and store the outbound message of an interface.

    Inbound messages that are not valid are calculated first, recursively,
    and cached on the interfaces that produce them. Every recursive entry
    consumes one unit of the depth budget; when the budget is exhausted the
    interface receives a fallback message instead. This bounds the recursion
    on cyclic graphs, at the cost of exactness.

    Args:
        graph: The graph holding the interface.
        interface: The interface whose outbound message is requested.
        node: The node the interface is expected to belong to. Defaults to
            the interface's owner.
        depth_budget: Remaining recursion depth. Defaults to
            ``settings.depth_budget``.
        settings: Evaluator settings. Defaults to the `[tool.fglab]` table of
            the nearest pyproject.toml, see :func:`get_settings`.
        logger: Sink for progress messages. Defaults to this module's logger.

    Returns:
        The message now held by ``interface``.

    Raises:
        OwnershipError: If ``interface`` does not belong to ``node``.
        DisconnectedInterfaceError: If another interface of the node has no partner.
        UpstreamUnavailableError: If an inbound message could not be produced.
        RuleNotFoundError: If the node has no rule for the inbound families.

    """
    settings = settings if settings is not None else get_settings()
    log = logger if logger is not None else _logger
    budget = settings.depth_budget if depth_budget is None else depth_budget
    owner = node if node is not None else graph.owner(interface)
    return _calculate(graph, interface, owner, budget, settings, log)


def _calculate(
    graph: FactorGraph,
    interface: InterfaceRef,
    node: Node,
    budget: int,
    settings: EngineSettings,
    log: logging.Logger,
) -> Message:
    if interface.node_id != node.id or graph.owner(interface) is not node:
        msg = f"Interface {interface} does not belong to {node.kind} node '{node.id}'"
        raise OwnershipError(msg)

    if budget <= 0:
        fallback = fallback_message(graph, interface, settings)
        graph._store(interface, fallback)  # noqa: SLF001
        log.info("Depth budget exhausted at %s, using fallback %r", interface, fallback)
        return fallback

    # Make sure every inbound message is valid
    for ref in graph.interfaces(node):
        if ref == interface:
            continue
        partner = graph.partner(ref)
        if partner is None:
            msg = f"Cannot receive messages on disconnected interface {ref} of {node.kind} node '{node.id}'"
            raise DisconnectedInterfaceError(msg)
        if graph.is_valid(partner):
            continue
        log.debug("Calculating inbound message on %s for %s", partner, interface)
        _calculate(graph, partner, graph.owner(partner), budget - 1, settings, log)
        if not graph.is_valid(partner):
            msg = f"Could not calculate required inbound message on interface {ref} of node '{node.id}'"
            raise UpstreamUnavailableError(msg, ref)

    inbound = collect_inbound(graph, interface)
    rule = node.resolve_rule(interface.index, signature_of(inbound))
    log.debug("Applying %s on %s", rule.name, interface)
    message = rule(node, interface.index, inbound)
    graph._store(interface, message)  # noqa: SLF001
    log.debug("  %s = %r", interface, message)
    return message


def calculate_messages(
    graph: FactorGraph,
    node: Node,
    *,
    settings: EngineSettings | None = None,
    logger: logging.Logger | None = None,
) -> tuple[Message, ...]:
    """Calculate the outbound messages on all interfaces of a node, in port order."""
    settings = settings if settings is not None else get_settings()
    return tuple(
        calculate_message(graph, ref, node, settings=settings, logger=logger) for ref in graph.interfaces(node)
    )


def calculate_forward_message(
    graph: FactorGraph,
    edge: Edge,
    *,
    settings: EngineSettings | None = None,
    logger: logging.Logger | None = None,
) -> Message:
    """Calculate the message flowing from the edge's tail towards its head."""
    return calculate_message(graph, edge.tail, settings=settings, logger=logger)


def calculate_backward_message(
    graph: FactorGraph,
    edge: Edge,
    *,
    settings: EngineSettings | None = None,
    logger: logging.Logger | None = None,
) -> Message:
    """Calculate the message flowing from the edge's head towards its tail."""
    return calculate_message(graph, edge.head, settings=settings, logger=logger)
