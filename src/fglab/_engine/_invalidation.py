"""Propagation of message invalidations through the graph."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fglab._graph import FactorGraph, InterfaceRef

_logger = logging.getLogger(__name__)


def push_message_invalidations(
    graph: FactorGraph,
    interface: InterfaceRef,
    *,
    logger: logging.Logger | None = None,
) -> int:
    """Invalidate the message of an interface and every message depending on it.

    The message leaving ``interface`` enters the node of its partner, so all
    outbound messages of that node other than the one on the partner itself
    become stale. Invalidation continues from each of them that was valid
    and held a message. Interfaces that are already invalid stop the walk,
    which is what makes it terminate on cyclic graphs.

    Args:
        graph: The graph holding the interface.
        interface: The interface whose message changed or must be recomputed.
        logger: Sink for progress messages. Defaults to this module's logger.

    Returns:
        Number of interfaces that went from valid to invalid.

    """
    log = logger if logger is not None else _logger
    invalidated = 0
    if graph._set_valid(interface, valid=False):  # noqa: SLF001
        invalidated += 1
        log.debug("Invalidated %s", interface)

    stack = [interface]
    while stack:
        partner = graph.partner(stack.pop())
        if partner is None:
            continue
        for other in graph.interfaces(partner.node_id):
            if other == partner:
                continue
            state = graph.state(other)
            if not state.valid:
                continue
            graph._set_valid(other, valid=False)  # noqa: SLF001
            invalidated += 1
            log.debug("Invalidated %s", other)
            if state.message is not None:
                stack.append(other)
    return invalidated


invalidate = push_message_invalidations
