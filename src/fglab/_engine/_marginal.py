"""Marginal beliefs from pairs of opposing messages."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fglab._errors import MissingMessageError, TypeMismatchError
from fglab._nodes import EqualityNode
from fglab._rules import ELIDED, signature_of

if TYPE_CHECKING:
    from fglab._graph import Edge, FactorGraph
    from fglab._messages import Message

_OUTBOUND_INDEX = 2


def calculate_marginal(forward: Message, backward: Message) -> Message:
    """Combine a forward and a backward message into the marginal belief.

    The belief is the product of both messages, which is the outbound message
    of a three-port equality node receiving them on its other two ports. The
    result is a fresh message the caller owns.

    Raises:
        TypeMismatchError: If the messages belong to different families.
        RuleNotFoundError: If the equality node has no rule for the family.

    """
    if forward.family != backward.family:
        msg = f"Cannot combine a {forward.family} message with a {backward.family} message"
        raise TypeMismatchError(msg)

    node = EqualityNode(3, id="marginal")
    inbound = (forward, backward, ELIDED)
    rule = node.resolve_rule(_OUTBOUND_INDEX, signature_of(inbound))
    return rule(node, _OUTBOUND_INDEX, inbound)


def calculate_edge_marginal(graph: FactorGraph, edge: Edge) -> Message:
    """Marginal belief of the variable on an edge.

    Both interfaces of the edge must hold a message; whether it is still
    valid is not checked.

    Raises:
        MissingMessageError: If either interface holds no message.

    """
    forward = graph.message(edge.tail)
    backward = graph.message(edge.head)
    for ref, message in ((edge.tail, forward), (edge.head, backward)):
        if message is None:
            msg = f"Cannot calculate the marginal of edge {edge}: interface {ref} holds no message"
            raise MissingMessageError(msg)
    return calculate_marginal(forward, backward)  # type: ignore[arg-type]
