"""Factor graph arena: nodes, interface states and edges."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, TypeVar

from fglab._errors import InterfaceInUseError, NoFreeInterfaceError, SelfLoopError, TypeMismatchError
from fglab._nodes import Node

if TYPE_CHECKING:
    from collections.abc import Iterator

    from fglab._messages import Message

logger = logging.getLogger(__name__)

N = TypeVar("N", bound=Node)


@dataclass(frozen=True, slots=True, order=True)
class InterfaceRef:
    """Stable handle of one port: the owning node's id and the port index."""

    node_id: str
    index: int

    def __str__(self) -> str:
        return f"{self.node_id}[{self.index}]"


@dataclass(frozen=True, slots=True)
class InterfaceState:
    """Snapshot of the state held for one interface.

    Attributes:
        partner: The interface at the other end of the edge, if connected.
        message: The outbound message last computed for this interface.
        valid: Whether ``message`` reflects the current upstream state.

    """

    partner: InterfaceRef | None = None
    message: Message | None = None
    valid: bool = False


@dataclass(frozen=True, slots=True)
class Edge:
    """A pair of partnered interfaces.

    Forward messages flow from ``tail`` to ``head``. The direction is a
    naming convention only and does not constrain evaluation order.
    """

    tail: InterfaceRef
    head: InterfaceRef

    def __str__(self) -> str:
        return f"{self.tail} -> {self.head}"


class FactorGraph:
    """Arena owning nodes and the state of every one of their interfaces.

    Nodes are addressed by id and interfaces by :class:`InterfaceRef`. The
    partner relation is stored as handles, so the graph may contain cycles
    without reference cycles between Python objects.

    Example:
        >>> graph = FactorGraph()
        >>> prior = graph.add_node(ConstantNode(Gaussian(m=0.0, V=1.0)))
        >>> eq = graph.add_node(EqualityNode())
        >>> edge = graph.connect(prior, eq)
        >>> edge.head
        InterfaceRef(node_id='equality1', index=0)

    """

    def __init__(self) -> None:
        self._nodes: dict[str, Node] = {}
        self._states: dict[InterfaceRef, InterfaceState] = {}
        self._edges: list[Edge] = []

    # -------------------------------------------------------------------------
    # Nodes and interfaces
    # -------------------------------------------------------------------------

    def add_node(self, node: N) -> N:
        """Add a node and create the state of its interfaces.

        Raises:
            ValueError: If a node with the same id is already in the graph.

        """
        if node.id in self._nodes:
            msg = f"Node id '{node.id}' is already used in this graph"
            raise ValueError(msg)
        self._nodes[node.id] = node
        for index in range(node.num_interfaces):
            self._states[InterfaceRef(node.id, index)] = InterfaceState()
        logger.debug("Added %s node '%s' with %d interfaces", node.kind, node.id, node.num_interfaces)
        return node

    def replace_node(self, node: Node) -> None:
        """Swap the static parameters of a node and invalidate what depends on it.

        The replacement must have the id and arity of the node it replaces.
        Messages computed with the old parameters are invalidated by pushing
        invalidations from every interface of the node.

        Raises:
            KeyError: If no node with this id exists.
            ValueError: If the kind or arity differs.

        """
        old = self.node(node.id)
        if type(old) is not type(node) or old.num_interfaces != node.num_interfaces:
            msg = f"Cannot replace {old!r} by {node!r}: kind and arity must match"
            raise ValueError(msg)
        self._nodes[node.id] = node

        from fglab._engine import push_message_invalidations  # noqa: PLC0415

        for ref in self.interfaces(node):
            push_message_invalidations(self, ref)

    def node(self, node_id: str) -> Node:
        """Get a node by id.

        Raises:
            KeyError: If no node exists with the given id.

        """
        try:
            return self._nodes[node_id]
        except KeyError:
            msg = f"No node with id '{node_id}' in this graph"
            raise KeyError(msg) from None

    @property
    def nodes(self) -> tuple[Node, ...]:
        return tuple(self._nodes.values())

    @property
    def edges(self) -> tuple[Edge, ...]:
        return tuple(self._edges)

    def owner(self, interface: InterfaceRef) -> Node:
        """Get the node an interface belongs to."""
        self._require(interface)
        return self._nodes[interface.node_id]

    def interfaces(self, node: Node | str) -> tuple[InterfaceRef, ...]:
        """All interfaces of a node, in port order."""
        node = self.node(node if isinstance(node, str) else node.id)
        return tuple(InterfaceRef(node.id, index) for index in range(node.num_interfaces))

    def interface(self, node: Node | str, port: int | str) -> InterfaceRef:
        """Get the handle of a node's port by index or name."""
        node = self.node(node if isinstance(node, str) else node.id)
        return InterfaceRef(node.id, node.port_index(port))

    def free_interface(self, node: Node | str) -> InterfaceRef:
        """Get the first interface of a node that has no partner.

        Raises:
            NoFreeInterfaceError: If every interface is connected.

        """
        for ref in self.interfaces(node):
            if self._states[ref].partner is None:
                return ref
        node_id = node if isinstance(node, str) else node.id
        msg = f"No free interface on {self._nodes[node_id].kind} node '{node_id}'"
        raise NoFreeInterfaceError(msg)

    # -------------------------------------------------------------------------
    # Interface state
    # -------------------------------------------------------------------------

    def state(self, interface: InterfaceRef) -> InterfaceState:
        """Get a snapshot of an interface's partner, message and validity."""
        return self._require(interface)

    def partner(self, interface: InterfaceRef) -> InterfaceRef | None:
        return self._require(interface).partner

    def message(self, interface: InterfaceRef) -> Message | None:
        return self._require(interface).message

    def is_valid(self, interface: InterfaceRef) -> bool:
        return self._require(interface).valid

    def _require(self, interface: InterfaceRef) -> InterfaceState:
        try:
            return self._states[interface]
        except KeyError:
            msg = f"No interface {interface} in this graph"
            raise KeyError(msg) from None

    def _store(self, interface: InterfaceRef, message: Message) -> None:
        """Replace the message of an interface and mark it valid."""
        state = self._require(interface)
        self._states[interface] = replace(state, message=message, valid=True)

    def _set_valid(self, interface: InterfaceRef, *, valid: bool) -> bool:
        """Set the validity flag of an interface and return the previous one."""
        state = self._require(interface)
        if state.valid != valid:
            self._states[interface] = replace(state, valid=valid)
        return state.valid

    # -------------------------------------------------------------------------
    # Edges
    # -------------------------------------------------------------------------

    def connect(self, tail: InterfaceRef | Node, head: InterfaceRef | Node) -> Edge:
        """Connect two interfaces, or the first free interfaces of two nodes.

        Nothing is modified when the connection is rejected.

        Raises:
            SelfLoopError: If both interfaces belong to the same node.
            TypeMismatchError: If both interfaces hold messages of different families.
            NoFreeInterfaceError: If a node has no free interface left.
            InterfaceInUseError: If an interface is already connected.

        """
        if isinstance(tail, Node) and isinstance(head, Node) and tail.id == head.id:
            msg = f"Cannot connect two interfaces of the same node: {tail.kind} '{tail.id}'"
            raise SelfLoopError(msg)
        tail_ref = self.free_interface(tail) if isinstance(tail, Node) else tail
        head_ref = self.free_interface(head) if isinstance(head, Node) else head
        tail_state = self._require(tail_ref)
        head_state = self._require(head_ref)

        if tail_ref.node_id == head_ref.node_id:
            msg = f"Cannot connect two interfaces of the same node: '{tail_ref.node_id}'"
            raise SelfLoopError(msg)
        for ref, state in ((tail_ref, tail_state), (head_ref, head_state)):
            if state.partner is not None:
                msg = f"Interface {ref} is already connected to {state.partner}"
                raise InterfaceInUseError(msg)
        if (
            tail_state.message is not None
            and head_state.message is not None
            and tail_state.message.family != head_state.message.family
        ):
            msg = (
                f"Head and tail message families do not match: "
                f"{tail_state.message.family} and {head_state.message.family}"
            )
            raise TypeMismatchError(msg)

        self._states[tail_ref] = replace(tail_state, partner=head_ref)
        self._states[head_ref] = replace(head_state, partner=tail_ref)
        edge = Edge(tail=tail_ref, head=head_ref)
        self._edges.append(edge)
        logger.debug("Connected %s", edge)
        return edge

    def edge(self, interface: InterfaceRef) -> Edge | None:
        """Get the edge an interface takes part in, if any."""
        for edge in self._edges:
            if interface in (edge.tail, edge.head):
                return edge
        return None

    def clear_messages(self, target: Node | Edge) -> None:
        """Drop the messages of a node's interfaces, or of both ends of an edge."""
        refs = (target.tail, target.head) if isinstance(target, Edge) else self.interfaces(target)
        for ref in refs:
            state = self._require(ref)
            self._states[ref] = replace(state, message=None, valid=False)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, InterfaceRef):
            return item in self._states
        if isinstance(item, Node):
            return self._nodes.get(item.id) is item
        return item in self._nodes

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes.values())

    def __len__(self) -> int:
        return len(self._nodes)
