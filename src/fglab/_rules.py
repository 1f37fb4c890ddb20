"""Update-rule dispatch contract.

Every node kind owns a :class:`RuleSet`. Given the index of the outbound
port and the families of the inbound messages (with the outbound slot
marked :data:`ELIDED`), the rule set resolves exactly one
:class:`UpdateRule`. A rule is a pure function of the node's static
parameters and the inbound messages.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, TypeAlias

from ._errors import RuleNotFoundError
from ._messages import Family, Message

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Sequence

    from ._nodes import Node


class Elided(Enum):
    """Marker for the slot a node is asked to produce rather than consume."""

    ELIDED = "elided"

    def __repr__(self) -> str:
        return "ELIDED"


ELIDED = Elided.ELIDED

Inbound: TypeAlias = "tuple[Message | Elided, ...]"
Signature: TypeAlias = "tuple[Family | Elided, ...]"
Applicability: TypeAlias = "Callable[[int, Signature], bool]"
ComputeFn: TypeAlias = "Callable[[Node, int, Inbound], Message]"


def signature_of(inbound: Sequence[Message | Elided]) -> Signature:
    """Map inbound messages to their family tags, keeping elided slots."""
    return tuple(ELIDED if item is ELIDED else item.family for item in inbound)


def inbound_messages(inbound: Sequence[Message | Elided]) -> list[Message]:
    """Return the inbound messages in port order, without the elided slot."""
    return [item for item in inbound if item is not ELIDED]


@dataclass(frozen=True, slots=True)
class UpdateRule:
    """A single update rule of a node kind.

    Attributes:
        name: Unique name within the rule set, e.g. ``"sp_equality_gaussian"``.
        families: Message families the rule handles (for listing only).
        applicable: Predicate over ``(outbound_index, signature)``. It is only
            consulted for well-formed signatures, i.e. exactly one elided slot
            at ``outbound_index``.
        compute: The rule itself, ``(node, outbound_index, inbound) -> Message``.

    """

    name: str
    families: frozenset[Family]
    applicable: Applicability
    compute: ComputeFn

    def is_applicable(self, outbound_index: int, signature: Signature) -> bool:
        if not 0 <= outbound_index < len(signature) or signature[outbound_index] is not ELIDED:
            return False
        if sum(1 for item in signature if item is ELIDED) != 1:
            return False
        return self.applicable(outbound_index, signature)

    def __call__(self, node: Node, outbound_index: int, inbound: Inbound) -> Message:
        return self.compute(node, outbound_index, inbound)


class RuleSet:
    """Registry of the update rules of one node kind."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._rules: dict[str, UpdateRule] = {}

    def register(
        self,
        *families: Family,
        applicable: Applicability,
    ) -> Callable[[ComputeFn], UpdateRule]:
        """Decorator registering a compute function as an update rule.

        Example:
            >>> RULES = RuleSet("constant")
            >>> @RULES.register(Family.GENERAL, applicable=lambda i, sig: len(sig) == 1)
            ... def sp_constant(node, outbound_index, inbound):
            ...     return node.value

        """

        def decorator(compute: ComputeFn) -> UpdateRule:
            name = compute.__name__
            if name in self._rules:
                msg = f"Rule '{name}' is already registered for {self.name} nodes"
                raise ValueError(msg)
            rule = UpdateRule(name=name, families=frozenset(families), applicable=applicable, compute=compute)
            self._rules[name] = rule
            return rule

        return decorator

    def resolve(self, outbound_index: int, signature: Signature) -> UpdateRule:
        """Return the single rule applicable to the given port and signature.

        Raises:
            RuleNotFoundError: If no rule, or more than one rule, applies.

        """
        matches = [rule for rule in self._rules.values() if rule.is_applicable(outbound_index, signature)]
        if not matches:
            msg = f"No {self.name} rule for outbound port {outbound_index} with inbound {_format_signature(signature)}"
            raise RuleNotFoundError(msg)
        if len(matches) > 1:
            names = ", ".join(rule.name for rule in matches)
            msg = f"Ambiguous {self.name} rules for outbound port {outbound_index}: {names}"
            raise RuleNotFoundError(msg)
        return matches[0]

    def __iter__(self) -> Iterator[UpdateRule]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, name: str) -> bool:
        return name in self._rules


def _format_signature(signature: Signature) -> str:
    return "(" + ", ".join("_" if item is ELIDED else str(item) for item in signature) + ")"


# =============================================================================
# Applicability predicates
# =============================================================================


def uniform(*families: Family, arity: int | None = None, min_arity: int = 1) -> Applicability:
    """Accept signatures whose inbound families are all one of ``families``.

    Args:
        families: Allowed families; all inbound slots must share one of them.
        arity: Exact number of ports required, if any.
        min_arity: Minimum number of ports required.

    """

    def applicable(outbound_index: int, signature: Signature) -> bool:  # noqa: ARG001
        if arity is not None and len(signature) != arity:
            return False
        if len(signature) < min_arity:
            return False
        present = {item for item in signature if item is not ELIDED}
        return len(present) == 1 and present <= set(families)

    return applicable


def at_port(index: int, inner: Applicability) -> Applicability:
    """Restrict ``inner`` to requests for the outbound port ``index``."""

    def applicable(outbound_index: int, signature: Signature) -> bool:
        return outbound_index == index and inner(outbound_index, signature)

    return applicable
