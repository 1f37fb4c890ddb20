"""Message-passing engine.

This module contains:
- calculate_message and friends: demand-driven, memoising evaluation
- push_message_invalidations: keeps cached messages coherent
- calculate_marginal: combines opposing messages into beliefs
"""

from ._evaluator import (
    calculate_backward_message,
    calculate_forward_message,
    calculate_message,
    calculate_messages,
)
from ._invalidation import invalidate, push_message_invalidations
from ._marginal import calculate_edge_marginal, calculate_marginal
from ._resolution import collect_inbound, fallback_message

__all__ = [
    "calculate_backward_message",
    "calculate_edge_marginal",
    "calculate_forward_message",
    "calculate_marginal",
    "calculate_message",
    "calculate_messages",
    "collect_inbound",
    "fallback_message",
    "invalidate",
    "push_message_invalidations",
]
