"""Factor node kinds and their update rules.

Each node kind is a frozen dataclass carrying its static parameters and a
``rules`` rule set implementing the dispatch contract.
"""

from ._addition import ADDITION_RULES, AdditionNode
from ._base import Node, NodeKind, generate_node_id
from ._constant import CONSTANT_RULES, ConstantNode
from ._equality import EQUALITY_RULES, EqualityNode, multiply_gaussians
from ._fixed_gain import FIXED_GAIN_RULES, FixedGainNode
from ._gain_equality import GAIN_EQUALITY_RULES, GainEqualityNode

NODE_TYPES: tuple[type[Node], ...] = (
    ConstantNode,
    EqualityNode,
    AdditionNode,
    FixedGainNode,
    GainEqualityNode,
)

__all__ = [
    "ADDITION_RULES",
    "CONSTANT_RULES",
    "EQUALITY_RULES",
    "FIXED_GAIN_RULES",
    "GAIN_EQUALITY_RULES",
    "NODE_TYPES",
    "AdditionNode",
    "ConstantNode",
    "EqualityNode",
    "FixedGainNode",
    "GainEqualityNode",
    "Node",
    "NodeKind",
    "generate_node_id",
    "multiply_gaussians",
]
