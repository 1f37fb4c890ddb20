"""Message passing on factor graphs."""

__all__ = [
    "ELIDED",
    "AdditionNode",
    "Bernoulli",
    "Beta",
    "ConfigError",
    "ConstantNode",
    "DisconnectedInterfaceError",
    "Edge",
    "EngineSettings",
    "EqualityNode",
    "FactorGraph",
    "FactorGraphError",
    "Family",
    "FixedGainNode",
    "GainEqualityNode",
    "Gamma",
    "Gaussian",
    "GaussianForm",
    "General",
    "InterfaceInUseError",
    "InterfaceRef",
    "InterfaceState",
    "Message",
    "MissingMessageError",
    "MvGaussian",
    "NoFreeInterfaceError",
    "Node",
    "NodeKind",
    "OwnershipError",
    "PreconditionError",
    "RuleNotFoundError",
    "RuleSet",
    "SelfLoopError",
    "StructuralError",
    "TypeMismatchError",
    "UpdateRule",
    "UpstreamUnavailableError",
    "Wishart",
    "calculate_backward_message",
    "calculate_edge_marginal",
    "calculate_forward_message",
    "calculate_marginal",
    "calculate_message",
    "calculate_messages",
    "export_messages_to_toml",
    "get_settings",
    "invalidate",
    "load_messages_from_toml",
    "load_settings",
    "message_to_dict",
    "push_message_invalidations",
]

from ._config import ConfigError, EngineSettings, get_settings, load_settings
from ._engine import (
    calculate_backward_message,
    calculate_edge_marginal,
    calculate_forward_message,
    calculate_marginal,
    calculate_message,
    calculate_messages,
    invalidate,
    push_message_invalidations,
)
from ._errors import (
    DisconnectedInterfaceError,
    FactorGraphError,
    InterfaceInUseError,
    MissingMessageError,
    NoFreeInterfaceError,
    OwnershipError,
    PreconditionError,
    RuleNotFoundError,
    SelfLoopError,
    StructuralError,
    TypeMismatchError,
    UpstreamUnavailableError,
)
from ._graph import Edge, FactorGraph, InterfaceRef, InterfaceState
from ._io import export_messages_to_toml, load_messages_from_toml, message_to_dict
from ._messages import Bernoulli, Beta, Family, Gamma, Gaussian, GaussianForm, General, Message, MvGaussian, Wishart
from ._nodes import AdditionNode, ConstantNode, EqualityNode, FixedGainNode, GainEqualityNode, Node, NodeKind
from ._rules import ELIDED, RuleSet, UpdateRule
