"""Graph module providing the factor graph data model.

This module contains:
- FactorGraph: An arena of nodes and per-interface state
- InterfaceRef: A stable handle to one port of a node
- InterfaceState: Snapshot of an interface's partner, message and validity
- Edge: A pair of partnered interfaces
"""

from ._factor_graph import Edge, FactorGraph, InterfaceRef, InterfaceState

__all__ = ["Edge", "FactorGraph", "InterfaceRef", "InterfaceState"]
