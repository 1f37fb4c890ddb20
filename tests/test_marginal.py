"""Tests for marginal calculation."""

import numpy as np
import pytest

from fglab import (
    ConstantNode,
    EqualityNode,
    FactorGraph,
    Gamma,
    Gaussian,
    General,
    InterfaceRef,
    MissingMessageError,
    MvGaussian,
    TypeMismatchError,
    calculate_edge_marginal,
    calculate_marginal,
    calculate_message,
)


class TestCalculateMarginal:
    """Tests for calculate_marginal function."""

    def test_gaussian(self) -> None:
        """Should multiply two Gaussian messages."""
        belief = calculate_marginal(Gaussian(m=0.0, V=1.0), Gaussian(m=2.0, V=1.0))

        assert belief == Gaussian(m=1.0, V=0.5)

    def test_multivariate(self) -> None:
        """Should multiply two multivariate Gaussian messages."""
        forward = MvGaussian(m=[0.0, 0.0], V=np.eye(2))
        backward = MvGaussian(m=[2.0, 4.0], V=np.eye(2))

        belief = calculate_marginal(forward, backward)

        assert belief == MvGaussian(m=[1.0, 2.0], V=0.5 * np.eye(2))

    def test_gamma(self) -> None:
        """Should combine two inverted Gamma messages."""
        belief = calculate_marginal(Gamma(a=1.0, b=2.0, inverted=True), Gamma(a=3.0, b=4.0, inverted=True))

        assert belief == Gamma(a=5.0, b=6.0, inverted=True)

    def test_general(self) -> None:
        """Should combine two General messages."""
        assert calculate_marginal(General(2.0), General(2.0)) == General(2.0)
        assert calculate_marginal(General([1.0, 1.0]), General([2.0, 2.0])) == General([0.0, 0.0])

    def test_family_mismatch(self) -> None:
        """Should raise TypeMismatchError for messages of different families."""
        with pytest.raises(TypeMismatchError, match="gamma"):
            calculate_marginal(Gaussian(m=0.0, V=1.0), Gamma())

    def test_result_is_independent_of_inputs(self) -> None:
        """Should return a belief that does not share state with its inputs."""
        forward = Gaussian(m=0.0, V=1.0)
        backward = Gaussian(m=2.0, V=1.0)

        belief = calculate_marginal(forward, backward)

        assert belief is not forward
        assert belief is not backward
        assert forward == Gaussian(m=0.0, V=1.0)


class TestCalculateEdgeMarginal:
    """Tests for calculate_edge_marginal function."""

    def test_edge(self) -> None:
        """Should combine the forward and backward messages of an edge."""
        graph = FactorGraph()
        eq = graph.add_node(EqualityNode(id="eq"))
        graph.connect(graph.add_node(ConstantNode(Gaussian(m=0.0, V=1.0), id="prior")), eq)
        graph.connect(graph.add_node(ConstantNode(Gaussian(m=2.0, V=2.0), id="observation")), eq)
        edge = graph.connect(eq, graph.add_node(ConstantNode(Gaussian(m=4.0, V=1.0), id="sink")))
        calculate_message(graph, edge.tail)
        calculate_message(graph, edge.head)

        belief = calculate_edge_marginal(graph, edge)

        # precisions 1 + 0.5 + 1, precision-weighted means 0 + 1 + 4
        assert belief == Gaussian(xi=5.0, W=2.5)

    def test_missing_message(self) -> None:
        """Should raise MissingMessageError when an end holds no message."""
        graph = FactorGraph()
        graph.add_node(EqualityNode(id="a"))
        graph.add_node(EqualityNode(id="b"))
        edge = graph.connect(InterfaceRef("a", 0), InterfaceRef("b", 0))
        graph._store(edge.tail, Gaussian(m=0.0, V=1.0))

        with pytest.raises(MissingMessageError, match=r"b\[0\]"):
            calculate_edge_marginal(graph, edge)

    def test_invalid_messages_are_used(self) -> None:
        """Should use messages that are no longer valid."""
        graph = FactorGraph()
        graph.add_node(EqualityNode(id="a"))
        graph.add_node(EqualityNode(id="b"))
        edge = graph.connect(InterfaceRef("a", 0), InterfaceRef("b", 0))
        graph._store(edge.tail, General(1.0))
        graph._store(edge.head, General(1.0))
        graph._set_valid(edge.head, valid=False)

        assert calculate_edge_marginal(graph, edge) == General(1.0)
