"""Tests for the demand-driven message evaluator."""

import logging
from pathlib import Path

import numpy as np
import pytest

from fglab import (
    ConstantNode,
    DisconnectedInterfaceError,
    EngineSettings,
    EqualityNode,
    FactorGraph,
    FixedGainNode,
    Gamma,
    Gaussian,
    General,
    InterfaceRef,
    OwnershipError,
    RuleNotFoundError,
    UpstreamUnavailableError,
    calculate_backward_message,
    calculate_forward_message,
    calculate_message,
    calculate_messages,
)
from fglab._engine import collect_inbound, fallback_message


def build_fusion_graph() -> tuple[FactorGraph, EqualityNode]:
    """Prior and observation of one variable, joined by an equality node."""
    graph = FactorGraph()
    eq = graph.add_node(EqualityNode(id="eq"))
    prior = graph.add_node(ConstantNode(Gaussian(m=0.0, V=1.0), id="prior"))
    observation = graph.add_node(ConstantNode(Gaussian(m=2.0, V=1.0), id="observation"))
    graph.connect(prior, eq)
    graph.connect(observation, eq)
    return graph, eq


def build_cycle() -> FactorGraph:
    """Two equality nodes joined by two edges, their third ports left free."""
    graph = FactorGraph()
    graph.add_node(EqualityNode(id="left"))
    graph.add_node(EqualityNode(id="right"))
    graph.connect(InterfaceRef("left", 0), InterfaceRef("right", 0))
    graph.connect(InterfaceRef("left", 1), InterfaceRef("right", 1))
    return graph


class TestCalculateMessage:
    """Tests for calculate_message function."""

    def test_computes_and_caches_inbound_messages(self) -> None:
        """Should compute inbound messages first and cache them."""
        graph, eq = build_fusion_graph()

        result = calculate_message(graph, InterfaceRef("eq", 2))

        assert result == Gaussian(m=1.0, V=0.5)
        assert graph.message(InterfaceRef("eq", 2)) is result
        assert graph.is_valid(InterfaceRef("eq", 2))
        assert graph.is_valid(InterfaceRef("prior", 0))
        assert graph.message(InterfaceRef("observation", 0)) == Gaussian(m=2.0, V=1.0)

    def test_uses_cached_inbound_messages(self) -> None:
        """Should reuse valid inbound messages."""
        graph, eq = build_fusion_graph()
        graph._store(InterfaceRef("prior", 0), Gaussian(m=4.0, V=1.0))

        result = calculate_message(graph, InterfaceRef("eq", 2), eq)

        assert result == Gaussian(m=3.0, V=0.5)

    def test_recomputes_invalid_inbound_messages(self) -> None:
        """Should recompute inbound messages that are not valid."""
        graph, _ = build_fusion_graph()
        calculate_message(graph, InterfaceRef("eq", 2))
        graph._store(InterfaceRef("prior", 0), Gaussian(m=4.0, V=1.0))
        graph._set_valid(InterfaceRef("prior", 0), valid=False)

        result = calculate_message(graph, InterfaceRef("eq", 2))

        assert result == Gaussian(m=1.0, V=0.5)

    def test_chain_through_several_nodes(self) -> None:
        """Should recurse through a chain of nodes."""
        graph = FactorGraph()
        prior = graph.add_node(ConstantNode(Gaussian(m=1.0, V=1.0), id="prior"))
        gain = graph.add_node(FixedGainNode(3.0, id="gain"))
        eq = graph.add_node(EqualityNode(id="eq"))
        observation = graph.add_node(ConstantNode(Gaussian(m=6.0, V=9.0), id="observation"))
        graph.connect(prior, gain)
        graph.connect(gain, eq)
        graph.connect(observation, eq)

        result = calculate_message(graph, InterfaceRef("eq", 2))

        # N(3, 9) from the gain, fused with N(6, 9)
        assert result == Gaussian(m=4.5, V=4.5)
        assert graph.message(InterfaceRef("gain", 1)) == Gaussian(m=3.0, V=9.0)

    def test_general_messages(self) -> None:
        """Should calculate General messages."""
        graph = FactorGraph()
        eq = graph.add_node(EqualityNode(id="eq"))
        graph.connect(graph.add_node(ConstantNode(General(2.0))), eq)
        graph.connect(graph.add_node(ConstantNode(General(3.0))), eq)

        assert calculate_message(graph, InterfaceRef("eq", 2)) == General(0.0)

    def test_ownership_mismatch(self) -> None:
        """Should raise OwnershipError when the interface belongs to another node."""
        graph, _ = build_fusion_graph()

        with pytest.raises(OwnershipError):
            calculate_message(graph, InterfaceRef("eq", 2), graph.node("prior"))

    def test_disconnected_inbound_interface(self) -> None:
        """Should raise DisconnectedInterfaceError for an inbound interface without a partner."""
        graph = FactorGraph()
        eq = graph.add_node(EqualityNode(id="eq"))
        graph.connect(graph.add_node(ConstantNode(Gaussian(m=0.0, V=1.0))), eq)

        with pytest.raises(DisconnectedInterfaceError, match=r"eq\[1\]"):
            calculate_message(graph, InterfaceRef("eq", 2))

    def test_no_matching_rule(self) -> None:
        """Should raise RuleNotFoundError when no rule matches."""
        graph = FactorGraph()
        eq = graph.add_node(EqualityNode(id="eq"))
        graph.connect(graph.add_node(ConstantNode(Gaussian(m=0.0, V=1.0))), eq)
        graph.connect(graph.add_node(ConstantNode(Gamma())), eq)

        with pytest.raises(RuleNotFoundError):
            calculate_message(graph, InterfaceRef("eq", 2))

    def test_logs_progress(self, caplog: pytest.LogCaptureFixture) -> None:
        """Should log every applied rule to the given logger."""
        graph, _ = build_fusion_graph()
        logger = logging.getLogger("test_evaluator")

        with caplog.at_level(logging.DEBUG, logger="test_evaluator"):
            calculate_message(graph, InterfaceRef("eq", 2), logger=logger)

        assert "sp_equality_gaussian" in caplog.text
        assert "sp_constant" in caplog.text


class TestDepthBudget:
    """Tests for the depth budget and its fallback."""

    def test_cycle_terminates_with_fallback(self, caplog: pytest.LogCaptureFixture) -> None:
        """Should terminate on a cycle by falling back."""
        graph = build_cycle()
        graph.connect(InterfaceRef("left", 2), graph.add_node(ConstantNode(Gaussian(m=0.0, V=1.0), id="terminal")))
        graph.connect(InterfaceRef("right", 2), graph.add_node(ConstantNode(Gaussian(m=1.0, V=1.0), id="other")))

        with caplog.at_level(logging.INFO, logger="fglab"):
            result = calculate_message(graph, InterfaceRef("right", 2))

        assert isinstance(result, Gaussian)
        assert graph.is_valid(InterfaceRef("right", 2))
        assert "Depth budget exhausted" in caplog.text

    def test_zero_budget_returns_fallback(self) -> None:
        """Should store the fallback when the budget is zero."""
        graph, _ = build_fusion_graph()
        settings = EngineSettings(depth_budget=0, fallback_mean=10.0, fallback_variance=100.0)

        result = calculate_message(graph, InterfaceRef("eq", 2), settings=settings)

        assert result == Gaussian(m=10.0, V=100.0)
        assert graph.is_valid(InterfaceRef("eq", 2))
        assert graph.message(InterfaceRef("prior", 0)) is None

    def test_explicit_budget_overrides_settings(self) -> None:
        """Should prefer an explicit depth budget over the settings."""
        graph, _ = build_fusion_graph()

        result = calculate_message(graph, InterfaceRef("eq", 2), depth_budget=0)

        assert result == Gaussian(m=10.0, V=100.0)

    def test_settings_default_to_pyproject(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should use the [tool.fglab] settings when none are given."""
        (tmp_path / "pyproject.toml").write_text("[tool.fglab]\ndepth_budget = 0\nfallback_mean = 7.0\n")
        monkeypatch.chdir(tmp_path)
        graph, _ = build_fusion_graph()

        result = calculate_message(graph, InterfaceRef("eq", 2))

        assert result == Gaussian(m=7.0, V=100.0)
        assert graph.message(InterfaceRef("prior", 0)) is None

    def test_explicit_settings_override_pyproject(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should prefer explicit settings over pyproject.toml."""
        (tmp_path / "pyproject.toml").write_text("[tool.fglab]\ndepth_budget = 0\n")
        monkeypatch.chdir(tmp_path)
        graph, _ = build_fusion_graph()

        result = calculate_message(graph, InterfaceRef("eq", 2), settings=EngineSettings())

        assert result == Gaussian(m=1.0, V=0.5)

    def test_budget_of_one_falls_back_on_inbound(self) -> None:
        """Should fall back on the inbound messages when the budget is one."""
        graph, _ = build_fusion_graph()

        result = calculate_message(graph, InterfaceRef("eq", 2), depth_budget=1)

        # both inbound messages are fallbacks N(10, 100)
        assert result == Gaussian(m=10.0, V=50.0)

    def test_fallback_follows_known_family(self) -> None:
        """Should keep the family of the last held message."""
        graph = FactorGraph()
        graph.add_node(EqualityNode(id="eq"))
        graph._store(InterfaceRef("eq", 0), Gamma(a=4.0, b=2.0, inverted=True))

        result = fallback_message(graph, InterfaceRef("eq", 0), EngineSettings())

        assert result == Gamma(a=1.0, b=1e-3, inverted=True)

    def test_fallback_follows_partner_shape(self) -> None:
        """Should keep the shape of the partner's message."""
        graph = build_cycle()
        graph._store(InterfaceRef("right", 0), General([1.0, 2.0, 3.0]))

        result = fallback_message(graph, InterfaceRef("left", 0), EngineSettings())

        assert result == General([0.0, 0.0, 0.0])

    def test_fallback_keeps_gaussian_dimension(self) -> None:
        """Should build a Gaussian fallback from the configured mean and variance."""
        graph = build_cycle()
        graph._store(InterfaceRef("left", 1), Gaussian(m=1.0, V=1.0).to_canonical())

        result = fallback_message(graph, InterfaceRef("left", 1), EngineSettings(fallback_mean=1.0))

        assert result == Gaussian(m=1.0, V=100.0)


class TestInboundCollection:
    """Tests for collect_inbound function."""

    def test_elided_slot(self) -> None:
        """Should put ELIDED in the outbound slot."""
        graph, _ = build_fusion_graph()
        calculate_message(graph, InterfaceRef("eq", 2))

        inbound = collect_inbound(graph, InterfaceRef("eq", 2))

        assert inbound[0] == Gaussian(m=0.0, V=1.0)
        assert inbound[1] == Gaussian(m=2.0, V=1.0)
        assert repr(inbound[2]) == "ELIDED"

    def test_invalid_upstream(self) -> None:
        """Should raise UpstreamUnavailableError for an invalid inbound message."""
        graph, _ = build_fusion_graph()
        graph._store(InterfaceRef("prior", 0), Gaussian(m=0.0, V=1.0))

        with pytest.raises(UpstreamUnavailableError) as excinfo:
            collect_inbound(graph, InterfaceRef("eq", 2))

        assert excinfo.value.interface == InterfaceRef("eq", 1)


class TestConvenience:
    """Tests for the batch, forward and backward helpers."""

    def test_calculate_messages(self) -> None:
        """Should calculate every outbound message of a node in port order."""
        graph = FactorGraph()
        gain = graph.add_node(FixedGainNode(2.0, id="gain"))
        graph.connect(graph.add_node(ConstantNode(Gaussian(m=1.0, V=1.0), id="source")), gain)
        graph.connect(gain, graph.add_node(ConstantNode(Gaussian(m=4.0, V=4.0), id="sink")))

        backward, forward = calculate_messages(graph, gain)

        assert forward == Gaussian(m=2.0, V=4.0)
        assert backward == Gaussian(xi=2.0, W=1.0)

    def test_forward_and_backward(self) -> None:
        """Should calculate the messages at the tail and at the head of an edge."""
        graph = FactorGraph()
        source = graph.add_node(ConstantNode(Gaussian(m=1.0, V=1.0), id="source"))
        gain = graph.add_node(FixedGainNode(np.array([[2.0]]), id="gain"))
        sink = graph.add_node(ConstantNode(Gaussian(m=4.0, V=4.0), id="sink"))
        graph.connect(source, gain)
        edge = graph.connect(gain, sink)

        assert calculate_forward_message(graph, edge) == Gaussian(m=2.0, V=4.0)
        assert calculate_backward_message(graph, edge) == Gaussian(m=4.0, V=4.0)
