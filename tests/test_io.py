"""Tests for reading and writing message files."""

import tomllib
from pathlib import Path

import numpy as np
import pytest
from pydantic import ValidationError

from fglab import (
    Bernoulli,
    Beta,
    Gamma,
    Gaussian,
    General,
    MvGaussian,
    Wishart,
    export_messages_to_toml,
    load_messages_from_toml,
    message_to_dict,
)


class TestLoadMessages:
    def test_load_all_families(self, tmp_path: Path) -> None:
        """Should load a message of every family."""
        path = tmp_path / "messages.toml"
        path.write_text(
            """
[prior]
family = "gaussian"
m = 1.0
V = 2.0

[state]
family = "mv_gaussian"
xi = [1.0, 2.0]
W = [[1.0, 0.0], [0.0, 2.0]]

[noise]
family = "gamma"
a = 3
b = 4.0
inverted = true

[switch]
family = "bernoulli"
p = 0.25

[rate]
family = "beta"
a = 2.0
b = 5.0

[precision]
family = "wishart"
V = [[1.0, 0.0], [0.0, 1.0]]
nu = 3.0

[offset]
family = "general"
value = [1.0, 2.0]
""",
        )

        messages = load_messages_from_toml(path)

        assert list(messages) == ["prior", "state", "noise", "switch", "rate", "precision", "offset"]
        assert messages["prior"] == Gaussian(m=1.0, V=2.0)
        assert messages["state"] == MvGaussian(xi=[1.0, 2.0], W=np.diag([1.0, 2.0]))
        assert messages["noise"] == Gamma(a=3.0, b=4.0, inverted=True)
        assert messages["switch"] == Bernoulli(0.25)
        assert messages["rate"] == Beta(2.0, 5.0)
        assert messages["precision"] == Wishart(np.eye(2), nu=3.0)
        assert messages["offset"] == General([1.0, 2.0])

    def test_unknown_family(self, tmp_path: Path) -> None:
        """Should reject an unknown family."""
        path = tmp_path / "messages.toml"
        path.write_text('[x]\nfamily = "poisson"\nrate = 1.0\n')

        with pytest.raises(ValidationError):
            load_messages_from_toml(path)

    def test_unknown_parameter(self, tmp_path: Path) -> None:
        """Should reject an unknown parameter."""
        path = tmp_path / "messages.toml"
        path.write_text('[x]\nfamily = "gaussian"\nm = 1.0\nV = 1.0\nsigma = 2.0\n')

        with pytest.raises(ValidationError):
            load_messages_from_toml(path)

    def test_incomplete_gaussian(self, tmp_path: Path) -> None:
        """Should reject a Gaussian without a spread."""
        path = tmp_path / "messages.toml"
        path.write_text('[x]\nfamily = "gaussian"\nm = 1.0\n')

        with pytest.raises(ValueError, match="spread"):
            load_messages_from_toml(path)


class TestMessageToDict:
    def test_univariate_gaussian_uses_plain_numbers(self) -> None:
        """Should write univariate Gaussian parameters as plain numbers."""
        assert message_to_dict(Gaussian(xi=2.0, W=4.0)) == {"family": "gaussian", "W": 4.0, "xi": 2.0}

    def test_multivariate_gaussian_uses_lists(self) -> None:
        """Should write multivariate Gaussian parameters as lists."""
        data = message_to_dict(MvGaussian(m=[1.0, 2.0], V=np.eye(2)))

        assert data == {"family": "mv_gaussian", "m": [1.0, 2.0], "V": [[1.0, 0.0], [0.0, 1.0]]}

    def test_gamma(self) -> None:
        """Should write the Gamma parameters and inversion."""
        assert message_to_dict(Gamma(a=2.0, b=3.0)) == {"family": "gamma", "a": 2.0, "b": 3.0, "inverted": False}

    def test_general(self) -> None:
        """Should write the General value."""
        assert message_to_dict(General(2.0)) == {"family": "general", "value": 2.0}
        assert message_to_dict(General([[1.0]])) == {"family": "general", "value": [[1.0]]}


class TestExportMessages:
    def test_export_is_valid_toml(self, tmp_path: Path) -> None:
        """Should export a valid TOML file."""
        path = tmp_path / "out.toml"

        export_messages_to_toml({"belief": Gaussian(m=1.0, V=0.5), "noise": Beta(1.0, 2.0)}, path)

        with path.open("rb") as f:
            data = tomllib.load(f)
        assert data["belief"] == {"family": "gaussian", "m": 1.0, "V": 0.5}
        assert data["noise"] == {"family": "beta", "a": 1.0, "b": 2.0}

    def test_exported_file_loads_back(self, tmp_path: Path) -> None:
        """Should load the exported file back to equal messages."""
        path = tmp_path / "out.toml"
        messages = {"state": MvGaussian(xi=[1.0, 0.0], W=np.eye(2)), "precision": Wishart(np.eye(2), nu=4.0)}

        export_messages_to_toml(messages, path)

        assert load_messages_from_toml(path) == messages
