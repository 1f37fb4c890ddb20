"""Engine settings, optionally loaded from pyproject.toml."""

import tomllib
from dataclasses import dataclass, fields
from pathlib import Path

DEFAULT_DEPTH_BUDGET = 10


class ConfigError(Exception):
    """Error in fglab configuration."""


@dataclass(slots=True, frozen=True)
class EngineSettings:
    """Settings of the message evaluator.

    Attributes:
        depth_budget: Number of nested message computations allowed before
            the evaluator stops recursing and uses a fallback message.
        fallback_mean: Mean of the fallback Gaussian used when nothing is
            known about the family expected at an interface.
        fallback_variance: Variance of that fallback Gaussian.

    """

    depth_budget: int = DEFAULT_DEPTH_BUDGET
    fallback_mean: float = 10.0
    fallback_variance: float = 100.0

    def __post_init__(self) -> None:
        if isinstance(self.depth_budget, bool) or not isinstance(self.depth_budget, int) or self.depth_budget < 0:
            msg = f"depth_budget must be a non-negative integer, got {self.depth_budget!r}"
            raise ConfigError(msg)
        if not self.fallback_variance > 0:
            msg = f"fallback_variance must be positive, got {self.fallback_variance!r}"
            raise ConfigError(msg)


def find_pyproject_toml(start_dir: Path | None = None) -> Path | None:
    """Find pyproject.toml by walking up from start_dir.

    Args:
        start_dir: Starting directory. Defaults to current working directory.

    Returns:
        Path to pyproject.toml if found, None otherwise.

    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = start_dir.resolve()

    while True:
        candidate = current / "pyproject.toml"
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            # Reached filesystem root
            return None
        current = parent


def _parse_number(section: dict[str, object], key: str, *, integer: bool = False) -> int | float | None:
    if key not in section:
        return None
    value = section[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        msg = f"Invalid [tool.fglab].{key}: expected a number, got {value!r}"
        raise ConfigError(msg)
    if integer and not isinstance(value, int):
        msg = f"Invalid [tool.fglab].{key}: expected an integer, got {value!r}"
        raise ConfigError(msg)
    return value if integer else float(value)


def load_settings(pyproject_path: Path) -> EngineSettings:
    """Load and validate [tool.fglab] settings from pyproject.toml.

    Args:
        pyproject_path: Path to pyproject.toml

    Returns:
        Parsed EngineSettings (defaults for missing keys)

    Raises:
        ConfigError: If the configuration is invalid

    """
    with pyproject_path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {pyproject_path}: {e}"
            raise ConfigError(msg) from e

    section = data.get("tool", {}).get("fglab", {})
    if not section:
        return EngineSettings()

    known = {f.name for f in fields(EngineSettings)}
    unknown = sorted(set(section) - known)
    if unknown:
        msg = f"Unknown [tool.fglab] keys: {', '.join(unknown)}"
        raise ConfigError(msg)

    values: dict[str, int | float] = {}
    for key in known:
        value = _parse_number(section, key, integer=key == "depth_budget")
        if value is not None:
            values[key] = value

    return EngineSettings(**values)  # type: ignore[arg-type]


def get_settings() -> EngineSettings:
    """Get settings from pyproject.toml in current directory or parents.

    Returns:
        EngineSettings (defaults if no pyproject.toml or no [tool.fglab] section)

    """
    pyproject_path = find_pyproject_toml()
    if pyproject_path is None:
        return EngineSettings()
    return load_settings(pyproject_path)
