"""Configuration loading and management for Priospot.

Configuration sources are merged in priority order (lowest to highest):
    1. Defaults (defined in PriospotConfig)
    2. Project config (./priospot.toml)
    3. Explicit config file (--config)
    4. Environment variables (PRIOSPOT_* prefix)
    5. CLI overrides (passed as kwargs)

A TOML file may hold its settings in a ``[priospot]`` table or at the top
level. Keys are the field names of ``PriospotConfig``.

Example:
    >>> config = load_config(project_name="demo", source_roots=["src/main/kotlin"])
    >>> config.churn_days
    30
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

PROJECT_CONFIG_NAME = "priospot.toml"
ENV_PREFIX = "PRIOSPOT_"

_PATH_FIELDS = ("churn_log", "output_dir")
_PATH_LIST_FIELDS = ("source_roots", "coverage_reports", "complexity_reports")


@dataclass(frozen=True)
class PriospotConfig:
    """Settings for one analysis run.

    Relative paths are resolved against ``base_path``, which itself
    defaults to the current directory.

    Attributes:
        Project:
            project_name: Name recorded in the output document
            project_version: Optional version recorded in the output document
            base_path: Repository root; canonical paths are relative to it
            source_roots: Directories whose files form the inventory

        Reports:
            coverage_reports: JaCoCo/Cobertura XML or canonical JSON reports
            complexity_reports: Lint XML or JSON complexity reports
            churn_log: Precomputed change log; git is run when unset
            churn_days: Change-history lookback window in days

        Defaults:
            default_coverage_numerator: Coverage for files no report covers
            default_coverage_denominator: Must be positive
            default_max_ccn: Complexity for files nothing else covers
            test_source_markers: Path fragments marking test sources

        Output:
            output_dir: Where documents and diagrams are written
            emit_compatibility_xml: Also write the legacy XML document
            deterministic_timestamp: Pins ``generatedAt`` for reproducible output
    """

    project_name: str = ""
    project_version: Optional[str] = None
    base_path: Path = field(default_factory=Path.cwd)
    source_roots: List[Path] = field(default_factory=list)

    coverage_reports: List[Path] = field(default_factory=list)
    complexity_reports: List[Path] = field(default_factory=list)
    churn_log: Optional[Path] = None
    churn_days: int = 30

    default_coverage_numerator: float = 0.0
    default_coverage_denominator: float = 1.0
    default_max_ccn: int = 1000
    test_source_markers: List[str] = field(default_factory=lambda: ["src/test/"])

    output_dir: Path = Path("build/priospot")
    emit_compatibility_xml: bool = False
    deterministic_timestamp: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate configuration and resolve paths against base_path."""
        if not str(self.project_name).strip():
            raise InvalidConfigError("project_name", self.project_name, "must not be blank")
        if not self.source_roots:
            raise InvalidConfigError("source_roots", self.source_roots, "must not be empty")
        if self.churn_days < 1:
            raise InvalidConfigError("churn_days", self.churn_days, "must be at least 1")
        if self.default_coverage_denominator <= 0:
            raise InvalidConfigError(
                "default_coverage_denominator",
                self.default_coverage_denominator,
                "must be positive",
            )
        if not 0 <= self.default_coverage_numerator <= self.default_coverage_denominator:
            raise InvalidConfigError(
                "default_coverage_numerator",
                self.default_coverage_numerator,
                "must be between 0 and default_coverage_denominator",
            )
        if self.default_max_ccn < 1:
            raise InvalidConfigError("default_max_ccn", self.default_max_ccn, "must be at least 1")

        base = Path(self.base_path).absolute()
        object.__setattr__(self, "base_path", base)
        for name in _PATH_LIST_FIELDS:
            object.__setattr__(self, name, [self._resolve(p) for p in getattr(self, name)])
        for name in _PATH_FIELDS:
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, self._resolve(value))
        object.__setattr__(self, "test_source_markers", [str(m) for m in self.test_source_markers])

    def _resolve(self, path: Any) -> Path:
        path = Path(path)
        return path if path.is_absolute() else self.base_path / path


def load_config(config_file: Optional[Path] = None, **overrides) -> PriospotConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags); ``None``
            values are ignored so unset flags never mask file settings

    Returns:
        Validated PriospotConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing, or a
            setting fails validation
    """
    merged: dict = {}

    # 1. Project config
    project_config = Path.cwd() / PROJECT_CONFIG_NAME
    if project_config.exists():
        merged.update(_load_toml_file(project_config))

    # 2. Explicit config file
    if config_file is not None:
        config_file = Path(config_file)
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        merged.update(_load_toml_file(config_file))

    # 3. Environment variables
    merged.update(_load_env_vars())

    # 4. CLI overrides
    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return PriospotConfig(**merged)
    except TypeError as e:
        # Unknown field in config
        raise ConfigurationError(f"Invalid configuration: {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from PRIOSPOT_* environment variables.

    List settings (``PRIOSPOT_SOURCE_ROOTS``, ``PRIOSPOT_COVERAGE_REPORTS``,
    ...) are comma-separated.
    """
    type_hints = get_type_hints(PriospotConfig)
    result: dict[str, Any] = {}

    for field_name in PriospotConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)
        if env_value is None:
            continue

        try:
            result[field_name] = _parse_env_value(env_value, type_hints[field_name])
        except ValueError as e:
            raise InvalidConfigError(field_name, env_value, f"{env_key}: {e}")

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse an environment variable string to the field's type."""
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        type_hint = next(t for t in args if t is not type(None))

    origin = getattr(type_hint, "__origin__", None)
    if origin is list:
        (item_type,) = getattr(type_hint, "__args__", (str,))
        return [item_type(item.strip()) for item in value.split(",") if item.strip()]

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        if lower in ("false", "0", "no", "off"):
            return False
        raise ValueError(f"expected true/false, got '{value}'")

    if type_hint in (int, float, Path):
        return type_hint(value)

    return value


def _load_toml_file(path: Path) -> dict:
    """Load a TOML file, returning its ``[priospot]`` table when present."""
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        # Fallback to tomli for Python 3.9-3.10
        import tomli as tomllib  # type: ignore

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"Invalid config file '{path}': {e}")

    table = data.get("priospot", data)
    if not isinstance(table, dict):
        raise ConfigurationError(f"Invalid config file '{path}': [priospot] must be a table")
    return dict(table)
