"""
specguard config management.

Looks for a YAML config in this order:
- explicit path (``--config`` or the hooks' caller)
- $SPECGUARD_CONFIG
- ./specguard.yaml
- ./.claude/specguard.yaml

No config file means built-in defaults. The result is resolved once into an
immutable Settings object that the checks receive as a parameter.
"""

import copy
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path

import yaml

from .guard_types import ConfigError
from .phases import DEFAULT_DOCUMENT_PATTERNS, compile_document_patterns
from .rulesets import DEFAULT_REGISTRY, RulesetRegistry, build_registry
from .yaml_safety import safe_yaml_load

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SPECGUARD_CONFIG"
MAX_CONFIG_SIZE = 1_000_000  # 1MB

DEFAULT_CONFIG: dict = {
    "architecture": {
        "enabled": True,
    },
    "phase_review": {
        "enabled": True,
        "document_patterns": list(DEFAULT_DOCUMENT_PATTERNS),
    },
}


@dataclass(frozen=True)
class Settings:
    """Effective configuration for one process."""

    architecture_enabled: bool
    phase_review_enabled: bool
    registry: RulesetRegistry
    document_patterns: tuple[re.Pattern, ...]


def deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dicts. Override wins for conflicts.

    Special handling for lists: extends/appends instead of replace, so
    extra document_patterns add to the defaults.
    """
    result = base.copy()

    for key, value in override.items():
        if key in result:
            if isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = deep_merge(result[key], value)
            elif isinstance(result[key], list) and isinstance(value, list):
                result[key] = result[key] + [v for v in value if v not in result[key]]
            else:
                result[key] = value
        else:
            result[key] = value

    return result


def find_config(explicit: Path | str | None = None) -> Path | None:
    """Return the config file to use, or None for built-in defaults."""
    if explicit:
        path = Path(explicit)
        if not path.exists():
            raise ConfigError(f"Config not found: {path}")
        return path

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = Path(env_path)
        if not path.exists():
            raise ConfigError(f"Config from ${CONFIG_ENV_VAR} not found: {path}")
        return path

    for candidate in (Path("specguard.yaml"), Path(".claude") / "specguard.yaml"):
        if candidate.exists():
            return candidate
    return None


def load_config(config_path: Path | str | None = None) -> dict:
    """Load the raw config dict merged on top of DEFAULT_CONFIG."""
    path = find_config(config_path)
    if path is None:
        return copy.deepcopy(DEFAULT_CONFIG)

    if path.stat().st_size > MAX_CONFIG_SIZE:
        raise ConfigError(f"Config file too large (max 1MB): {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = safe_yaml_load(f) or {}
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        if mark:
            raise ConfigError(
                f"{path} is malformed (line {mark.line + 1}, column {mark.column + 1})"
            ) from e
        raise ConfigError(f"{path} is malformed: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")

    logger.debug("Loaded config from %s", path.name)
    return deep_merge(copy.deepcopy(DEFAULT_CONFIG), data)


def _section(config: dict, name: str) -> dict:
    section = config.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' must be a mapping")
    return section


def _enabled(section: dict, name: str) -> bool:
    value = section.get("enabled", True)
    if not isinstance(value, bool):
        raise ConfigError(f"'{name}.enabled' must be true or false, got {value!r}")
    return value


def resolve_settings(config: dict) -> Settings:
    """Turn a raw config dict into compiled, immutable Settings."""
    architecture = _section(config, "architecture")
    phase_review = _section(config, "phase_review")

    if architecture.get("rulesets") or architecture.get("priority"):
        registry = build_registry(architecture)
    else:
        registry = DEFAULT_REGISTRY

    patterns = phase_review.get("document_patterns") or list(DEFAULT_DOCUMENT_PATTERNS)
    if isinstance(patterns, str):
        patterns = [patterns]
    elif not isinstance(patterns, (list, tuple)):
        raise ConfigError(f"'phase_review.document_patterns' must be a list, got {patterns!r}")

    return Settings(
        architecture_enabled=_enabled(architecture, "architecture"),
        phase_review_enabled=_enabled(phase_review, "phase_review"),
        registry=registry,
        document_patterns=compile_document_patterns(patterns),
    )


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Main entry point: find, load and resolve the config."""
    return resolve_settings(load_config(config_path))


def default_settings() -> Settings:
    return resolve_settings(copy.deepcopy(DEFAULT_CONFIG))
