"""Architecture layer rulesets, one per ecosystem.

Rulesets are plain data here and get compiled into frozen objects once per
process. The classifier functions in ``architecture`` take the compiled
registry as a parameter rather than reading module globals, so a project's
``specguard.yaml`` can swap in its own rules without monkeypatching.

Extension priority is explicit: a ``.ts`` file is first checked against the
Vue front-end fragments and only falls through to the generic TypeScript
fragments when none of them match.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from .guard_types import ConfigError

# import Foo from 'x' / import { a, b } from 'x' / import * as ns from 'x'
# import Foo, { a } from 'x' / import type { T } from 'x'
ES_IMPORT_PATTERN = (
    r"import\s+(?:type\s+)?"
    r"(?:[\w$]+\s*,\s*)?"
    r"(?:\{[^}]*\}|[\w$]+|\*\s+as\s+[\w$]+)"
    r"\s+from\s+['\"`]([^'\"`]+)['\"`]"
)

_BUILTIN_RULESETS: dict[str, dict] = {
    "java": {
        "name": "DDD layering",
        "rule": "Controller → Application → Domain ← Gateway, Mapper(Gateway)",
        "allowed_dependencies": {
            "Controller": ["Application"],
            "Application": ["Domain"],
            "Domain": [],
            "Gateway": ["Domain"],
            "Mapper": ["Domain"],
        },
        "path_rules": [
            ["/controller/", "Controller"],
            ["/application/", "Application"],
            ["/appservice/", "Application"],
            ["/domain/", "Domain"],
            ["/entity/", "Domain"],
            ["/gateway/", "Gateway"],
            ["/infra/", "Gateway"],
            ["/mapper/", "Mapper"],
            ["/dao/", "Mapper"],
        ],
        "import_rules": [
            [".controller.", "Controller"],
            [".application.", "Application"],
            [".appservice.", "Application"],
            [".domain.", "Domain"],
            [".entity.", "Domain"],
            [".gateway.", "Gateway"],
            [".infra.", "Gateway"],
            [".mapper.", "Mapper"],
            [".dao.", "Mapper"],
        ],
        "import_pattern": r"import\s+(?:static\s+)?([a-zA-Z0-9_.]+(?:\.\*)?)\s*;",
    },
    "swift": {
        "name": "MVVM layering",
        "rule": "View → ViewModel → Service → Gateway → Network",
        "allowed_dependencies": {
            "View": ["ViewModel"],
            "ViewModel": ["Service"],
            "Service": ["Gateway"],
            "Gateway": ["Network"],
            "Network": [],
        },
        "path_rules": [
            ["/views/", "View"],
            ["/view/", "View"],
            ["/viewmodels/", "ViewModel"],
            ["/viewmodel/", "ViewModel"],
            ["/services/", "Service"],
            ["/service/", "Service"],
            ["/gateways/", "Gateway"],
            ["/gateway/", "Gateway"],
            ["/network/", "Network"],
            ["/api/", "Network"],
        ],
        "import_rules": [
            ["viewmodel", "ViewModel"],
            ["service", "Service"],
            ["gateway", "Gateway"],
            ["network", "Network"],
            ["api", "Network"],
        ],
        "import_pattern": r"import\s+([a-zA-Z0-9_]+)",
    },
    "vue": {
        "name": "Vue 3 front-end layering",
        "rule": "View → Composable → Service → API → Request",
        "allowed_dependencies": {
            "View": ["Composable"],
            "Composable": ["Service"],
            "Service": ["API"],
            "API": ["Request"],
            "Request": [],
        },
        "path_rules": [
            # single-file components are always views
            ["", "View", [".vue"]],
            ["/views/", "View"],
            ["/view/", "View"],
            ["/composables/", "Composable"],
            ["/composable/", "Composable"],
            ["/services/", "Service"],
            ["/service/", "Service"],
            ["/api/", "API"],
            ["/utils/request", "Request"],
        ],
        "import_rules": [
            ["composable", "Composable"],
            ["service", "Service"],
            ["api/", "API"],
            ["request", "Request"],
        ],
        "import_pattern": ES_IMPORT_PATTERN,
    },
    "typescript": {
        "name": "TypeScript layering",
        "rule": "Controller → Service → Repository → Model",
        "allowed_dependencies": {
            "Controller": ["Service"],
            "Service": ["Repository", "Model"],
            "Repository": ["Model"],
            "Model": [],
        },
        "path_rules": [
            ["/controller/", "Controller"],
            ["/service/", "Service"],
            ["/repository/", "Repository"],
            ["/model/", "Model"],
        ],
        "import_rules": [
            ["controller", "Controller"],
            ["service", "Service"],
            ["repository", "Repository"],
            ["model", "Model"],
        ],
        "import_pattern": ES_IMPORT_PATTERN,
    },
}

_BUILTIN_PRIORITY: dict[str, list[str]] = {
    ".java": ["java"],
    ".swift": ["swift"],
    ".vue": ["vue"],
    ".ts": ["vue", "typescript"],
    ".tsx": ["vue", "typescript"],
}

_REQUIRED_KEYS = ("rule", "allowed_dependencies", "path_rules", "import_rules", "import_pattern")


@dataclass(frozen=True)
class PathRule:
    """A path fragment that puts a file into a layer."""

    fragment: str
    layer: str
    extensions: frozenset[str] | None = None

    def matches(self, path_lower: str, extension: str) -> bool:
        if self.extensions is not None and extension not in self.extensions:
            return False
        return self.fragment in path_lower


@dataclass(frozen=True)
class LayerRuleset:
    """Layers of one ecosystem and the dependencies each may take."""

    ecosystem: str
    name: str
    rule: str
    allowed: Mapping[str, frozenset[str]]
    path_rules: tuple[PathRule, ...]
    import_rules: tuple[tuple[str, str], ...]
    import_pattern: re.Pattern

    @property
    def layers(self) -> tuple[str, ...]:
        return tuple(self.allowed)

    def allows(self, layer: str, dependency_layer: str) -> bool:
        return dependency_layer in self.allowed.get(layer, frozenset())


@dataclass(frozen=True)
class RulesetRegistry:
    """Compiled rulesets plus the extension -> ecosystem priority list."""

    rulesets: Mapping[str, LayerRuleset]
    priority: Mapping[str, tuple[str, ...]]

    def get(self, ecosystem: str | None) -> LayerRuleset | None:
        if ecosystem is None:
            return None
        return self.rulesets.get(ecosystem)

    def ecosystems_for(self, extension: str) -> tuple[str, ...]:
        return self.priority.get(extension.lower(), ())

    @property
    def extensions(self) -> frozenset[str]:
        return frozenset(self.priority)


def _as_list(ecosystem: str, what: str, value) -> list:
    """None means empty; anything other than a list is a config error."""
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise ConfigError(f"Ruleset '{ecosystem}': {what} must be a list, got {value!r}")
    return list(value)


def _path_rule(ecosystem: str, entry) -> PathRule:
    if not isinstance(entry, (list, tuple)) or len(entry) not in (2, 3):
        raise ConfigError(
            f"Ruleset '{ecosystem}': path rule must be [fragment, layer] "
            f"or [fragment, layer, [extensions]], got {entry!r}"
        )
    fragment, layer = str(entry[0]).lower(), str(entry[1])
    extensions = None
    if len(entry) == 3 and entry[2] is not None:
        raw = entry[2]
        if isinstance(raw, str):
            raw = [raw]
        extensions = frozenset(
            str(ext).lower() for ext in _as_list(ecosystem, "path rule extensions", raw)
        )
    return PathRule(fragment, layer, extensions)


def _import_rule(ecosystem: str, entry) -> tuple[str, str]:
    if not isinstance(entry, (list, tuple)) or len(entry) != 2:
        raise ConfigError(
            f"Ruleset '{ecosystem}': import rule must be [fragment, layer], got {entry!r}"
        )
    return str(entry[0]).lower(), str(entry[1])


def compile_ruleset(ecosystem: str, data: Mapping) -> LayerRuleset:
    """Validate raw ruleset data and freeze it into a LayerRuleset."""
    if not isinstance(data, Mapping):
        raise ConfigError(f"Ruleset '{ecosystem}' must be a mapping")
    missing = [key for key in _REQUIRED_KEYS if key not in data]
    if missing:
        raise ConfigError(f"Ruleset '{ecosystem}' is missing: {', '.join(missing)}")

    raw_allowed = data["allowed_dependencies"]
    if not isinstance(raw_allowed, Mapping) or not raw_allowed:
        raise ConfigError(f"Ruleset '{ecosystem}': allowed_dependencies must be a non-empty mapping")
    allowed = {
        str(layer): frozenset(
            str(dep) for dep in _as_list(ecosystem, f"allowed_dependencies.{layer}", deps)
        )
        for layer, deps in raw_allowed.items()
    }

    path_rules = tuple(
        _path_rule(ecosystem, entry)
        for entry in _as_list(ecosystem, "path_rules", data["path_rules"])
    )
    import_rules = tuple(
        _import_rule(ecosystem, entry)
        for entry in _as_list(ecosystem, "import_rules", data["import_rules"])
    )

    known = set(allowed)
    referenced = {rule.layer for rule in path_rules}
    referenced.update(layer for _, layer in import_rules)
    for deps in allowed.values():
        referenced.update(deps)
    unknown = sorted(referenced - known)
    if unknown:
        raise ConfigError(f"Ruleset '{ecosystem}' references unknown layers: {', '.join(unknown)}")

    try:
        pattern = re.compile(data["import_pattern"])
    except (re.error, TypeError) as e:
        raise ConfigError(f"Ruleset '{ecosystem}': invalid import_pattern: {e}") from e
    if pattern.groups != 1:
        raise ConfigError(
            f"Ruleset '{ecosystem}': import_pattern needs exactly one capture group"
        )

    return LayerRuleset(
        ecosystem=ecosystem,
        name=str(data.get("name", ecosystem)),
        rule=str(data["rule"]),
        allowed=MappingProxyType(allowed),
        path_rules=path_rules,
        import_rules=import_rules,
        import_pattern=pattern,
    )


def _merge_ruleset(base: Mapping, override: Mapping) -> dict:
    """Override keys replace the built-in ones, except allowed_dependencies
    which is merged layer by layer."""
    merged = dict(base)
    for key, value in override.items():
        if key == "allowed_dependencies" and isinstance(value, Mapping):
            merged[key] = {**base.get(key, {}), **value}
        else:
            merged[key] = value
    return merged


def build_registry(overrides: Mapping | None = None) -> RulesetRegistry:
    """Compile the built-in rulesets with optional config overrides on top.

    Args:
        overrides: The ``architecture`` section of specguard.yaml. Its
            ``rulesets`` entries patch or add ecosystems, its ``priority``
            entries replace the ecosystem order for an extension.
    """
    overrides = overrides or {}
    for key in ("rulesets", "priority"):
        if not isinstance(overrides.get(key) or {}, Mapping):
            raise ConfigError(f"'{key}' must be a mapping")
    raw_rulesets = {name: dict(data) for name, data in _BUILTIN_RULESETS.items()}
    for ecosystem, patch in (overrides.get("rulesets") or {}).items():
        if not isinstance(patch, Mapping):
            raise ConfigError(f"Ruleset '{ecosystem}' must be a mapping")
        raw_rulesets[ecosystem] = _merge_ruleset(raw_rulesets.get(ecosystem, {}), patch)

    rulesets = {name: compile_ruleset(name, data) for name, data in raw_rulesets.items()}

    raw_priority = dict(_BUILTIN_PRIORITY)
    for extension, ecosystems in (overrides.get("priority") or {}).items():
        if isinstance(ecosystems, str):
            ecosystems = [ecosystems]
        elif ecosystems is not None and not isinstance(ecosystems, (list, tuple)):
            raise ConfigError(
                f"Priority for '{extension}' must be a list of ecosystems, got {ecosystems!r}"
            )
        raw_priority[str(extension).lower()] = list(ecosystems or [])

    priority: dict[str, tuple[str, ...]] = {}
    for extension, ecosystems in raw_priority.items():
        if not extension.startswith("."):
            raise ConfigError(f"Priority key must be a file extension like '.ts', got {extension!r}")
        unknown = [eco for eco in ecosystems if not isinstance(eco, str) or eco not in rulesets]
        if unknown:
            raise ConfigError(f"Priority for '{extension}' names unknown ecosystems: {', '.join(map(str, unknown))}")
        if ecosystems:
            priority[extension] = tuple(ecosystems)

    return RulesetRegistry(
        rulesets=MappingProxyType(rulesets),
        priority=MappingProxyType(priority),
    )


DEFAULT_REGISTRY = build_registry()
