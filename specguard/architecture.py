"""Architecture layer check for a single edited source file.

Classifies the file into a layer from its path, pulls the import tokens out
of its content and flags every import whose layer the ruleset does not allow.

Import extraction is lexical and best-effort: it does not understand
comments, string literals or conditional imports, so it can both over- and
under-count. The check is advisory only and never blocks an edit.
"""

import logging
from pathlib import PurePosixPath

from .guard_types import UNRECOGNIZED, Classification, Violation
from .rulesets import DEFAULT_REGISTRY, LayerRuleset, RulesetRegistry

logger = logging.getLogger(__name__)

REMEDIATION = (
    "Remove the offending dependency, move the file to the right layer, "
    "or go through the allowed layer instead."
)


def _normalize_path(file_path: str) -> str:
    """Lowercase, forward slashes, leading slash so the first dir is a segment."""
    normalized = file_path.replace("\\", "/").lower()
    if not normalized.startswith("/"):
        normalized = "/" + normalized
    return normalized


def file_extension(file_path: str) -> str:
    return PurePosixPath(file_path.replace("\\", "/")).suffix.lower()


def classify_path(file_path: str, registry: RulesetRegistry = DEFAULT_REGISTRY) -> Classification:
    """Return the (ecosystem, layer) a file path belongs to.

    Ecosystems are tried in the registry's priority order for the file's
    extension and each ecosystem's path rules in declared order; the first
    fragment found in the path wins. Paths matching nothing (tests, scripts,
    config) are UNRECOGNIZED and never produce violations.
    """
    extension = file_extension(file_path)
    path_lower = _normalize_path(file_path)
    for ecosystem in registry.ecosystems_for(extension):
        ruleset = registry.get(ecosystem)
        if ruleset is None:
            continue
        for rule in ruleset.path_rules:
            if rule.matches(path_lower, extension):
                return Classification(ecosystem, rule.layer)
    return UNRECOGNIZED


def extract_imports(content: str, ruleset: LayerRuleset) -> list[str]:
    """Import tokens in order of appearance, duplicates kept."""
    return [match.group(1) for match in ruleset.import_pattern.finditer(content)]


def infer_import_layer(import_token: str, ruleset: LayerRuleset) -> str | None:
    """Guess the layer of an import token from its fragments, or None."""
    token_lower = import_token.lower()
    for fragment, layer in ruleset.import_rules:
        if fragment in token_lower:
            return layer
    return None


def detect_violations(
    layer: str,
    imports: list[str],
    ruleset: LayerRuleset,
) -> list[Violation]:
    """Flag imports whose layer is neither the file's own nor allowed."""
    violations: list[Violation] = []
    for token in imports:
        dependency_layer = infer_import_layer(token, ruleset)
        if dependency_layer is None or dependency_layer == layer:
            continue
        if not ruleset.allows(layer, dependency_layer):
            violations.append(Violation(layer, token, dependency_layer, ruleset.rule))
    return violations


def check_architecture(
    file_path: str,
    content: str,
    registry: RulesetRegistry = DEFAULT_REGISTRY,
) -> list[Violation]:
    """Run the full layer check on one file's content."""
    classification = classify_path(file_path, registry)
    if not classification.recognized:
        logger.debug("No layer for %s, skipping", PurePosixPath(file_path).name)
        return []

    ruleset = registry.get(classification.ecosystem)
    if ruleset is None:
        return []

    imports = extract_imports(content, ruleset)
    violations = detect_violations(classification.layer, imports, ruleset)
    logger.debug(
        "%s layer %s/%s: %d import(s), %d violation(s)",
        PurePosixPath(file_path).name,
        classification.ecosystem,
        classification.layer,
        len(imports),
        len(violations),
    )
    return violations


def format_violation_message(file_path: str, violations: list[Violation]) -> str:
    """Render the advisory written to stderr. Empty when nothing was found."""
    if not violations:
        return ""

    lines = [
        "⚠️ Architecture layer warning: disallowed dependency detected",
        "",
        f"File: {file_path}",
        f"Layer: {violations[0].layer}",
        "",
        "Violating imports:",
    ]
    for v in violations:
        lines.append(f"  - {v.dependency} ({v.dependency_layer})")
    lines.append("")
    lines.append(f"Architecture rule: {violations[0].rule}")
    lines.append(f"Suggestion: {REMEDIATION}")
    return "\n".join(lines) + "\n"
