"""
specguard - layer and review guardrails for AI-assisted editing.

Two editor hooks: an advisory architecture-layer check for Java, Swift,
Vue and TypeScript sources, and a blocking review gate for phased
specification documents.
"""

__version__ = "1.0.0"

from .architecture import (
    check_architecture,
    classify_path,
    detect_violations,
    extract_imports,
    format_violation_message,
    infer_import_layer,
)
from .guard_types import Classification, GateDecision, PhaseSection, ReviewStatus, Violation
from .phases import (
    check_phase_review,
    detect_current_phase,
    extract_phases,
    parse_review_statuses,
)
from .rulesets import DEFAULT_REGISTRY, build_registry

__all__ = [
    "check_architecture",
    "classify_path",
    "detect_violations",
    "extract_imports",
    "format_violation_message",
    "infer_import_layer",
    "check_phase_review",
    "detect_current_phase",
    "extract_phases",
    "parse_review_statuses",
    "build_registry",
    "DEFAULT_REGISTRY",
    "Classification",
    "GateDecision",
    "PhaseSection",
    "ReviewStatus",
    "Violation",
    "__version__",
]
