"""Type definitions and constants shared by the specguard checks."""

from typing import NamedTuple

# Colors for terminal output
RED = "\033[0;31m"
YELLOW = "\033[1;33m"
GREEN = "\033[0;32m"
BLUE = "\033[0;34m"
NC = "\033[0m"  # No Color

REVIEW_STATUSES = ("DRAFT", "REVIEWING", "APPROVED", "REJECTED")
REQUIRED_STATUS = "APPROVED"
UNMARKED = "unmarked"


class SpecguardError(Exception):
    """Base class for specguard errors."""


class ConfigError(SpecguardError):
    """Raised when specguard.yaml cannot be loaded or is invalid."""


class Classification(NamedTuple):
    """Ecosystem and layer a file path belongs to.

    Both fields are None when the path is outside every known layer.
    """

    ecosystem: str | None
    layer: str | None

    @property
    def recognized(self) -> bool:
        return self.ecosystem is not None and self.layer is not None


UNRECOGNIZED = Classification(None, None)


class Violation(NamedTuple):
    """An import that crosses a layer boundary the ruleset does not allow."""

    layer: str
    dependency: str
    dependency_layer: str
    rule: str


class PhaseSection(NamedTuple):
    """A `Phase N` heading in a specification document."""

    number: int
    line: int  # 1-based
    offset: int  # character offset of the heading line
    title: str


class ReviewStatus(NamedTuple):
    """Most recent review marker seen for a phase."""

    status: str  # one of REVIEW_STATUSES
    context: str
    line: int


class GateDecision(NamedTuple):
    """Outcome of the phase review gate."""

    allowed: bool
    phase: int | None = None
    status: str | None = None
    message: str = ""
