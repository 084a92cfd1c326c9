"""Phase review gate for phased specification documents.

A document is split into sections by ``Phase N`` headings. Review state is
recorded inline with markers such as::

    <!-- REVIEW STATUS: APPROVED - 2026-01-05T10:00:00+00:00 - alice -->

Each marker belongs to the closest ``Phase`` heading above it. Editing
phase N is only allowed once phases 1..N-1 are all APPROVED.
"""

import logging
import re
from bisect import bisect_right
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from pathlib import PurePosixPath

from .guard_types import (
    REQUIRED_STATUS,
    REVIEW_STATUSES,
    UNMARKED,
    ConfigError,
    GateDecision,
    PhaseSection,
    ReviewStatus,
)

logger = logging.getLogger(__name__)

PHASE_HEADING_REGEX = re.compile(
    r"^#+[ \t]*(Phase[ \t]+(\d+)\b[^\n]*)$",
    re.IGNORECASE | re.MULTILINE,
)

REVIEW_MARKER_REGEX = re.compile(
    r"<!--\s*REVIEW\s+STATUS\s*:\s*"
    rf"({'|'.join(REVIEW_STATUSES)})\b[ \t]*"
    r"(?:-[ \t]*([^\n]*?)[ \t]*)?"
    r"-->",
    re.IGNORECASE,
)

DEFAULT_DOCUMENT_PATTERNS = (
    r"(^|\.)spec\.md$",
    r"(^|\.)prd\.md$",
)


def compile_document_patterns(patterns: Iterable[str]) -> tuple[re.Pattern, ...]:
    """Compile basename patterns (case-insensitive) for spec documents."""
    compiled = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern, re.IGNORECASE))
        except (re.error, TypeError) as e:
            raise ConfigError(f"Invalid document pattern {pattern!r}: {e}") from e
    return tuple(compiled)


DOCUMENT_REGEXES = compile_document_patterns(DEFAULT_DOCUMENT_PATTERNS)


def is_spec_document(file_path: str, patterns: Sequence[re.Pattern] = DOCUMENT_REGEXES) -> bool:
    basename = PurePosixPath(file_path.replace("\\", "/")).name
    return any(p.search(basename) for p in patterns)


def _line_of(content: str, offset: int) -> int:
    return content.count("\n", 0, offset) + 1


def extract_phases(content: str) -> list[PhaseSection]:
    """All Phase headings in document order. Empty when there are none."""
    phases = []
    for match in PHASE_HEADING_REGEX.finditer(content):
        phases.append(PhaseSection(
            number=int(match.group(2)),
            line=_line_of(content, match.start()),
            offset=match.start(),
            title=match.group(1).strip(),
        ))
    return phases


def parse_review_statuses(
    content: str,
    phases: list[PhaseSection] | None = None,
) -> dict[int, ReviewStatus]:
    """Map phase number to the last review marker found inside that phase.

    Markers above the first Phase heading belong to no phase and are
    ignored. A later marker for the same phase replaces an earlier one.
    """
    if phases is None:
        phases = extract_phases(content)
    offsets = [phase.offset for phase in phases]

    statuses: dict[int, ReviewStatus] = {}
    for match in REVIEW_MARKER_REGEX.finditer(content):
        idx = bisect_right(offsets, match.start()) - 1
        if idx < 0:
            continue
        statuses[phases[idx].number] = ReviewStatus(
            status=match.group(1).upper(),
            context=(match.group(2) or "").strip(),
            line=_line_of(content, match.start()),
        )
    return statuses


def detect_current_phase(
    phases: list[PhaseSection],
    edit_line: int | None = None,
) -> PhaseSection | None:
    """Phase being edited.

    Without a hint this is the highest-numbered phase in the document. With
    a 1-based line hint it is the phase whose heading is the last one at or
    before that line.
    """
    if not phases:
        return None
    if edit_line is None:
        return max(phases, key=lambda phase: phase.number)
    idx = bisect_right([phase.line for phase in phases], edit_line) - 1
    return phases[idx] if idx >= 0 else None


def format_denial(phase: int, status: str, now: datetime | None = None) -> str:
    timestamp = (now or datetime.now(timezone.utc)).isoformat(timespec="seconds")
    return (
        f"⚠️ Phase review gate: finish the review of Phase {phase} first\n"
        f"\n"
        f"Current Phase {phase} status: {status}\n"
        f"Required status: {REQUIRED_STATUS}\n"
        f"\n"
        f"Add the approval marker to the document:\n"
        f"<!-- REVIEW STATUS: {REQUIRED_STATUS} - {timestamp} - {{reviewer}} -->\n"
        f"Review comments: {{review_comments}}\n"
    )


def check_phase_review(
    file_path: str,
    content: str,
    edit_line: int | None = None,
    document_patterns: Sequence[re.Pattern] = DOCUMENT_REGEXES,
    now: datetime | None = None,
) -> GateDecision:
    """Decide whether an edit to a spec document may go ahead."""
    if not is_spec_document(file_path, document_patterns):
        return GateDecision(allowed=True)

    phases = extract_phases(content)
    current = detect_current_phase(phases, edit_line)
    if current is None or current.number <= 1:
        return GateDecision(allowed=True, phase=current.number if current else None)

    statuses = parse_review_statuses(content, phases)
    for number in range(1, current.number):
        review = statuses.get(number)
        if review is None or review.status != REQUIRED_STATUS:
            status = review.status if review else UNMARKED
            logger.debug(
                "Blocking edit of phase %d: phase %d is %s", current.number, number, status
            )
            return GateDecision(
                allowed=False,
                phase=number,
                status=status,
                message=format_denial(number, status, now),
            )

    return GateDecision(allowed=True, phase=current.number)
