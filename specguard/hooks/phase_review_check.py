"""PreToolUse hook: phase review gate for *.spec.md / PRD.md documents.

Blocks (exit 1) an edit to phase N while any of phases 1..N-1 lacks an
APPROVED review marker; the denial goes to stderr. Every other outcome,
including malformed input and internal errors, passes the payload through
unchanged and exits 0.
Run as: python3 -m specguard.hooks.phase_review_check
"""

import logging
import sys

from ..config import Settings
from ..logger import log_hook_event
from ..payload import read_payload
from ..phases import check_phase_review, is_spec_document
from ._io import HookResult, emit, passthrough, read_stdin, settings_or_defaults

HOOK = "phase_review_check"


def process(raw: str, settings: Settings) -> HookResult:
    """Gate one payload. Exit code 1 only for a genuine out-of-order edit."""
    payload = read_payload(raw)
    if payload is None or not payload.usable:
        return passthrough(raw)

    if not settings.phase_review_enabled:
        return passthrough(raw)

    if not is_spec_document(payload.file_path, settings.document_patterns):
        return passthrough(raw)

    decision = check_phase_review(
        payload.file_path,
        payload.content,
        edit_line=payload.edit_line,
        document_patterns=settings.document_patterns,
    )
    log_hook_event(HOOK, "decision", {
        "allowed": decision.allowed,
        "phase": decision.phase,
        "status": decision.status,
    })
    if decision.allowed:
        return passthrough(raw)

    return HookResult(1, "", decision.message)


def main() -> None:
    """CLI entry point -- reads JSON from stdin, exits 1 to block."""
    raw = ""
    try:
        raw = read_stdin()
        result = process(raw, settings_or_defaults(HOOK))
    except Exception:  # noqa: BLE001
        log_hook_event(HOOK, "unexpected_error", level=logging.ERROR, exc_info=True)
        result = passthrough(raw)

    emit(result)
    sys.exit(result.exit_code)


if __name__ == "__main__":
    main()
