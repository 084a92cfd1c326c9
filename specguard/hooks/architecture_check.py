"""PreToolUse hook: architecture layer check on Write/Edit of source files.

Warn-only (always exit 0). The payload is passed through unchanged on
stdout; when the edited file imports across a disallowed layer boundary an
advisory is written to stderr. Malformed input or any internal error also
passes through.
Run as: python3 -m specguard.hooks.architecture_check
"""

import logging
import sys

from ..architecture import check_architecture, file_extension, format_violation_message
from ..config import Settings
from ..logger import log_hook_event, redact_payload
from ..payload import read_payload
from ._io import HookResult, emit, passthrough, read_stdin, settings_or_defaults

HOOK = "architecture_check"


def process(raw: str, settings: Settings) -> HookResult:
    """Check one payload. Never returns a non-zero exit code."""
    payload = read_payload(raw)
    if payload is None or not payload.usable:
        return passthrough(raw)

    if not settings.architecture_enabled:
        return passthrough(raw)

    if file_extension(payload.file_path) not in settings.registry.extensions:
        return passthrough(raw)

    violations = check_architecture(payload.file_path, payload.content, settings.registry)
    log_hook_event(HOOK, "checked", {
        "payload": redact_payload(payload.data),
        "violations": len(violations),
    })
    if not violations:
        return passthrough(raw)

    return HookResult(0, raw, format_violation_message(payload.file_path, violations))


def main() -> None:
    """CLI entry point -- reads JSON from stdin, always exits 0."""
    raw = ""
    try:
        raw = read_stdin()
        result = process(raw, settings_or_defaults(HOOK))
    except Exception:  # noqa: BLE001
        log_hook_event(HOOK, "unexpected_error", level=logging.ERROR, exc_info=True)
        result = passthrough(raw)

    emit(result)
    sys.exit(0)


if __name__ == "__main__":
    main()
