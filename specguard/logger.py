"""Structured JSON logging for the specguard hooks.

stderr is the hooks' diagnostic channel (the architecture advisory and the
phase-gate denial go there), so logging stays silent unless asked for.

Configuration via environment variables:
  SPECGUARD_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR. Setting it attaches a
      stderr handler at that level.
  SPECGUARD_LOG_FILE: optional path to write logs to a file instead of /
      in addition to stderr (defaults to DEBUG when no level is set).
"""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import PureWindowsPath

ROOT_LOGGER = "specguard"

# Keys whose values carry document or source text.
_REDACT_CONTENT_KEYS = frozenset({
    "content", "new_content", "new_string", "old_string", "text",
})

# Keys that contain filesystem paths, reduced to the basename.
_PATH_KEYS = frozenset({"file_path", "path", "config"})


def redact_value(key: str, value: object) -> object:
    """Redact a single key-value pair for safe logging.

    - Content keys: replaced with a length indicator like "<512 chars>"
    - Path keys: replaced with the basename
    - Everything else: passed through unchanged
    """
    if key in _REDACT_CONTENT_KEYS:
        if isinstance(value, str):
            return f"<{len(value)} chars>"
        return "<redacted>"

    if key in _PATH_KEYS and isinstance(value, str) and value:
        name = PureWindowsPath(value).name
        return name if name else value

    return value


def redact_payload(data: dict | None) -> dict:
    """Redact a hook payload (including tool_input) for logging."""
    if not data:
        return {}
    redacted = {}
    for key, value in data.items():
        if isinstance(value, dict):
            redacted[key] = redact_payload(value)
        else:
            redacted[key] = redact_value(key, value)
    return redacted


class _JSONFormatter(logging.Formatter):
    """Formats log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "hook": getattr(record, "hook", None),
            "logger": record.name,
            "event": record.getMessage(),
        }
        data = getattr(record, "data", None)
        if data is not None:
            entry["data"] = data
        if record.exc_info:
            entry["error"] = self.formatException(record.exc_info).splitlines()[-1]
        return json.dumps(entry, default=str, ensure_ascii=False)


_CONFIGURED = False


def configure_logging() -> None:
    """Configure the specguard root logger from the environment (idempotent)."""
    global _CONFIGURED  # noqa: PLW0603
    if _CONFIGURED:
        return
    _CONFIGURED = True

    root = logging.getLogger(ROOT_LOGGER)
    root.propagate = False

    level_name = os.environ.get("SPECGUARD_LOG_LEVEL", "").upper()
    log_file = os.environ.get("SPECGUARD_LOG_FILE")

    if not level_name and not log_file:
        root.addHandler(logging.NullHandler())
        return

    level = getattr(logging, level_name or "DEBUG", logging.DEBUG)
    root.setLevel(level)

    if level_name:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(_JSONFormatter())
        root.addHandler(stderr_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
        except OSError as e:
            # a bad log path never changes a hook decision
            sys.stderr.write(f"specguard: cannot open log file {log_file}: {e}\n")
        else:
            file_handler.setFormatter(_JSONFormatter())
            root.addHandler(file_handler)

    if not root.handlers:
        root.addHandler(logging.NullHandler())


def get_logger(hook_name: str) -> logging.Logger:
    """Get a named logger under the specguard hierarchy.

    Args:
        hook_name: Hook name (e.g. "architecture_check").
    """
    configure_logging()
    return logging.getLogger(f"{ROOT_LOGGER}.hooks.{hook_name}")


def log_hook_event(
    hook_name: str,
    event: str,
    data: dict | None = None,
    level: int = logging.INFO,
    exc_info: bool = False,
) -> None:
    """Emit a structured log entry for a hook invocation."""
    get_logger(hook_name).log(
        level, event, exc_info=exc_info, extra={"hook": hook_name, "data": data}
    )
