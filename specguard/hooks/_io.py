"""stdin/stdout plumbing shared by the hook entry points."""

import logging
import sys
from typing import NamedTuple

from ..config import Settings, default_settings, load_settings
from ..guard_types import ConfigError
from ..logger import log_hook_event


class HookResult(NamedTuple):
    """What a hook writes and how it exits."""

    exit_code: int
    stdout: str
    stderr: str = ""


def passthrough(raw: str) -> HookResult:
    """Let the operation proceed with the payload untouched."""
    return HookResult(0, raw)


def read_stdin() -> str:
    return sys.stdin.read()


def settings_or_defaults(hook_name: str) -> Settings:
    """Load specguard.yaml; a broken config falls back to the defaults."""
    try:
        return load_settings()
    except (ConfigError, OSError) as e:
        log_hook_event(hook_name, "config_error", {"error": str(e)}, logging.WARNING)
        return default_settings()


def emit(result: HookResult) -> None:
    if result.stdout:
        sys.stdout.write(result.stdout)
        sys.stdout.flush()
    if result.stderr:
        sys.stderr.write(result.stderr)
        sys.stderr.flush()
