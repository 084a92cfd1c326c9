"""Hook payload parsing.

Hooks receive one JSON document on stdin. Field names vary between hosts, so
both the nested ``tool_input`` form and flat top-level fields are accepted;
the nested form wins when both are present.
"""

import json
from typing import NamedTuple


def _first_text(*candidates) -> str:
    for value in candidates:
        if isinstance(value, str) and value:
            return value
    return ""


class HookPayload(NamedTuple):
    """Parsed stdin payload plus the raw text it came from."""

    data: dict
    raw: str

    @property
    def tool_input(self) -> dict:
        tool_input = self.data.get("tool_input")
        return tool_input if isinstance(tool_input, dict) else {}

    @property
    def tool_name(self) -> str:
        return _first_text(self.data.get("tool_name"))

    @property
    def file_path(self) -> str:
        return _first_text(self.tool_input.get("file_path"), self.data.get("file_path"))

    @property
    def content(self) -> str:
        # Write payloads carry "content", newer hosts send "new_content"
        return _first_text(
            self.tool_input.get("new_content"),
            self.tool_input.get("content"),
            self.data.get("content"),
        )

    @property
    def edit_line(self) -> int | None:
        """1-based line the edit starts at, when the host supplies it."""
        for value in (self.tool_input.get("edit_line"), self.data.get("edit_line")):
            if isinstance(value, bool):
                continue
            if isinstance(value, int) and value > 0:
                return value
            if isinstance(value, str) and value.isdigit() and int(value) > 0:
                return int(value)
        return None

    @property
    def usable(self) -> bool:
        return bool(self.file_path and self.content)


def read_payload(raw: str) -> HookPayload | None:
    """Parse stdin text. None for blank, malformed or non-object input."""
    if not raw or not raw.strip():
        return None
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, ValueError):
        return None
    if not isinstance(data, dict):
        return None
    return HookPayload(data, raw)
