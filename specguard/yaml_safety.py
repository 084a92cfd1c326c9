"""Safe YAML loader with alias expansion limit (billion laughs protection).

specguard.yaml is read on every hook invocation, so a small file that
expands into gigabytes through nested aliases would stall the editor.
"""

from __future__ import annotations

import yaml

MAX_ALIASES = 100


class AliasLimitedLoader(yaml.SafeLoader):
    """SafeLoader that counts alias references while composing."""

    max_aliases = MAX_ALIASES

    def __init__(self, stream):
        super().__init__(stream)
        self._aliases_seen = 0

    def compose_node(self, parent, index):
        if self.check_event(yaml.AliasEvent):
            self._aliases_seen += 1
            if self._aliases_seen > self.max_aliases:
                raise yaml.YAMLError(f"YAML alias limit exceeded (max {self.max_aliases})")
        return super().compose_node(parent, index)


def safe_yaml_load(stream, max_aliases: int = MAX_ALIASES):
    """yaml.safe_load replacement that refuses more than ``max_aliases`` aliases."""
    loader = AliasLimitedLoader
    if max_aliases != MAX_ALIASES:
        loader = type("AliasLimitedLoader", (AliasLimitedLoader,), {"max_aliases": max_aliases})
    return yaml.load(stream, Loader=loader)  # nosec B506 - SafeLoader subclass
