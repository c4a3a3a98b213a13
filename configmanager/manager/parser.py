"""
Entry Parser

Turns a raw remote setting into a ParsedEntry. Values that are valid JSON
are decoded; anything else is kept as the raw string. Never raises.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

from configmanager.client.models import ConfigurationSetting


class ValueKind(str, Enum):
    """How a parsed value was obtained"""
    STRUCTURED = "structured"
    RAW = "raw"
    ABSENT = "absent"


@dataclass(frozen=True)
class ParsedEntry:
    """One key and its parsed value"""
    key: str
    value: Any = None
    kind: ValueKind = ValueKind.ABSENT

    @property
    def is_structured(self) -> bool:
        return self.kind is ValueKind.STRUCTURED

    def to_dict(self) -> dict[str, Any]:
        return {"key": self.key, "value": self.value}


def parse_setting(key: str, value: str | None) -> ParsedEntry:
    # Empty string counts as absent and is kept as-is
    if not value:
        return ParsedEntry(key=key, value=value, kind=ValueKind.ABSENT)

    try:
        decoded = json.loads(value)
    except (TypeError, ValueError):
        return ParsedEntry(key=key, value=value, kind=ValueKind.RAW)

    return ParsedEntry(key=key, value=decoded, kind=ValueKind.STRUCTURED)


def parse_configuration_setting(setting: ConfigurationSetting) -> ParsedEntry:
    return parse_setting(setting.key, setting.value)
