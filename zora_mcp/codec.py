"""
Response codec: turns handler results into the text payload sent to callers.

JSON numbers are IEEE-754 doubles for most consumers, so integers outside the
safe range (wei amounts, block numbers on some chains, 256-bit values) are
rendered as decimal strings. Byte strings (transaction hashes, calldata) are
rendered as 0x-prefixed hex.
"""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Mapping
from decimal import Decimal
from enum import Enum
from typing import Any

MAX_SAFE_INTEGER = 2**53 - 1


def to_jsonable(value: Any) -> Any:
    """Deep-convert ``value`` into plain JSON-compatible Python objects."""
    if isinstance(value, Enum):
        return to_jsonable(value.value)
    if value is None or isinstance(value, (bool, str, float)):
        return value
    if isinstance(value, int):
        if -MAX_SAFE_INTEGER <= value <= MAX_SAFE_INTEGER:
            return value
        return str(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "0x" + bytes(value).hex()
    if isinstance(value, Mapping):
        return {str(key): to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(item) for item in value]
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            field.name: to_jsonable(getattr(value, field.name))
            for field in dataclasses.fields(value)
        }
    return str(value)


def render(value: Any) -> str:
    """Serialize a handler result to indented JSON text."""
    return json.dumps(to_jsonable(value), indent=2, ensure_ascii=False)
