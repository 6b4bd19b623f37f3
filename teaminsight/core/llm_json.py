"""LLM JSON helpers - tolerant decoding and per-field coercion of oracle output.

Invariants:
    - Nothing here raises on bad input; every helper returns a value or a default
    - parse_json_object returns a dict or None, never a list or scalar
    - Numeric coercion rejects bool (JSON true is not a score)

Design Decisions:
    - Fence stripping before json.loads: models wrap JSON in ```json blocks
      despite instructions
    - Brace-slice retry: recovers objects surrounded by a sentence of prose
"""

import json
import math
import re
from enum import Enum
from typing import TypeVar

E = TypeVar("E", bound=Enum)

_FENCE_OPEN = re.compile(r"^```[a-zA-Z]*\n?")
_FENCE_CLOSE = re.compile(r"```\s*$")


def strip_code_fences(raw: str) -> str:
    """Remove a leading ```lang fence and trailing ``` if present."""
    text = (raw or "").strip()
    if text.startswith("```"):
        text = _FENCE_OPEN.sub("", text)
        text = _FENCE_CLOSE.sub("", text)
    return text.strip()


def parse_json_object(raw: str) -> dict | None:
    """Decode oracle output into a dict, or None when it is not a JSON object."""
    text = strip_code_fences(raw)
    if not text:
        return None
    try:
        obj = json.loads(text)
    except ValueError:
        start, end = text.find("{"), text.rfind("}")
        if start == -1 or end <= start:
            return None
        try:
            obj = json.loads(text[start:end + 1])
        except ValueError:
            return None
    return obj if isinstance(obj, dict) else None


def as_number(value: object) -> float | None:
    """Finite int/float (or numeric string) as float, else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        num = float(value)
    elif isinstance(value, str):
        try:
            num = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return num if math.isfinite(num) else None


def clamp_number(
    value: object, low: float, high: float, default: float,
) -> float:
    """Clamp a numeric value into [low, high]; non-numeric yields default."""
    num = as_number(value)
    if num is None:
        return default
    return max(low, min(high, num))


def as_int(value: object) -> int | None:
    """Integral JSON number as int, else None (3.0 counts, 3.5 does not)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return int(value)
    return None


def as_text(value: object, default: str, strip: bool = True) -> str:
    if not isinstance(value, str):
        return default
    return value.strip() if strip else value


def as_enum(value: object, enum_type: type[E], default: E) -> E:
    """Member of enum_type matching value, else default."""
    if isinstance(value, str):
        try:
            return enum_type(value)
        except ValueError:
            return default
    return default


def as_string_list(value: object, limit: int | None = None) -> list[str] | None:
    """Non-empty strings from a JSON array (stripped); None if not an array."""
    if not isinstance(value, list):
        return None
    items = [v.strip() for v in value if isinstance(v, str) and v.strip()]
    return items[:limit] if limit is not None else items


def as_enum_list(value: object, enum_type: type[E]) -> list[E]:
    """Members of enum_type found in a JSON array; unknown values dropped."""
    if not isinstance(value, list):
        return []
    allowed = {m.value: m for m in enum_type}
    result: list[E] = []
    for v in value:
        if isinstance(v, str) and v in allowed and allowed[v] not in result:
            result.append(allowed[v])
    return result
