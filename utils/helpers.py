"""Helper utilities shared by services and routes."""

import hashlib
import math
from typing import Any, Dict, List, Optional

from flask import request

from services.errors import ValidationError

# Card colors used by the dashboards
THEME_COLORS = ["blue", "green", "yellow", "red", "purple", "teal"]


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3, unlike round())."""
    return int(math.floor(value + 0.5))


def percentage(part: float, whole: float) -> int:
    """Whole-number percentage of part/whole, 0 when whole is 0."""
    if not whole:
        return 0
    return round_half_up(100.0 * part / whole)


def theme_color(entity_id: str) -> str:
    """Pick a stable card color for an entity id."""
    digest = hashlib.md5((entity_id or "").encode("utf-8")).hexdigest()
    return THEME_COLORS[int(digest, 16) % len(THEME_COLORS)]


def parse_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    """Parse ints from JSON or form values; bools and junk give ``default``."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        s = value.strip()
        if s.lstrip("-").isdigit():
            return int(s)
    return default


def as_text(value: Any, label: str) -> str:
    """Stripped string from a JSON payload; None reads as empty, other types are rejected."""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{label} must be text.")
    return value.strip()


def as_id_list(value: Any, label: str) -> List[str]:
    """List of non-empty string ids from a JSON payload, duplicates removed."""
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) and v for v in value):
        raise ValidationError(f"{label} must be a list of ids.")
    return list(dict.fromkeys(value))


def json_body() -> Dict[str, Any]:
    """The request's JSON object; a missing body reads as empty."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object.")
    return data
