"""
Field alias lookup utility.

Ordered alias lists per canonical field and helpers to read loosely-typed
upstream mappings.
"""

import math
import re
from typing import Any, Iterable, Mapping, Optional

# Canonical field -> ordered upstream names. Dotted names reach into
# nested objects (e.g. "listing.name").
FIELD_ALIASES = {
    "id": ("id", "reviewId", "_id", "uuid"),
    "submittedAt": (
        "submittedAt", "submittedAtIso", "createdAt", "date", "created",
        "updatedAt", "publishTime",
    ),
    "submittedAtIso": (
        "submittedAtIso", "createdAt", "date", "created", "updatedAt", "publishTime",
    ),
    "rating": ("rating", "overallRating", "score"),
    "reviewCategory": ("reviewCategory", "categories"),
    "listingName": ("listingName", "propertyName", "listing.name", "property.name"),
    "guestName": (
        "guestName", "reviewerName", "guest.name", "authorName",
        "authorAttribution.displayName",
    ),
    "publicReview": ("publicReview", "review", "comment", "text", "text.text"),
    "channel": ("channel", "source", "platform"),
    "type": ("type", "direction"),
    "status": ("status",),
    "approved": ("approved", "isApproved"),
    "sourceUrl": ("sourceUrl", "googleMapsUri"),
}

_WHITESPACE = re.compile(r"\s+")


def lookup(record: Mapping[str, Any], name: str) -> Any:
    """Read a possibly dotted field name from a nested mapping."""
    current: Any = record
    for part in name.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return None
        current = current[part]
    return current


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def first_present(record: Mapping[str, Any], aliases: Iterable[str]) -> Any:
    """
    Return the first non-empty value among aliases.

    Args:
        record: Raw upstream mapping
        aliases: Ordered field names to try

    Returns:
        The matching value, or None when every alias is absent or empty
    """
    for name in aliases:
        value = lookup(record, name)
        if not is_empty(value):
            return value
    return None


def lookup_field(record: Mapping[str, Any], canonical: str) -> Any:
    return first_present(record, FIELD_ALIASES[canonical])


def lookup_text(record: Mapping[str, Any], canonical: str) -> Optional[str]:
    """Look up a field and keep the first alias holding a scalar text value."""
    for name in FIELD_ALIASES[canonical]:
        value = lookup(record, name)
        if isinstance(value, (str, int, float)) and not isinstance(value, bool):
            text = str(value).strip()
            if text:
                return text
    return None


def collapse_whitespace(value: str) -> str:
    """Trim and collapse internal whitespace runs to one space."""
    return _WHITESPACE.sub(" ", value).strip()


def to_number(value: Any) -> Optional[float]:
    """Coerce ints, floats and numeric strings; everything else is None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def to_bool(value: Any) -> Optional[bool]:
    """Coerce common boolean spellings; unknown values are None."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes"):
            return True
        if lowered in ("false", "0", "no"):
            return False
    return None
