"""
Field Normalizer.

Maps validated candidate records onto the canonical Review shape:
alias probing, timestamp derivation, rating scale normalization and
defaults, all applied in one place.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple

from flex_reviews.models.candidate import CandidateRecord
from flex_reviews.models.review import SENTINEL_DISPLAY, SENTINEL_ISO, Review
from flex_reviews.pipeline.validation import FIELD_DEFAULTS
from flex_reviews.utils.fields import (
    clamp,
    collapse_whitespace,
    lookup,
    lookup_text,
    round_half_up,
)

logger = logging.getLogger(__name__)

# fromisoformat accepts at most microseconds; upstream APIs send nanoseconds
_FRACTION = re.compile(r"\.(\d+)")


def parse_instant(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a provider timestamp into an aware UTC datetime.

    Accepts ISO-8601 instants (with or without offset) and the
    "YYYY-MM-DD HH:mm:ss" form, which is read as UTC.

    Returns:
        datetime in UTC, or None when the text cannot be parsed
    """
    if not value or not isinstance(value, str):
        return None

    text = value.strip()
    if " " in text and "T" not in text:
        text = text.replace(" ", "T", 1)
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)

    try:
        moment = datetime.fromisoformat(text)
        if moment.tzinfo is None:
            return moment.replace(tzinfo=timezone.utc)
        # Offsets at the calendar edges overflow the supported year range
        return moment.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None


def format_display(moment: datetime) -> str:
    """Render "YYYY-MM-DD HH:mm:ss" with a four-digit year on every platform."""
    return (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d} "
        f"{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    )


def format_iso(moment: datetime) -> str:
    """Render the canonical ISO form: seconds precision, milliseconds if any."""
    base = format_display(moment).replace(" ", "T")
    millis = moment.microsecond // 1000
    if millis:
        return f"{base}.{millis:03d}Z"
    return f"{base}Z"


def derive_timestamp(submitted_at: str, iso_hint: Optional[str] = None) -> Tuple[str, str]:
    """
    Derive the (display, ISO) timestamp pair of a review.

    Prefers a parseable explicit ISO field, else parses the provider
    string. Unparseable input yields the sentinel epoch instant.

    Args:
        submitted_at: Raw provider timestamp (e.g. "2024-03-05 10:15:00")
        iso_hint: Explicit ISO timestamp, when the provider sent one

    Returns:
        Tuple of (display string, canonical ISO string), always agreeing
    """
    raw_instant = parse_instant(submitted_at)
    instant = parse_instant(iso_hint) or raw_instant
    if instant is None:
        return SENTINEL_DISPLAY, SENTINEL_ISO

    # Sub-millisecond precision is not carried by the canonical form
    instant = instant.replace(microsecond=instant.microsecond // 1000 * 1000)
    iso = format_iso(instant)

    if raw_instant is not None and raw_instant.replace(
        microsecond=raw_instant.microsecond // 1000 * 1000
    ) == instant:
        return submitted_at, iso
    return format_display(instant), iso


def scale_rating(value: Optional[float], native_scale: int = 10) -> Optional[int]:
    """
    Convert a rating to the canonical 0-10 integer scale.

    A 0-5 source is doubled; results are rounded half-up and clamped.
    """
    if value is None:
        return None
    return round_half_up(clamp(value * 10.0 / native_scale, 0, 10))


class FieldNormalizer:
    """
    Produces canonical Reviews from CandidateRecords.

    One normalizer per provider: the channel default and native rating
    scale differ between sources.
    """

    def __init__(self, channel_default: str, rating_scale: int = 10):
        """
        Initialize normalizer.

        Args:
            channel_default: Channel used when the record names none
            rating_scale: Upper bound of the provider's overall rating scale
        """
        self.channel_default = channel_default
        self.rating_scale = rating_scale

    def normalize(self, candidate: CandidateRecord) -> Review:
        """
        Map one candidate onto the canonical Review shape.

        Args:
            candidate: Validated record from the Schema Validator

        Returns:
            Fully populated Review
        """
        fields = candidate.fields
        display, iso = derive_timestamp(
            candidate.submitted_at,
            lookup_text(fields, "submittedAtIso"),
        )

        approved = candidate.approved
        if approved is None:
            approved = FIELD_DEFAULTS["approved"]

        return Review(
            id=candidate.id,
            type=lookup_text(fields, "type") or FIELD_DEFAULTS["type"],
            status=lookup_text(fields, "status") or FIELD_DEFAULTS["status"],
            channel=self._channel(candidate),
            rating=scale_rating(candidate.rating, self.rating_scale),
            public_review=lookup_text(fields, "publicReview") or FIELD_DEFAULTS["publicReview"],
            review_category=tuple(candidate.review_category),
            submitted_at=display,
            submitted_at_iso=iso,
            guest_name=self._name(candidate, "guestName"),
            listing_name=self._name(candidate, "listingName"),
            approved=approved,
            source_url=lookup_text(fields, "sourceUrl"),
        )

    def normalize_batch(self, candidates: Iterable[CandidateRecord]) -> List[Review]:
        """Normalize a batch, dropping any record that still fails the model checks."""
        reviews = []
        for candidate in candidates:
            try:
                reviews.append(self.normalize(candidate))
            except ValueError as e:
                logger.debug(f"Dropped candidate {candidate.id}: {e}")
        return reviews

    def _channel(self, candidate: CandidateRecord) -> str:
        channel = lookup_text(candidate.fields, "channel")
        if channel:
            return channel
        channel_id = lookup(candidate.fields, "channelId")
        if channel_id not in (None, ""):
            return f"channel:{channel_id}"
        return self.channel_default

    def _name(self, candidate: CandidateRecord, canonical: str) -> str:
        value = lookup_text(candidate.fields, canonical)
        if value:
            value = collapse_whitespace(value)
        return value or FIELD_DEFAULTS[canonical]
