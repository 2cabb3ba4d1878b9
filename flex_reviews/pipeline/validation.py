"""
Schema Validator.

Validates and coerces raw upstream records into typed candidate records.
Malformed records are dropped from the batch instead of failing it.
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional

from flex_reviews.models.candidate import CandidateRecord
from flex_reviews.models.review import CategoryRating, ReviewId
from flex_reviews.utils.fields import (
    clamp,
    lookup,
    lookup_field,
    round_half_up,
    to_bool,
    to_number,
)

logger = logging.getLogger(__name__)

MIN_TIMESTAMP_LENGTH = 10

# Declared defaults for optional fields. The channel default is provider
# specific and supplied by the normalizer's owner.
FIELD_DEFAULTS = {
    "type": "guest-to-host",
    "status": "published",
    "approved": False,
    "rating": None,
    "reviewCategory": (),
    "publicReview": "",
    "guestName": "Guest",
    "listingName": "Unknown listing",
}


class SchemaValidator:
    """
    Turns raw records into CandidateRecords.

    Required fields:
    - id: present; integer-like when the source declares numeric ids
    - submittedAt: a string of at least 10 characters

    Optional values are coerced (rating clamped to the native scale,
    category entries validated); anything unusable becomes absent.
    """

    def __init__(self, numeric_ids: bool = True, rating_scale: int = 10):
        """
        Initialize validator.

        Args:
            numeric_ids: Reject records whose id is not integer-like
            rating_scale: Upper bound of the provider's overall rating scale
        """
        self.numeric_ids = numeric_ids
        self.rating_scale = rating_scale

    def validate(self, raw: Any) -> Optional[CandidateRecord]:
        """
        Validate one raw record.

        Args:
            raw: Untyped upstream record

        Returns:
            CandidateRecord, or None when the record is rejected
        """
        if not isinstance(raw, Mapping):
            logger.debug(f"Rejected non-object record: {type(raw).__name__}")
            return None

        review_id = self._coerce_id(lookup_field(raw, "id"))
        if review_id is None:
            logger.debug("Rejected record without a usable id")
            return None

        submitted_at = lookup_field(raw, "submittedAt")
        if not isinstance(submitted_at, str) or len(submitted_at.strip()) < MIN_TIMESTAMP_LENGTH:
            logger.debug(f"Rejected record {review_id}: bad submittedAt {submitted_at!r}")
            return None

        return CandidateRecord(
            id=review_id,
            submitted_at=submitted_at.strip(),
            rating=self._coerce_rating(lookup_field(raw, "rating")),
            review_category=self._validate_categories(lookup_field(raw, "reviewCategory")),
            approved=self._coerce_approved(raw),
            fields=dict(raw),
        )

    def validate_batch(self, raws: Iterable[Any]) -> List[CandidateRecord]:
        """
        Validate a batch; rejected records are silently dropped.

        Returns:
            List of candidates in source order (M <= N)
        """
        candidates = []
        total = 0
        for raw in raws:
            total += 1
            candidate = self.validate(raw)
            if candidate is not None:
                candidates.append(candidate)

        dropped = total - len(candidates)
        if dropped:
            logger.debug(f"Dropped {dropped} of {total} malformed records")
        return candidates

    def _coerce_id(self, value: Any) -> Optional[ReviewId]:
        if value is None or isinstance(value, bool):
            return None

        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return int(value) if value.is_integer() else None
        if isinstance(value, str):
            text = value.strip()
            if not text:
                return None
            if text.isascii() and text.isdecimal():
                return int(text)
            return None if self.numeric_ids else text
        return None

    def _coerce_rating(self, value: Any) -> Optional[float]:
        number = to_number(value)
        if number is None:
            return None
        return clamp(number, 0, self.rating_scale)

    def _validate_categories(self, value: Any) -> List[CategoryRating]:
        """
        Validate category ratings given as a list of pairs or a mapping.

        Entries without a category name are dropped; ratings are clamped
        to 0-10.
        """
        if isinstance(value, Mapping):
            pairs = list(value.items())
        elif isinstance(value, (list, tuple)):
            pairs = [
                (lookup(entry, "category"), lookup(entry, "rating"))
                for entry in value
                if isinstance(entry, Mapping)
            ]
        else:
            return []

        categories = []
        for name, rating in pairs:
            if not isinstance(name, (str, int)) or isinstance(name, bool):
                continue
            name = str(name).strip()
            if not name:
                continue
            number = to_number(rating)
            categories.append(CategoryRating(
                category=name,
                rating=None if number is None else round_half_up(clamp(number, 0, 10)),
            ))
        return categories

    def _coerce_approved(self, raw: Mapping[str, Any]) -> Optional[bool]:
        flag = to_bool(lookup_field(raw, "approved"))
        if flag is not None:
            return flag
        if raw.get("visibility") == "public":
            return True
        return None
