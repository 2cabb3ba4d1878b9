"""
Review data model.

Represents the canonical, fully-normalized review shared by every provider.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple, Union

ReviewId = Union[int, str]

SENTINEL_ISO = "1970-01-01T00:00:00Z"
SENTINEL_DISPLAY = "1970-01-01 00:00:00"
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_review_id(raw: str) -> ReviewId:
    """Read an id from a path or CLI argument: ASCII digits become an int."""
    text = raw.strip()
    if text.isascii() and text.isdecimal():
        return int(text)
    return text


@dataclass(frozen=True)
class CategoryRating:
    """
    One sub-score of a review (e.g. cleanliness).
    """
    category: str  # Non-empty category name
    rating: Optional[int] = None  # 0-10, None when the guest skipped it

    def __post_init__(self):
        if not self.category or not self.category.strip():
            raise ValueError("Category name must be non-empty")
        if self.rating is not None and not (0 <= self.rating <= 10):
            raise ValueError(f"Invalid category rating: {self.rating}. Must be 0-10")

    def to_dict(self) -> dict:
        return {"category": self.category, "rating": self.rating}


@dataclass(frozen=True)
class Review:
    """
    Canonical review.

    Created once by the Field Normalizer and never mutated afterwards.
    Query operations return new views; the approval flag is the only
    field that changes, through with_approval().
    """
    id: ReviewId
    type: str
    status: str
    channel: str
    rating: Optional[int]  # 0-10 canonical scale
    public_review: str
    review_category: Tuple[CategoryRating, ...]
    submitted_at: str  # Provider display format ("YYYY-MM-DD HH:mm:ss")
    submitted_at_iso: str  # Canonical UTC instant, always parseable
    guest_name: str
    listing_name: str
    approved: bool = False
    source_url: Optional[str] = None
    submitted_at_ms: int = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if self.rating is not None and not (0 <= self.rating <= 10):
            raise ValueError(f"Invalid rating: {self.rating}. Must be 0-10")
        parsed = datetime.fromisoformat(self.submitted_at_iso.replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        object.__setattr__(self, "submitted_at_ms", (parsed - EPOCH) // timedelta(milliseconds=1))

    def with_approval(self, approved: bool) -> "Review":
        """Return a copy carrying the given approval flag."""
        if approved == self.approved:
            return self
        return replace(self, approved=approved)

    def to_dict(self) -> dict:
        """Convert to the camelCase wire shape served by the API."""
        data = {
            "id": self.id,
            "type": self.type,
            "status": self.status,
            "channel": self.channel,
            "rating": self.rating,
            "publicReview": self.public_review,
            "reviewCategory": [c.to_dict() for c in self.review_category],
            "submittedAt": self.submitted_at,
            "submittedAtIso": self.submitted_at_iso,
            "guestName": self.guest_name,
            "listingName": self.listing_name,
            "approved": self.approved,
        }
        if self.source_url:
            data["sourceUrl"] = self.source_url
        return data
