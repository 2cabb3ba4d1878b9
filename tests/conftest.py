"""
Shared fixtures for the Flex Reviews test suite.
"""

import pytest

from flex_reviews.models.review import CategoryRating, Review


@pytest.fixture
def make_review():
    """Factory for canonical reviews with sensible defaults."""
    def _make(review_id, **overrides):
        values = {
            "id": review_id,
            "type": "guest-to-host",
            "status": "published",
            "channel": "Hostaway",
            "rating": 8,
            "public_review": "Nice stay",
            "review_category": (CategoryRating("cleanliness", 8),),
            "submitted_at": "2024-03-05 10:15:00",
            "submitted_at_iso": "2024-03-05T10:15:00Z",
            "guest_name": "Guest",
            "listing_name": "Studio A",
            "approved": False,
        }
        values.update(overrides)
        return Review(**values)

    return _make


@pytest.fixture
def raw_record():
    """A well-formed Hostaway-style record."""
    return {
        "id": 7453,
        "type": "host-to-guest",
        "status": "published",
        "rating": None,
        "publicReview": "Shane and family are wonderful! Would definitely host again :)",
        "reviewCategory": [
            {"category": "cleanliness", "rating": 10},
            {"category": "communication", "rating": 10},
            {"category": "respect_house_rules", "rating": 10},
        ],
        "submittedAt": "2020-08-21 22:45:14",
        "guestName": "Shane Finkelstein",
        "listingName": "2B N1 A - 29 Shoreditch Heights",
    }
