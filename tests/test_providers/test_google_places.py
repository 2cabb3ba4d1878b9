"""
Unit tests for the Google Places provider.
"""

import json
from unittest.mock import MagicMock

import pytest
import requests

from flex_reviews.providers.base import SOURCE_ERROR_FALLBACK, SOURCE_LIVE, SOURCE_MOCK
from flex_reviews.providers.google_places import (
    SOURCE_NO_PLACE,
    GooglePlacesProvider,
    fnv1a_32,
    stable_review_id,
)
from flex_reviews.utils.storage import FixtureStore


def place_review(name, rating, publish_time="2025-06-01T12:00:00Z", author="Sam Lee"):
    return {
        "name": name,
        "rating": rating,
        "text": {"text": f"Review {name}"},
        "publishTime": publish_time,
        "authorAttribution": {"displayName": author},
    }


@pytest.fixture
def place_map(tmp_path):
    path = tmp_path / "google-places.json"
    path.write_text(json.dumps({
        "Studio A": "ChIJ-studio-a",
        "Loft B": "",
    }))
    return str(path)


@pytest.fixture
def details():
    return {
        "displayName": {"text": "Studio A Building"},
        "googleMapsUri": "https://maps.google.com/?cid=42",
        "reviews": [
            place_review("places/x/reviews/1", 4.5),
            place_review("places/x/reviews/2", 4),
            place_review("places/x/reviews/3", 2.25),
        ],
    }


def make_provider(place_map, session=None, api_key="key-123", **kwargs):
    return GooglePlacesProvider(
        api_key=api_key,
        base_url="https://places.example.test/v1",
        place_id_map_path=place_map,
        fixture_store=FixtureStore(),
        session=session or MagicMock(),
        timeout=4,
        **kwargs
    )


def live_session(payload, status_code=200):
    session = MagicMock()
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    resp.text = ""
    session.get.return_value = resp
    return session


def test_fnv1a_known_values():
    """Test the hash against published FNV-1a 32-bit vectors."""
    assert fnv1a_32("") == 0x811C9DC5
    assert fnv1a_32("a") == 0xE40C292C
    assert fnv1a_32("foobar") == 0xBF9CF968


def test_stable_ids_are_deterministic():
    """Test that ids depend only on review content and stay in range."""
    review = place_review("places/x/reviews/abc", 5)

    first = stable_review_id(review)
    second = stable_review_id(dict(review))

    assert first == second
    assert 900000 <= first < 1000000


def test_stable_id_without_resource_name():
    review = place_review(None, 5)
    review.pop("name")

    other = dict(review, publishTime="2025-06-02T12:00:00Z")

    assert 900000 <= stable_review_id(review) < 1000000
    assert stable_review_id(review) != stable_review_id(other)


def test_live_fetch_scales_ratings(place_map, details):
    """Test /5 ratings are doubled with half-up rounding."""
    session = live_session(details)
    provider = make_provider(place_map, session=session)

    result = provider.fetch(listing="Studio A")

    assert result.source == SOURCE_LIVE
    assert [r.rating for r in result.reviews] == [9, 8, 5]
    assert all(r.channel == "Google" for r in result.reviews)
    assert result.reviews[0].listing_name == "Studio A Building"
    assert result.reviews[0].source_url == "https://maps.google.com/?cid=42"


def test_live_request_shape(place_map, details):
    """Test the place-details request for a resolved place id."""
    session = live_session(details)
    provider = make_provider(place_map, session=session)

    provider.fetch(place_id="ChIJ/odd id")

    call = session.get.call_args
    assert call.args[0] == "https://places.example.test/v1/places/ChIJ%2Fodd%20id"
    assert call.kwargs["headers"]["X-Goog-Api-Key"] == "key-123"
    assert "reviews.rating" in call.kwargs["params"]["fields"]
    assert call.kwargs["timeout"] == 4


def test_listing_resolves_through_mapping(place_map, details):
    session = live_session(details)
    provider = make_provider(place_map, session=session)

    provider.fetch(listing="Studio A")

    assert session.get.call_args.args[0].endswith("/places/ChIJ-studio-a")


def test_reviews_are_capped(place_map):
    """Test that at most five reviews are kept per place."""
    payload = {"reviews": [place_review(f"places/x/reviews/{i}", 5) for i in range(8)]}
    provider = make_provider(place_map, session=live_session(payload))

    result = provider.fetch(place_id="ChIJ-any")

    assert len(result.reviews) == 5


def test_unmapped_listing_yields_no_place(place_map):
    """Test that a live-enabled fetch without a place id returns nothing."""
    session = MagicMock()
    provider = make_provider(place_map, session=session)

    for listing in ("Loft B", "Unknown"):
        result = provider.fetch(listing=listing)
        assert result.source == SOURCE_NO_PLACE
        assert result.reviews == []

    session.get.assert_not_called()


def test_no_api_key_serves_fixture_for_listing(place_map):
    """Test fixture fallback relabels the sample reviews to the listing."""
    session = MagicMock()
    provider = make_provider(place_map, session=session, api_key="")

    result = provider.fetch(listing="Loft B")

    assert result.source == SOURCE_MOCK
    assert [r.rating for r in result.reviews] == [10, 8, 6]
    assert {r.listing_name for r in result.reviews} == {"Loft B"}
    assert result.reviews[0].submitted_at_iso == "2025-08-10T14:22:31.512Z"
    session.get.assert_not_called()


def test_fixture_without_listing_keeps_place_name(place_map):
    provider = make_provider(place_map, api_key="")

    result = provider.fetch()

    assert {r.listing_name for r in result.reviews} == {"The Flex - Sample Property"}


def test_live_error_falls_back(place_map):
    """Test that a timeout is masked by the fixture."""
    session = MagicMock()
    session.get.side_effect = requests.Timeout("read timed out")
    provider = make_provider(place_map, session=session)

    result = provider.fetch(listing="Studio A")

    assert result.source == SOURCE_ERROR_FALLBACK
    assert len(result.reviews) == 3
    assert {r.listing_name for r in result.reviews} == {"Studio A"}


def test_http_error_falls_back(place_map):
    provider = make_provider(place_map, session=live_session({}, status_code=403))
    assert provider.fetch(place_id="ChIJ-any").source == SOURCE_ERROR_FALLBACK


def test_place_records_tolerates_garbage(place_map):
    provider = make_provider(place_map)

    assert provider.place_records(None) == []
    assert provider.place_records({"reviews": "nope"}) == []
    records = provider.place_records({"reviews": [None, place_review("r/1", 3, author=None)]})
    assert len(records) == 1
    assert records[0]["guestName"] == "Google user"


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
