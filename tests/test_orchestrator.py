"""
Tests for the Review Service (provider fan-in, moderation, export).
"""

from unittest.mock import MagicMock

import pandas as pd
import pytest

from flex_reviews.orchestrator import ReviewService
from flex_reviews.providers.base import ProviderResult, SOURCE_LIVE, SOURCE_MOCK
from flex_reviews.registry.approval_registry import ApprovalRegistry


@pytest.fixture
def providers(make_review):
    hostaway = MagicMock()
    hostaway.fetch.return_value = ProviderResult(
        reviews=[make_review(1, rating=9), make_review(2, rating=4, status="draft")],
        source=SOURCE_LIVE,
    )
    google = MagicMock()
    google.fetch.return_value = ProviderResult(
        reviews=[make_review(900001, channel="Google", rating=10), make_review(1, channel="Google")],
        source=SOURCE_MOCK,
    )
    return hostaway, google


@pytest.fixture
def service(providers):
    hostaway, google = providers
    return ReviewService(hostaway=hostaway, google=google, approvals=ApprovalRegistry())


def test_unknown_provider_rejected(service):
    with pytest.raises(ValueError):
        service.collect("yelp")


def test_collect_all_merges_with_listing(service, providers):
    """Test fan-in order, first-provider-wins and combined provenance."""
    reviews, source = service.collect("all", listing="Studio A")

    assert [r.id for r in reviews] == [1, 2, 900001]
    assert reviews[0].channel == "Hostaway"
    assert source == "live+mock"
    providers[1].fetch.assert_called_once_with(listing="Studio A", place_id=None)


def test_collect_all_without_scope_skips_google(service, providers):
    _, source = service.collect("all")

    assert source == "live"
    providers[1].fetch.assert_not_called()


def test_query_passes_place_id(service, providers):
    result, source = service.query({"placeId": " ChIJ-1 "}, provider="google")

    providers[1].fetch.assert_called_once_with(listing=None, place_id="ChIJ-1")
    assert source == "mock"
    assert result.total == 2


def test_public_reviews_only_show_approved(service):
    service.set_approval(1, True)

    result, _ = service.public_reviews("Studio A", {"limit": "10"})

    assert [r.id for r in result.items] == [1]
    assert result.limit == 10


def test_listing_summary(service):
    service.set_approval(900001, True)

    summary, source = service.listing_summary("Studio A")

    assert summary["reviewCount"] == 1
    assert summary["averageRating"] == 5.0
    assert source == "live+mock"


def test_export_ignores_pagination(service, tmp_path):
    output = tmp_path / "reviews.csv"

    service.export({"limit": "1", "status": "all"}, str(output))

    df = pd.read_csv(output)
    assert list(df["id"]) == [1, 2]


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
