"""
Review Service.

Coordinates provider fetches, the query engine and moderation state for
the API and CLI.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

import config.settings as settings
from flex_reviews.models.query import QueryResult, ReviewQuery, parse_number
from flex_reviews.models.review import Review, ReviewId
from flex_reviews.pipeline.aggregation import ReviewAggregator
from flex_reviews.pipeline.merge import merge_reviews
from flex_reviews.pipeline.query import ReviewQueryEngine
from flex_reviews.providers.google_places import GooglePlacesProvider
from flex_reviews.providers.hostaway import HostawayProvider
from flex_reviews.registry.approval_registry import ApprovalRegistry
from flex_reviews.utils.storage import FixtureStore

logger = logging.getLogger(__name__)

PROVIDERS = ("hostaway", "google", "all")


class ReviewService:
    """
    Runs the review pipeline per request.

    Flow:
    1. Provider fetch (live or fixture) → validated, normalized reviews
    2. Merge of provider output (first provider wins on id collisions)
    3. Query Engine with the approval registry as moderation source
    """

    def __init__(
        self,
        hostaway: Optional[HostawayProvider] = None,
        google: Optional[GooglePlacesProvider] = None,
        approvals: Optional[ApprovalRegistry] = None
    ):
        """
        Initialize review service.

        Args:
            hostaway: Property-management provider
            google: Places provider
            approvals: Moderation store
        """
        fixture_store = FixtureStore()
        self.hostaway = hostaway or HostawayProvider(fixture_store=fixture_store)
        self.google = google or GooglePlacesProvider(fixture_store=fixture_store)
        self.approvals = approvals if approvals is not None else ApprovalRegistry()
        self.engine = ReviewQueryEngine(approvals=self.approvals)
        self.aggregator = ReviewAggregator()

        logger.info("Review service initialized")

    @classmethod
    def from_settings(cls) -> "ReviewService":
        """Build the service from config.settings (environment driven)."""
        fixture_store = FixtureStore()
        return cls(
            hostaway=HostawayProvider(
                account_id=settings.HOSTAWAY_ACCOUNT_ID,
                api_key=settings.HOSTAWAY_API_KEY,
                base_url=settings.HOSTAWAY_BASE_URL,
                fixture_path=str(settings.HOSTAWAY_FIXTURE_PATH),
                fixture_store=fixture_store,
            ),
            google=GooglePlacesProvider(
                api_key=settings.GOOGLE_MAPS_API_KEY,
                place_id_map_path=str(settings.PLACE_ID_MAP_PATH),
                fixture_path=str(settings.GOOGLE_FIXTURE_PATH),
                fixture_store=fixture_store,
            ),
            approvals=ApprovalRegistry(str(settings.APPROVALS_PATH)),
        )

    def collect(
        self,
        provider: str = "hostaway",
        listing: Optional[str] = None,
        place_id: Optional[str] = None
    ) -> Tuple[List[Review], str]:
        """
        Fetch the normalized collection for one provider or all of them.

        Google is only asked when a listing or place id narrows the request.

        Returns:
            Tuple of (reviews, provenance marker)
        """
        if provider not in PROVIDERS:
            raise ValueError(f"Unknown provider: {provider}. Must be one of {PROVIDERS}")

        if provider == "hostaway":
            result = self.hostaway.fetch()
            return result.reviews, result.source

        if provider == "google":
            result = self.google.fetch(listing=listing, place_id=place_id)
            return result.reviews, result.source

        results = [self.hostaway.fetch()]
        if listing or place_id:
            results.append(self.google.fetch(listing=listing, place_id=place_id))

        reviews = merge_reviews(*(r.reviews for r in results))
        source = "+".join(r.source for r in results)
        return reviews, source

    def query(self, params: Mapping[str, Any], provider: str = "hostaway") -> Tuple[QueryResult, str]:
        """
        Answer a dashboard query.

        Args:
            params: Raw query-string parameters
            provider: "hostaway", "google" or "all"

        Returns:
            Tuple of (result page, provenance marker)
        """
        query = ReviewQuery.from_params(params)
        reviews, source = self.collect(
            provider,
            listing=query.listing,
            place_id=(str(params.get("placeId") or "").strip() or None),
        )
        return self.engine.run(reviews, query), source

    def public_reviews(self, listing: str, params: Mapping[str, Any]) -> Tuple[QueryResult, str]:
        """
        Approved-only view of one listing, newest first.

        Only page and limit are taken from params.
        """
        page = parse_number(params.get("page"))
        limit = parse_number(params.get("limit"))
        query = ReviewQuery(
            listing=listing,
            approved_only=True,
            sort="date",
            order="desc",
            page=int(page) if page is not None else 1,
            limit=int(limit) if limit is not None else settings.DEFAULT_PAGE_LIMIT,
        )
        reviews, source = self.collect("all", listing=listing)
        return self.engine.run(reviews, query), source

    def listing_summary(self, listing: str) -> Tuple[Dict, str]:
        """Summary of the approved reviews shown for a listing."""
        query = ReviewQuery(listing=listing, approved_only=True)
        reviews, source = self.collect("all", listing=listing)
        shown = self.engine.select(reviews, query)
        summary = self.aggregator.summarize(shown, listing)
        return summary, source

    def facets(self) -> Tuple[Dict[str, List[str]], str]:
        """Distinct listings, categories, channels and types of published reviews."""
        reviews, source = self.collect("hostaway")
        published = self.engine.select(reviews, ReviewQuery())
        return self.aggregator.facets(published), source

    def export(self, params: Mapping[str, Any], output_path: str, provider: str = "hostaway") -> str:
        """Export every review matching params (ignoring pagination) to CSV."""
        query = ReviewQuery.from_params(params)
        reviews, _ = self.collect(provider, listing=query.listing)
        return self.aggregator.export_csv(self.engine.select(reviews, query), output_path)

    def set_approval(self, review_id: ReviewId, approved: bool) -> Dict[str, Any]:
        self.approvals.set_approval(review_id, approved)
        return {"id": review_id, "approved": bool(approved)}
