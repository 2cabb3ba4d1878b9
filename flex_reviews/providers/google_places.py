"""
Google Places provider.

Fetches the (at most five) public reviews Google exposes for a place and
maps them onto raw review records on the 0-5 scale.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import quote

import requests

import config.settings as settings
from flex_reviews.pipeline.normalization import FieldNormalizer
from flex_reviews.pipeline.validation import SchemaValidator
from flex_reviews.providers.base import ProviderError, ProviderResult, ReviewProvider
from flex_reviews.utils.fields import lookup
from flex_reviews.utils.storage import FixtureStore

logger = logging.getLogger(__name__)

SOURCE_NO_PLACE = "no-place"

PLACE_FIELDS = ",".join([
    "displayName",
    "googleMapsUri",
    "reviews.name",
    "reviews.text",
    "reviews.rating",
    "reviews.publishTime",
    "reviews.googleMapsUri",
    "reviews.authorAttribution.displayName",
])

GOOGLE_ID_BASE = 900000
GOOGLE_ID_SPAN = 100000


def fnv1a_32(text: str) -> int:
    """32-bit FNV-1a hash."""
    h = 2166136261
    for ch in text:
        h = ((h ^ ord(ch)) * 16777619) & 0xFFFFFFFF
    return h


def stable_review_id(review: Mapping[str, Any]) -> int:
    """
    Derive a numeric id for a place review.

    Uses the review resource name when present, else publish time,
    author and text, so the same review keeps its id across fetches.
    """
    key = review.get("name") or "|".join([
        str(review.get("publishTime") or ""),
        str(lookup(review, "authorAttribution.displayName") or ""),
        str(lookup(review, "text.text") or ""),
    ])
    return GOOGLE_ID_BASE + fnv1a_32(key) % GOOGLE_ID_SPAN


class GooglePlacesProvider(ReviewProvider):
    """
    Reviews from the Google Places API (place details).

    The place is given directly or resolved from the listing name through
    the listing -> place-id mapping file.
    """

    name = "google"

    def __init__(
        self,
        api_key: str = settings.GOOGLE_MAPS_API_KEY,
        base_url: str = settings.GOOGLE_PLACES_BASE_URL,
        place_id_map_path: str = str(settings.PLACE_ID_MAP_PATH),
        fixture_path: str = str(settings.GOOGLE_FIXTURE_PATH),
        fixture_store: Optional[FixtureStore] = None,
        session: Optional[requests.Session] = None,
        timeout: float = settings.PROVIDER_TIMEOUT_SECONDS,
        max_reviews: int = settings.GOOGLE_MAX_REVIEWS
    ):
        """
        Initialize Google Places provider.

        Args:
            api_key: Google Maps Platform API key
            base_url: Places API root
            place_id_map_path: JSON file mapping listing names to place ids
            fixture_path: Bundled place-details response used as fallback
            fixture_store: Shared fixture cache
            session: HTTP session (injectable for tests)
            timeout: Per-request timeout in seconds
            max_reviews: Cap on reviews kept per place
        """
        super().__init__(
            validator=SchemaValidator(numeric_ids=True, rating_scale=5),
            normalizer=FieldNormalizer(channel_default=settings.GOOGLE_CHANNEL, rating_scale=5),
            fixture_store=fixture_store,
            session=session,
            timeout=timeout,
        )
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.place_id_map_path = place_id_map_path
        self.fixture_path = fixture_path
        self.max_reviews = max_reviews

    def is_live_enabled(self) -> bool:
        return bool(self.api_key)

    def resolve_place_id(self, listing: Optional[str] = None, place_id: Optional[str] = None) -> str:
        """Explicit place id wins; otherwise look the listing up in the mapping file."""
        if place_id:
            return place_id
        if not listing:
            return ""
        return self.fixture_store.load_mapping(self.place_id_map_path).get(listing, "")

    def fetch(self, **context: Any) -> ProviderResult:
        listing = context.get("listing")
        place_id = self.resolve_place_id(listing, context.get("place_id"))

        if self.is_live_enabled() and not place_id:
            logger.info(f"{self.name}: no place id for listing {listing!r}")
            return ProviderResult(reviews=[], source=SOURCE_NO_PLACE)

        return super().fetch(listing=listing, place_id=place_id)

    def fetch_raw(self, **context: Any) -> List[Any]:
        place_id = context["place_id"]
        resp = self.session.get(
            f"{self.base_url}/places/{quote(place_id, safe='')}",
            params={"fields": PLACE_FIELDS, "languageCode": "en"},
            headers={"X-Goog-Api-Key": self.api_key},
            timeout=self.timeout,
        )

        if resp.status_code != 200:
            raise ProviderError(f"places:{resp.status_code} {resp.text}")

        return self.place_records(resp.json(), context.get("listing"))

    def fixture_records(self, **context: Any) -> List[Any]:
        document = self.fixture_store.load_json(self.fixture_path)
        listing = context.get("listing")
        if listing and isinstance(document, Mapping):
            # Sample reviews stand in for whichever listing was requested
            document = {**document, "displayName": {"text": listing}}
        return self.place_records(document, listing)

    def place_records(self, details: Any, listing: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Convert a place-details response into raw review records.

        Args:
            details: Places API response (displayName, googleMapsUri, reviews)
            listing: Requested listing name, used when the place has no name

        Returns:
            Raw records ready for the Schema Validator, at most max_reviews
        """
        if not isinstance(details, Mapping):
            return []

        place_name = lookup(details, "displayName.text") or listing or ""
        place_uri = details.get("googleMapsUri")
        reviews = details.get("reviews") or []
        if not isinstance(reviews, list):
            return []

        records = []
        for review in reviews[:self.max_reviews]:
            if not isinstance(review, Mapping):
                continue
            records.append({
                "id": stable_review_id(review),
                "type": "guest-to-host",
                "status": "published",
                "channel": settings.GOOGLE_CHANNEL,
                "rating": review.get("rating"),
                "publicReview": lookup(review, "text.text") or "",
                "reviewCategory": [],
                "submittedAt": review.get("publishTime") or "",
                "guestName": lookup(review, "authorAttribution.displayName") or "Google user",
                "listingName": place_name,
                "sourceUrl": review.get("googleMapsUri") or place_uri,
            })
        return records
