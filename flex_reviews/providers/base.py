"""
Provider adapter base.

Shared fetch -> validate -> normalize flow with fail-soft fixture fallback.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, Optional

import requests

import config.settings as settings
from flex_reviews.models.review import Review
from flex_reviews.pipeline.merge import dedupe_reviews
from flex_reviews.pipeline.normalization import FieldNormalizer
from flex_reviews.pipeline.validation import SchemaValidator
from flex_reviews.utils.storage import FixtureStore

logger = logging.getLogger(__name__)

# Provenance markers
SOURCE_LIVE = "live"
SOURCE_MOCK = "mock"
SOURCE_EMPTY_FALLBACK = "live-empty-fallback"
SOURCE_ERROR_FALLBACK = "live-error-fallback"


class ProviderError(RuntimeError):
    """Raised for non-success upstream responses (auth, HTTP status, payload)."""


@dataclass
class ProviderResult:
    """Normalized reviews from one provider plus where they came from."""
    reviews: List[Review] = field(default_factory=list)
    source: str = SOURCE_MOCK

    @property
    def is_fallback(self) -> bool:
        return self.source != SOURCE_LIVE


class ReviewProvider(ABC):
    """
    One upstream review source.

    Subclasses implement the live call and the fixture loader; fetch()
    turns either into canonical reviews. Without credentials the fixture
    is served directly; live failures are logged and masked by the
    fixture so callers always get data.
    """

    name = "provider"

    def __init__(
        self,
        validator: SchemaValidator,
        normalizer: FieldNormalizer,
        fixture_store: Optional[FixtureStore] = None,
        session: Optional[requests.Session] = None,
        timeout: float = settings.PROVIDER_TIMEOUT_SECONDS
    ):
        """
        Initialize provider.

        Args:
            validator: Schema validator configured for this provider
            normalizer: Field normalizer configured for this provider
            fixture_store: Shared fixture cache
            session: HTTP session (injectable for tests)
            timeout: Per-request timeout in seconds
        """
        self.validator = validator
        self.normalizer = normalizer
        self.fixture_store = fixture_store or FixtureStore()
        self.session = session or requests.Session()
        self.timeout = timeout

    @abstractmethod
    def is_live_enabled(self) -> bool:
        """True when credentials for the live API are configured."""

    @abstractmethod
    def fetch_raw(self, **context: Any) -> List[Any]:
        """Fetch raw records from the live API. May raise."""

    @abstractmethod
    def fixture_records(self, **context: Any) -> List[Any]:
        """Load raw records from the bundled fixture."""

    def fetch(self, **context: Any) -> ProviderResult:
        """
        Fetch and normalize one page of reviews.

        Args:
            **context: Provider-specific request context (e.g. listing)

        Returns:
            ProviderResult with canonical reviews and a provenance marker
        """
        if not self.is_live_enabled():
            logger.info(f"{self.name}: no credentials configured, serving fixture")
            return self._from_fixture(SOURCE_MOCK, **context)

        try:
            reviews = self.process(self.fetch_raw(**context))
        except Exception as e:
            logger.warning(f"{self.name}: live fetch failed, falling back to fixture: {e}")
            return self._from_fixture(SOURCE_ERROR_FALLBACK, **context)

        if not reviews:
            logger.warning(f"{self.name}: live fetch returned no usable reviews, using fixture")
            return self._from_fixture(SOURCE_EMPTY_FALLBACK, **context)

        logger.info(f"{self.name}: fetched {len(reviews)} live reviews")
        return ProviderResult(reviews=reviews, source=SOURCE_LIVE)

    def process(self, raws: List[Any]) -> List[Review]:
        """Validate, normalize and dedupe raw records."""
        candidates = self.validator.validate_batch(raws)
        reviews = self.normalizer.normalize_batch(candidates)
        return dedupe_reviews(reviews)

    def _from_fixture(self, source: str, **context: Any) -> ProviderResult:
        reviews = self.process(self.fixture_records(**context))
        logger.info(f"{self.name}: serving {len(reviews)} fixture reviews ({source})")
        return ProviderResult(reviews=reviews, source=source)
