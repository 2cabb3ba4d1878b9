"""
Hostaway provider.

Fetches guest reviews from the Hostaway property-management API using the
client-credentials flow, with the bundled fixture as fallback.
"""

import logging
from typing import Any, List, Optional, Tuple

import requests

import config.settings as settings
from flex_reviews.pipeline.normalization import FieldNormalizer
from flex_reviews.pipeline.validation import SchemaValidator
from flex_reviews.providers.base import ProviderError, ReviewProvider
from flex_reviews.utils.storage import FixtureStore, extract_records
from flex_reviews.utils.token_cache import TokenCache

logger = logging.getLogger(__name__)


class HostawayProvider(ReviewProvider):
    """
    Reviews from Hostaway.

    One page of /v1/reviews is fetched per call. Ids are numeric and
    ratings are already on the 0-10 scale.
    """

    name = "hostaway"

    def __init__(
        self,
        account_id: str = settings.HOSTAWAY_ACCOUNT_ID,
        api_key: str = settings.HOSTAWAY_API_KEY,
        base_url: str = settings.HOSTAWAY_BASE_URL,
        fixture_path: str = str(settings.HOSTAWAY_FIXTURE_PATH),
        fixture_store: Optional[FixtureStore] = None,
        session: Optional[requests.Session] = None,
        timeout: float = settings.PROVIDER_TIMEOUT_SECONDS,
        token_cache: Optional[TokenCache] = None
    ):
        """
        Initialize Hostaway provider.

        Args:
            account_id: Hostaway account id (client id)
            api_key: Hostaway API key (client secret)
            base_url: API root
            fixture_path: Bundled fixture served without credentials or on failure
            fixture_store: Shared fixture cache
            session: HTTP session (injectable for tests)
            timeout: Per-request timeout in seconds
            token_cache: Access token cache owned by this provider
        """
        super().__init__(
            validator=SchemaValidator(numeric_ids=True, rating_scale=10),
            normalizer=FieldNormalizer(channel_default=settings.HOSTAWAY_CHANNEL, rating_scale=10),
            fixture_store=fixture_store,
            session=session,
            timeout=timeout,
        )
        self.account_id = account_id
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.fixture_path = fixture_path
        self.token_cache = token_cache or TokenCache(
            refresh_skew=settings.TOKEN_REFRESH_SKEW_SECONDS
        )

    def is_live_enabled(self) -> bool:
        return bool(self.account_id and self.api_key)

    def fetch_raw(self, **context: Any) -> List[Any]:
        token = self.token_cache.get(self._request_token)

        resp = self.session.get(
            f"{self.base_url}/v1/reviews",
            headers={
                "Authorization": f"Bearer {token}",
                "Cache-Control": "no-cache",
            },
            timeout=self.timeout,
        )

        if resp.status_code in (401, 403):
            self.token_cache.invalidate()
        if resp.status_code != 200:
            raise ProviderError(f"reviews:{resp.status_code} {resp.text}")

        return extract_records(resp.json())

    def fixture_records(self, **context: Any) -> List[Any]:
        return self.fixture_store.load_records(self.fixture_path)

    def _request_token(self) -> Tuple[str, float]:
        """Exchange account id and API key for an access token."""
        resp = self.session.post(
            f"{self.base_url}/v1/accessTokens",
            data={
                "grant_type": "client_credentials",
                "client_id": self.account_id,
                "client_secret": self.api_key,
                "scope": "general",
            },
            headers={
                "Content-Type": "application/x-www-form-urlencoded",
                "Cache-Control": "no-cache",
            },
            timeout=self.timeout,
        )

        if resp.status_code != 200:
            raise ProviderError(f"token:{resp.status_code} {resp.text}")

        tokens = resp.json()
        access_token = tokens.get("access_token")
        if not access_token:
            raise ProviderError("token: response carried no access_token")

        expires_in = tokens.get("expires_in") or settings.DEFAULT_TOKEN_TTL_SECONDS
        return access_token, float(expires_in)
