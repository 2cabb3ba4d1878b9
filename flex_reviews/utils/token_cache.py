"""
Token cache utility.

In-process cache for provider access tokens.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

logger = logging.getLogger(__name__)

# Fetcher returns (access_token, expires_in_seconds)
TokenFetcher = Callable[[], Tuple[str, float]]


@dataclass(frozen=True)
class CachedToken:
    token: str
    expires_at: float  # Clock time after which the token is refreshed


class TokenCache:
    """
    Caches one access token with an expiry.

    The token is refreshed `refresh_skew` seconds before it actually
    expires. The lock is held during refresh, so concurrent callers wait
    for a single in-flight fetch instead of issuing their own. Tokens are
    never written outside the process.
    """

    def __init__(
        self,
        refresh_skew: float = 60.0,
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize token cache.

        Args:
            refresh_skew: Seconds before expiry at which to refresh
            clock: Time source returning seconds (injectable for tests)
        """
        self.refresh_skew = refresh_skew
        self.clock = clock
        self._cached: Optional[CachedToken] = None
        self._lock = threading.Lock()

    def get(self, fetcher: TokenFetcher) -> str:
        """
        Return a valid token, calling fetcher when none is cached or it expired.

        Raises:
            Whatever the fetcher raises; the cache is left unchanged
        """
        with self._lock:
            now = self.clock()
            if self._cached is not None and now < self._cached.expires_at:
                return self._cached.token

            token, expires_in = fetcher()
            expires_at = now + max(0.0, float(expires_in) - self.refresh_skew)
            self._cached = CachedToken(token=token, expires_at=expires_at)
            logger.info(f"Refreshed access token (valid for {expires_at - now:.0f}s)")
            return token

    def invalidate(self) -> None:
        """Forget the cached token, e.g. after the provider rejected it."""
        with self._lock:
            self._cached = None
