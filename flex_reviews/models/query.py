"""
Query data model.

Filter, sort and pagination parameters for the Query Engine, plus the
result page it returns.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta, timezone
from typing import Any, FrozenSet, List, Mapping, Optional

import config.settings as settings
from flex_reviews.models.review import EPOCH, Review

logger = logging.getLogger(__name__)

SORT_KEYS = {"date": "date", "submittedat": "date", "rating": "rating"}
TRUTHY = {"true", "1", "yes", "on"}


def parse_number(value: Any) -> Optional[float]:
    """Parse a query-string number; anything non-finite or non-numeric is None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def parse_csv_lower(value: Any) -> FrozenSet[str]:
    """Split a comma-separated parameter into a lower-cased set."""
    if not value:
        return frozenset()
    return frozenset(part.strip().lower() for part in str(value).split(",") if part.strip())


def parse_date_bound(value: Any, end_of_day: bool = False) -> Optional[int]:
    """
    Convert a date or ISO instant parameter to epoch milliseconds.

    A bare date (YYYY-MM-DD) expands to the start of that UTC day, or to
    23:59:59.999 when end_of_day is set. Malformed values return None.
    """
    if not value:
        return None
    text = str(value).strip()
    try:
        if len(text) == 10:
            day = datetime.strptime(text, "%Y-%m-%d").date()
            bound = time(23, 59, 59, 999000) if end_of_day else time(0, 0, 0)
            moment = datetime.combine(day, bound, tzinfo=timezone.utc)
        else:
            moment = datetime.fromisoformat(text.replace("Z", "+00:00"))
            if moment.tzinfo is None:
                moment = moment.replace(tzinfo=timezone.utc)
    except ValueError:
        logger.debug(f"Ignoring malformed date parameter: {text!r}")
        return None
    return (moment - EPOCH) // timedelta(milliseconds=1)


@dataclass(frozen=True)
class ReviewQuery:
    """
    Parameters understood by the Query Engine.

    Every field is optional; filters combine with logical AND.
    """
    listing: Optional[str] = None
    q: Optional[str] = None
    category: Optional[str] = None
    min_rating: Optional[float] = None
    types: FrozenSet[str] = frozenset()
    channels: FrozenSet[str] = frozenset()
    approved_only: bool = False
    from_ms: Optional[int] = None
    to_ms: Optional[int] = None
    status: Optional[str] = settings.DEFAULT_STATUS  # None disables the filter
    sort: Optional[str] = None  # "date" or "rating"
    order: str = "desc"
    page: int = 1
    limit: int = settings.DEFAULT_PAGE_LIMIT

    def __post_init__(self):
        # Clamp here so directly-constructed queries obey the same bounds
        object.__setattr__(self, "page", max(1, int(self.page)))
        object.__setattr__(
            self, "limit", min(settings.MAX_PAGE_LIMIT, max(1, int(self.limit)))
        )
        if self.order not in ("asc", "desc"):
            object.__setattr__(self, "order", "desc")
        if self.sort is not None and self.sort not in ("date", "rating"):
            object.__setattr__(self, "sort", None)

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "ReviewQuery":
        """
        Build a query from raw query-string values.

        Never raises: malformed values fall back to their defaults.

        Args:
            params: Mapping of parameter name to raw (string) value

        Returns:
            ReviewQuery
        """
        def text(name: str) -> Optional[str]:
            value = params.get(name)
            if value is None:
                return None
            value = str(value).strip()
            return value or None

        page = parse_number(params.get("page"))
        limit = parse_number(params.get("limit"))

        status = text("status")
        if status is None:
            status = settings.DEFAULT_STATUS
        elif status.lower() == "all":
            status = None

        return cls(
            listing=text("listing"),
            q=text("q"),
            category=text("category"),
            min_rating=parse_number(params.get("min")),
            types=parse_csv_lower(params.get("type")),
            channels=parse_csv_lower(params.get("channel")),
            approved_only=(text("approvedOnly") or "").lower() in TRUTHY,
            from_ms=parse_date_bound(params.get("from")),
            to_ms=parse_date_bound(params.get("to"), end_of_day=True),
            status=status,
            sort=SORT_KEYS.get((text("sort") or "").lower()),
            order=(text("order") or "desc").lower(),
            page=int(page) if page is not None else 1,
            limit=int(limit) if limit is not None else settings.DEFAULT_PAGE_LIMIT,
        )


@dataclass
class QueryResult:
    """One page of query results."""
    items: List[Review] = field(default_factory=list)
    total: int = 0  # Post-filter, pre-pagination count
    page: int = 1
    limit: int = settings.DEFAULT_PAGE_LIMIT

    def to_dict(self) -> dict:
        """Render the success envelope served by the API."""
        return {
            "status": "success",
            "result": [review.to_dict() for review in self.items],
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
        }
