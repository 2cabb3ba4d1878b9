"""
Query Engine.

Filters, sorts and paginates the normalized review collection.
"""

import logging
from typing import List, Optional, Protocol, Sequence

from flex_reviews.models.query import QueryResult, ReviewQuery
from flex_reviews.models.review import Review, ReviewId
from flex_reviews.utils.fields import collapse_whitespace

logger = logging.getLogger(__name__)


class ApprovalLookup(Protocol):
    def get_approval(self, review_id: ReviewId) -> bool:
        ...


class ReviewQueryEngine:
    """
    Answers filtered, sorted and paginated queries.

    Filters are combined with logical AND. Sorting is stable, so the
    collection order breaks ties. Null ratings rank lowest in both
    directions: first when ascending, last when descending.
    """

    def __init__(self, approvals: Optional[ApprovalLookup] = None):
        """
        Initialize query engine.

        Args:
            approvals: Moderation store; a review counts as approved when
                its own flag or the store says so
        """
        self.approvals = approvals

    def run(self, reviews: Sequence[Review], query: ReviewQuery) -> QueryResult:
        """
        Execute a query against a collection.

        Args:
            reviews: Normalized collection (not modified)
            query: Filter, sort and pagination parameters

        Returns:
            QueryResult with the requested page and the post-filter total
        """
        rows = self.select(reviews, query)

        start = (query.page - 1) * query.limit
        items = rows[start:start + query.limit]

        logger.debug(
            f"Query matched {len(rows)} of {len(reviews)} reviews, "
            f"returning page {query.page} ({len(items)} items)"
        )
        return QueryResult(items=items, total=len(rows), page=query.page, limit=query.limit)

    def select(self, reviews: Sequence[Review], query: ReviewQuery) -> List[Review]:
        """Filter and sort without paginating."""
        rows = [self._with_approval(review) for review in reviews]
        rows = [review for review in rows if self._matches(review, query)]
        return self._sort(rows, query)

    def is_approved(self, review: Review) -> bool:
        if review.approved:
            return True
        return bool(self.approvals and self.approvals.get_approval(review.id))

    def _with_approval(self, review: Review) -> Review:
        return review.with_approval(self.is_approved(review))

    def _matches(self, review: Review, query: ReviewQuery) -> bool:
        if query.status is not None and review.status.lower() != query.status.lower():
            return False

        if query.listing:
            wanted = collapse_whitespace(query.listing).casefold()
            if review.listing_name.casefold() != wanted:
                return False

        if query.q:
            haystack = f"{review.guest_name} {review.listing_name} {review.public_review}"
            if query.q.casefold() not in haystack.casefold():
                return False

        if query.types and review.type.lower() not in query.types:
            return False

        if query.channels and review.channel.lower() not in query.channels:
            return False

        if query.category and not self._matches_category(review, query):
            return False

        if query.approved_only and not review.approved:
            return False

        if query.from_ms is not None and review.submitted_at_ms < query.from_ms:
            return False
        if query.to_ms is not None and review.submitted_at_ms > query.to_ms:
            return False

        return True

    def _matches_category(self, review: Review, query: ReviewQuery) -> bool:
        """
        Without a minimum the category must carry a rating; with one the
        rating must reach it.
        """
        wanted = query.category.strip().lower()
        for entry in review.review_category:
            if entry.category.lower() != wanted or entry.rating is None:
                continue
            if query.min_rating is None or entry.rating >= query.min_rating:
                return True
        return False

    def _sort(self, rows: List[Review], query: ReviewQuery) -> List[Review]:
        if query.sort is None:
            return rows

        descending = query.order == "desc"
        if query.sort == "date":
            return sorted(rows, key=lambda r: r.submitted_at_ms, reverse=descending)

        # (False, 0) ranks below every present rating
        return sorted(
            rows,
            key=lambda r: (r.rating is not None, r.rating if r.rating is not None else 0),
            reverse=descending,
        )
