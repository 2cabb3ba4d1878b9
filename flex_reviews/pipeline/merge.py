"""
Dedup & Merge.

Combines normalized review sequences into one collection with unique ids.
"""

import logging
from typing import Iterable, List, Sequence

from flex_reviews.models.review import Review

logger = logging.getLogger(__name__)


def dedupe_reviews(reviews: Iterable[Review]) -> List[Review]:
    """
    Drop repeated ids, keeping the first occurrence in order.

    Idempotent: a deduplicated sequence comes back unchanged.
    """
    seen = set()
    unique = []
    for review in reviews:
        if review.id in seen:
            continue
        seen.add(review.id)
        unique.append(review)
    return unique


def merge_reviews(*sequences: Sequence[Review]) -> List[Review]:
    """
    Merge per-provider sequences; on id collisions the earlier provider wins.

    Args:
        *sequences: Normalized sequences in provider priority order

    Returns:
        Single ordered list with unique ids
    """
    combined = [review for sequence in sequences for review in sequence]
    merged = dedupe_reviews(combined)
    if len(merged) < len(combined):
        logger.info(f"Merged {len(combined)} reviews into {len(merged)} unique")
    return merged
