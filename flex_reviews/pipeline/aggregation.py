"""
Review Aggregator.

Listing summaries, dashboard facets and CSV export over normalized reviews.
"""

import logging
import os
from typing import Dict, List, Optional, Sequence

import pandas as pd

from flex_reviews.models.review import Review

logger = logging.getLogger(__name__)

BASE_COLUMNS = [
    "id", "listingName", "guestName", "channel", "type", "status",
    "rating", "approved", "submittedAt", "submittedAtIso", "publicReview",
]


class ReviewAggregator:
    """
    Tabular views over a review collection.
    """

    def to_frame(self, reviews: Sequence[Review]) -> pd.DataFrame:
        """
        Flatten reviews into a DataFrame with one cat_<name> column per category.
        """
        rows = []
        for review in reviews:
            row = {
                "id": review.id,
                "listingName": review.listing_name,
                "guestName": review.guest_name,
                "channel": review.channel,
                "type": review.type,
                "status": review.status,
                "rating": review.rating,
                "approved": review.approved,
                "submittedAt": review.submitted_at,
                "submittedAtIso": review.submitted_at_iso,
                "publicReview": review.public_review,
            }
            for entry in review.review_category:
                row[f"cat_{entry.category}"] = entry.rating
            rows.append(row)

        if not rows:
            return pd.DataFrame(columns=BASE_COLUMNS)
        return pd.DataFrame(rows)

    def summarize(self, reviews: Sequence[Review], listing_name: str) -> Dict:
        """
        Summarize the reviews shown for one listing.

        Args:
            reviews: Reviews already filtered to the listing
            listing_name: Listing label echoed in the summary

        Returns:
            Dict with review count, average rating on a 0-5 scale (one
            decimal, None without ratings) and per-category averages on
            the 0-10 scale
        """
        df = self.to_frame(reviews)

        average: Optional[float] = None
        ratings = pd.to_numeric(df["rating"], errors="coerce").dropna()
        if not ratings.empty:
            average = round(float(ratings.mean()) / 2, 1)

        category_averages = {}
        for column in sorted(c for c in df.columns if c.startswith("cat_")):
            values = pd.to_numeric(df[column], errors="coerce").dropna()
            if not values.empty:
                category_averages[column[len("cat_"):]] = round(float(values.mean()), 1)

        logger.info(f"Summarized {len(df)} reviews for listing '{listing_name}'")

        return {
            "listingName": listing_name,
            "reviewCount": len(df),
            "averageRating": average,
            "categoryAverages": category_averages,
        }

    def facets(self, reviews: Sequence[Review]) -> Dict[str, List[str]]:
        """Distinct filter values for dashboard dropdowns, sorted."""
        categories = {entry.category for review in reviews for entry in review.review_category}
        return {
            "listings": sorted({review.listing_name for review in reviews}),
            "categories": sorted(categories),
            "channels": sorted({review.channel for review in reviews}),
            "types": sorted({review.type for review in reviews}),
        }

    def export_csv(self, reviews: Sequence[Review], output_path: str) -> str:
        """
        Write reviews to CSV.

        Args:
            reviews: Reviews to export, in output order
            output_path: Destination file; parent directories are created

        Returns:
            Path to the written CSV
        """
        df = self.to_frame(reviews)

        directory = os.path.dirname(output_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        df.to_csv(output_path, index=False)

        logger.info(f"Exported {len(df)} reviews to {output_path}")
        return output_path
