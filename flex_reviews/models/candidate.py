"""
Candidate record model.

A raw upstream record that passed schema validation but has not been
normalized into the canonical Review shape yet.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from flex_reviews.models.review import CategoryRating, ReviewId


@dataclass
class CandidateRecord:
    """
    Output of the Schema Validator, input of the Field Normalizer.

    Typed fields hold the values the validator checked and coerced;
    `fields` keeps the source mapping so the normalizer can look up
    provider-specific aliases.
    """
    id: ReviewId
    submitted_at: str  # Raw timestamp string, at least 10 characters
    rating: Optional[float] = None  # Clamped to the provider's native scale
    review_category: List[CategoryRating] = field(default_factory=list)
    approved: Optional[bool] = None  # None when the source gave no hint
    fields: Dict[str, Any] = field(default_factory=dict)
