"""
Unit tests for the Schema Validator.
"""

import pytest

from flex_reviews.models.review import parse_review_id
from flex_reviews.pipeline.validation import SchemaValidator


@pytest.fixture
def validator():
    return SchemaValidator(numeric_ids=True, rating_scale=10)


def test_valid_record_becomes_candidate(validator, raw_record):
    """Test that a well-formed record passes with its values intact."""
    candidate = validator.validate(raw_record)

    assert candidate is not None
    assert candidate.id == 7453
    assert candidate.submitted_at == "2020-08-21 22:45:14"
    assert candidate.rating is None
    assert [c.category for c in candidate.review_category] == [
        "cleanliness", "communication", "respect_house_rules"
    ]
    assert candidate.fields["guestName"] == "Shane Finkelstein"


def test_batch_drops_bad_timestamps(validator, raw_record):
    """Test that 3 valid + 2 invalid records yield exactly 3 candidates."""
    missing = dict(raw_record, id=2)
    del missing["submittedAt"]
    raws = [
        dict(raw_record, id=1),
        missing,
        dict(raw_record, id=3),
        dict(raw_record, id=4, submittedAt="2020-08"),
        dict(raw_record, id=5),
    ]

    candidates = validator.validate_batch(raws)

    assert [c.id for c in candidates] == [1, 3, 5]


def test_rejects_missing_or_non_numeric_id(validator, raw_record):
    """Test id requirements when the source declares numeric ids."""
    no_id = dict(raw_record)
    del no_id["id"]

    assert validator.validate(no_id) is None
    assert validator.validate(dict(raw_record, id="abc")) is None
    assert validator.validate(dict(raw_record, id=True)) is None
    assert validator.validate(dict(raw_record, id=12.5)) is None


def test_integer_like_ids_are_coerced(validator, raw_record):
    """Test that digit strings and integral floats become ints."""
    assert validator.validate(dict(raw_record, id="7001")).id == 7001
    assert validator.validate(dict(raw_record, id=7002.0)).id == 7002


def test_unicode_digit_ids_are_rejected(validator, raw_record):
    """Test that non-ASCII digits such as "\u00b2" drop the record instead of raising."""
    raws = [dict(raw_record, id="\u00b2"), dict(raw_record, id="\u0663"), dict(raw_record, id=1)]

    candidates = validator.validate_batch(raws)

    assert [c.id for c in candidates] == [1]


def test_parse_review_id():
    """Test id parsing for path and CLI arguments."""
    assert parse_review_id(" 7001 ") == 7001
    assert parse_review_id("rev-abc") == "rev-abc"
    assert parse_review_id("\u00b2") == "\u00b2"


def test_string_ids_allowed_when_not_numeric(raw_record):
    """Test that non-numeric ids pass when the source does not declare numeric ids."""
    validator = SchemaValidator(numeric_ids=False)
    candidate = validator.validate(dict(raw_record, id="  rev-abc "))
    assert candidate.id == "rev-abc"


def test_id_alias_is_resolved(validator, raw_record):
    """Test that reviewId is accepted when id is absent."""
    record = dict(raw_record)
    del record["id"]
    record["reviewId"] = 88

    assert validator.validate(record).id == 88


def test_non_mapping_records_are_rejected(validator):
    """Test that garbage entries in a batch are dropped, not raised."""
    assert validator.validate_batch([None, "text", 42, ["x"]]) == []


def test_rating_is_clamped(validator, raw_record):
    """Test that an out-of-range rating is clamped to the native scale."""
    assert validator.validate(dict(raw_record, rating=15)).rating == 10
    assert validator.validate(dict(raw_record, rating=-3)).rating == 0
    assert validator.validate(dict(raw_record, rating="8")).rating == 8
    assert validator.validate(dict(raw_record, rating="great")).rating is None


def test_five_point_scale_clamp(raw_record):
    """Test that a /5 provider clamps to 5 before scaling."""
    validator = SchemaValidator(rating_scale=5)
    assert validator.validate(dict(raw_record, rating=7)).rating == 5


def test_category_entries_are_validated(validator, raw_record):
    """Test dropping empty category names and clamping category ratings."""
    record = dict(raw_record, reviewCategory=[
        {"category": "  ", "rating": 9},
        {"category": "cleanliness", "rating": 14},
        {"category": "value", "rating": "n/a"},
        {"rating": 5},
        "not-an-object",
    ])

    categories = validator.validate(record).review_category

    assert [(c.category, c.rating) for c in categories] == [
        ("cleanliness", 10),
        ("value", None),
    ]


def test_category_mapping_shape(validator, raw_record):
    """Test that a flat name -> rating mapping keeps insertion order."""
    record = dict(raw_record)
    del record["reviewCategory"]
    record["categories"] = {"accuracy": 9, "location": None, "value": 7}

    categories = validator.validate(record).review_category

    assert [(c.category, c.rating) for c in categories] == [
        ("accuracy", 9),
        ("location", None),
        ("value", 7),
    ]


def test_approval_hints(validator, raw_record):
    """Test upstream approval hints; absence stays None."""
    assert validator.validate(raw_record).approved is None
    assert validator.validate(dict(raw_record, approved=True)).approved is True
    assert validator.validate(dict(raw_record, isApproved="false")).approved is False
    assert validator.validate(dict(raw_record, visibility="public")).approved is True


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
