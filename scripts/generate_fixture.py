"""
Generate a Hostaway-style review fixture.

Writes {"status": "success", "result": [...]} to data/mock-reviews.json.
Seeded, so the same arguments always produce the same file.

Usage:
    python scripts/generate_fixture.py --count 60 --seed 42
"""

import argparse
import json
import logging
import os
import random
import sys
from datetime import datetime, timedelta
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import config.settings as settings  # noqa: E402

logger = logging.getLogger(__name__)

LISTINGS = [
    "2B N1 A - 29 Shoreditch Heights",
    "1BR Deluxe - Waterloo Arch 191",
    "Studio - Canary Wharf Dockside",
    "2BR - King's Cross St Pancras",
    "Penthouse - Southbank Riverside",
]

GUESTS = [
    "Shane Finkelstein", "Amara Singh", "Lucas Nguyen", "Emma Johnson",
    "Mateo Rossi", "Sofia Chen", "Oliver Brown", "Ava Thompson",
    "Noah Wilson", "Mia Garcia", "Leo Dupont", "Isla Murphy",
]

PHRASES_POSITIVE = [
    "Wonderful stay, would definitely return.",
    "Spotlessly clean and great communication.",
    "Excellent location and easy check-in.",
    "Exactly as described; highly recommend.",
    "Comfortable and quiet, perfect for work.",
]
PHRASES_NEUTRAL = [
    "Overall good, a couple of minor issues.",
    "As expected for the price.",
    "Decent place, could improve instructions.",
    "Fine for a short stay.",
]
PHRASES_NEGATIVE = [
    "Had some issues with noise at night.",
    "Check-in was confusing, took longer than expected.",
    "Cleanliness could be improved.",
    "Not as quiet as advertised.",
]

CATEGORIES = [
    "cleanliness", "communication", "respect_house_rules", "check_in",
    "accuracy", "location", "value",
]


def review_text(rng: random.Random, score: int) -> str:
    if score >= 9:
        return rng.choice(PHRASES_POSITIVE)
    if score >= 7:
        return rng.choice(PHRASES_NEUTRAL)
    return rng.choice(PHRASES_NEGATIVE)


def make_review(rng: random.Random, review_id: int, anchor: datetime) -> dict:
    """
    Build one synthetic review.

    Category ratings are 6-10 with a 10% chance of being missing; the
    overall rating is their rounded mean, missing 30% of the time.
    """
    categories = [
        {"category": name, "rating": None if rng.random() < 0.10 else rng.randint(6, 10)}
        for name in CATEGORIES
    ]
    present = [c["rating"] for c in categories if c["rating"] is not None]
    average = round(sum(present) / len(present)) if present else None
    rating = None if rng.random() < 0.30 else average

    submitted = anchor - timedelta(
        days=rng.randint(0, 540),
        hours=rng.randint(0, 14),
        minutes=rng.randint(0, 59),
        seconds=rng.randint(0, 59),
    )

    return {
        "id": review_id,
        "type": "guest-to-host" if rng.random() < 0.85 else "host-to-guest",
        "status": "published",
        "rating": rating,
        "publicReview": review_text(rng, average if average is not None else 7),
        "reviewCategory": categories,
        "submittedAt": submitted.strftime("%Y-%m-%d %H:%M:%S"),
        "guestName": rng.choice(GUESTS),
        "listingName": rng.choice(LISTINGS),
    }


def generate(count: int, seed: int, anchor: datetime) -> dict:
    rng = random.Random(seed)
    result = [make_review(rng, 7000 + i, anchor) for i in range(count)]
    return {"status": "success", "result": result}


def main():
    parser = argparse.ArgumentParser(description="Generate a Hostaway-style review fixture")
    parser.add_argument("--count", type=int, default=60, help="Number of reviews (default: 60)")
    parser.add_argument("--seed", type=int, default=42, help="RNG seed (default: 42)")
    parser.add_argument(
        "--anchor-date",
        default="2025-09-01",
        help="Latest possible review date, YYYY-MM-DD (default: 2025-09-01)"
    )
    parser.add_argument("--output", default=str(settings.HOSTAWAY_FIXTURE_PATH))
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format=settings.LOG_FORMAT)

    anchor = datetime.strptime(args.anchor_date, "%Y-%m-%d").replace(hour=22)
    payload = generate(args.count, args.seed, anchor)

    os.makedirs(os.path.dirname(args.output) or ".", exist_ok=True)
    with open(args.output, 'w', encoding='utf-8') as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)

    logger.info(f"Wrote {len(payload['result'])} reviews to {args.output}")


if __name__ == "__main__":
    main()
