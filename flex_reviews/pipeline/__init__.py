"""
Pipeline stages for Flex Reviews.

Each stage processes reviews on their way from providers to the API:
- Schema Validator
- Field Normalizer
- Dedup & Merge
- Query Engine
- Review Aggregator (summaries, facets, CSV export)
"""
