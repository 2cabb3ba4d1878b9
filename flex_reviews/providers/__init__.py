"""
Provider adapters for Flex Reviews.

- Hostaway (property-management API)
- Google Places (maps reviews)
"""
