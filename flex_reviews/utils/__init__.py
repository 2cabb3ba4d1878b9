"""
Utility modules for Flex Reviews.

Cross-cutting concerns:
- Fields: Alias probing and value coercion for raw payloads
- Storage: Fixture and data-file loading
- Token cache: Provider access tokens
"""
