"""HTTP API for Flex Reviews."""
