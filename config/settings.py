"""
Configuration settings for Flex Reviews.

Centralized configuration for providers, pipeline and API parameters.
"""

import os
from pathlib import Path

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
DATA_ROOT = Path(os.getenv("FLEX_DATA_ROOT", str(PROJECT_ROOT / "data")))
OUTPUT_ROOT = PROJECT_ROOT / "output"

# Bundled fixtures and collaborator data files
HOSTAWAY_FIXTURE_PATH = DATA_ROOT / "mock-reviews.json"
GOOGLE_FIXTURE_PATH = DATA_ROOT / "mock-google-reviews.json"
PLACE_ID_MAP_PATH = DATA_ROOT / "google-places.json"
APPROVALS_PATH = DATA_ROOT / "approvals.json"

# Hostaway (property-management provider)
HOSTAWAY_BASE_URL = os.getenv("HOSTAWAY_BASE_URL", "https://api.hostaway.com")
HOSTAWAY_ACCOUNT_ID = os.getenv("HOSTAWAY_ACCOUNT_ID", "")
HOSTAWAY_API_KEY = os.getenv("HOSTAWAY_API_KEY", "")
HOSTAWAY_CHANNEL = "Hostaway"

# Google Places (maps provider)
GOOGLE_MAPS_API_KEY = os.getenv("GOOGLE_MAPS_API_KEY", "")
GOOGLE_PLACES_BASE_URL = "https://places.googleapis.com/v1"
GOOGLE_CHANNEL = "Google"
GOOGLE_MAX_REVIEWS = 5  # Places API returns at most 5 reviews per place

# Provider hardening
PROVIDER_TIMEOUT_SECONDS = float(os.getenv("PROVIDER_TIMEOUT_SECONDS", "10"))
TOKEN_REFRESH_SKEW_SECONDS = 60  # Refresh access tokens one minute early
DEFAULT_TOKEN_TTL_SECONDS = 3600

# Query engine
DEFAULT_PAGE_LIMIT = 25
MAX_PAGE_LIMIT = 100
DEFAULT_STATUS = "published"

# API server
API_HOST = os.getenv("API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("API_PORT", "8000"))
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = "flex_reviews.log"
