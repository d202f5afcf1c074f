import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./spaceseller.db")

# Connection pool (ignored for SQLite)
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "20"))
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "30"))
DB_POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", "30"))
DB_POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", "300"))
DB_LOG_SLOW_QUERIES = os.getenv("DB_LOG_SLOW_QUERIES", "true").lower() == "true"
DB_SLOW_QUERY_THRESHOLD = float(os.getenv("DB_SLOW_QUERY_THRESHOLD", "1.0"))

# Pricing
TAX_RATE = os.getenv("TAX_RATE", "0.19")  # German VAT, kept as string for Decimal parsing

# Travel cost tiers (one-way distance, rounded up to the next 5 EUR)
TRAVEL_COST_PER_KM_FIRST_TIER = os.getenv("TRAVEL_COST_PER_KM_FIRST_TIER", "0.30")
TRAVEL_COST_PER_KM_AFTER_TIER = os.getenv("TRAVEL_COST_PER_KM_AFTER_TIER", "0.38")
TRAVEL_COST_FIRST_TIER_KM = int(os.getenv("TRAVEL_COST_FIRST_TIER_KM", "20"))
TRAVEL_COST_ROUNDING_STEP = int(os.getenv("TRAVEL_COST_ROUNDING_STEP", "5"))

# Draft autosave
AUTOSAVE_ENABLED = os.getenv("AUTOSAVE_ENABLED", "true").lower() == "true"
AUTOSAVE_INTERVAL_SECONDS = float(os.getenv("AUTOSAVE_INTERVAL_SECONDS", "30"))
AUTOSAVE_INITIAL_DELAY_SECONDS = float(os.getenv("AUTOSAVE_INITIAL_DELAY_SECONDS", "5"))

# Open wizard sessions idle longer than this are closed by the sweeper
WIZARD_SESSION_TTL_SECONDS = float(os.getenv("WIZARD_SESSION_TTL_SECONDS", "3600"))
WIZARD_SWEEP_INTERVAL_SECONDS = float(os.getenv("WIZARD_SWEEP_INTERVAL_SECONDS", "60"))

# Orphaned drafts older than this are removed by the worker cron
DRAFT_RETENTION_DAYS = int(os.getenv("DRAFT_RETENTION_DAYS", "30"))

# Mapbox geocoding (forward geocoding of the shooting location)
MAPBOX_ACCESS_TOKEN = os.getenv("MAPBOX_ACCESS_TOKEN")
MAPBOX_GEOCODING_URL = os.getenv(
    "MAPBOX_GEOCODING_URL", "https://api.mapbox.com/geocoding/v5/mapbox.places"
)
GEOCODING_COUNTRY = os.getenv("GEOCODING_COUNTRY", "de")

# Provider matching service (find photographers near a location)
PROVIDER_MATCHING_URL = os.getenv("PROVIDER_MATCHING_URL")
PROVIDER_MATCHING_API_KEY = os.getenv("PROVIDER_MATCHING_API_KEY")
MAX_PROVIDER_DISTANCE_KM = int(os.getenv("MAX_PROVIDER_DISTANCE_KM", "150"))
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))

# Outbound new-order webhook (Zapier or similar); empty disables it
ORDER_WEBHOOK_URL = os.getenv("ORDER_WEBHOOK_URL")

# Admin notification target
ADMIN_ORDERS_LINK = os.getenv("ADMIN_ORDERS_LINK", "/admin-backend")

# Reliability report cache (seconds)
RELIABILITY_CACHE_TTL = int(os.getenv("RELIABILITY_CACHE_TTL", "300"))

# Redis (report cache and arq job queue). REDIS_URL wins over the individual settings.
REDIS_URL = os.getenv("REDIS_URL")
REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))
REDIS_PASSWORD = os.getenv("REDIS_PASSWORD")
REDIS_DB = int(os.getenv("REDIS_DB", "0"))
REDIS_SSL = os.getenv("REDIS_SSL", "false").lower() == "true"
CACHE_ENABLED = os.getenv("CACHE_ENABLED", "true").lower() == "true"
