"""
Philly Sports Hub Configuration
Environment lookups, team tables and ledger limits
"""
import os

from dotenv import load_dotenv

load_dotenv()


# ============================================================================
# ENVIRONMENT
# ============================================================================
#
# Getters read the environment on every call so a rotated key is picked up
# without a restart.
#

def get_mongo_uri() -> str:
    return os.getenv("MONGODB_URI") or os.getenv("MONGO_URI", "mongodb://localhost:27017")


def get_database_name() -> str:
    return os.getenv("DATABASE_NAME", "phillysports")


def get_jwt_secret() -> str:
    return os.getenv("JWT_SECRET", "")


def get_sportsdata_api_key() -> str:
    return os.getenv("SPORTSDATA_API_KEY", "")


def get_youtube_api_key() -> str:
    return os.getenv("YOUTUBE_API_KEY", "")


def get_pusher_key():
    return os.getenv("PUSHER_KEY") or None


def get_pusher_cluster() -> str:
    return os.getenv("PUSHER_CLUSTER") or "us2"


def get_ebay_verification_token() -> str:
    return os.getenv("EBAY_VERIFICATION_TOKEN", "")


def get_ebay_endpoint() -> str:
    return os.getenv("EBAY_WEBHOOK_ENDPOINT", "https://phillysports.com/api/webhooks/ebay")


# ============================================================================
# HTTP
# ============================================================================

REQUEST_TIMEOUT = 10  # seconds, every outbound provider call
MONGO_SERVER_SELECTION_TIMEOUT_MS = 5000
FAN_OUT_WORKERS = 6   # one per Philly team feed

SCHEDULE_CACHE_CONTROL = "s-maxage=300, stale-while-revalidate"
ODDS_CACHE_CONTROL = "s-maxage=60, stale-while-revalidate"


# ============================================================================
# AGGREGATION WINDOWS
# ============================================================================

SCHEDULE_DEFAULT_DAYS = 10
SCHEDULE_MAX_RESULTS = 10
PHILLY_HOME_DEFAULT_DAYS = 60
SCORES_MAX_AGE_HOURS = 72
STANDINGS_CACHE_TTL_SECONDS = 3600


# ============================================================================
# GAMIFICATION / LEDGER
# ============================================================================

PREDICTIONS_PAGE_SIZE = 20        # upcoming / results lists
USER_PREDICTIONS_LIMIT = 50
LEADERBOARD_DEFAULT_LIMIT = 25
LEADERBOARD_MAX_LIMIT = 100
LEADERBOARD_MIN_SETTLED = 5       # settled predictions needed to be ranked on accuracy

HISTORY_DEFAULT_LIMIT = 50
HISTORY_MAX_LIMIT = 100

MIN_TIP = 5
MAX_TIP = 500
DAILY_TIP_LIMIT = 1000

PHOTO_SEARCH_MAX_LIMIT = 50
PHOTO_SEARCH_MAX_TERMS = 10

HIGHLIGHTS_MAX_RESULTS = 12
