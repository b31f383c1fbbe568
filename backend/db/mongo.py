import logging

from pymongo import MongoClient, ASCENDING, DESCENDING
from pymongo.database import Database

from config import MONGO_SERVER_SELECTION_TIMEOUT_MS, get_mongo_uri, get_database_name

logger = logging.getLogger(__name__)

client = MongoClient(get_mongo_uri(), serverSelectionTimeoutMS=MONGO_SERVER_SELECTION_TIMEOUT_MS)
db = client[get_database_name()]


def get_db() -> Database:
    """FastAPI dependency returning the shared database handle."""
    return db


def ensure_indexes(database: Database = None) -> None:
    """Create the indexes the API relies on."""
    database = database if database is not None else db

    # One prediction per (user, game); the insert path relies on this
    database["predictions"].create_index(
        [("userId", ASCENDING), ("gameId", ASCENDING)], unique=True
    )
    database["predictions"].create_index([("userId", ASCENDING), ("createdAt", DESCENDING)])
    database["predictions"].create_index([("status", ASCENDING)])  # leaderboard $match

    database["games"].create_index([("status", ASCENDING), ("gameDate", ASCENDING)])

    database["transactions"].create_index([("userId", ASCENDING), ("createdAt", DESCENDING)])
    database["transactions"].create_index([("userId", ASCENDING), ("type", ASCENDING)])

    database["users"].create_index([("coinBalance", DESCENDING)])
    database["users"].create_index([("dailyLoginStreak", DESCENDING)])

    database["photos"].create_index([("status", ASCENDING), ("priority", DESCENDING)])
    database["photos"].create_index([("teams", ASCENDING)])

    database["standings_cache"].create_index("league", unique=True)

    logger.info("Database indexes ensured")
