"""
Division & Conference Standings

Pro divisions come from ESPN and are cached per league in `standings_cache`
for an hour; a stale entry is served when ESPN is down. College conference
tables come from SportsDataIO.
"""
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from config import STANDINGS_CACHE_TTL_SECONDS
from core.sport_config import COLLEGE_TEAMS, League, get_current_season
from core.standings import ESPN_DIVISIONS, extract_espn_division, rank_conference
from integrations import espn_api, sportsdata_api
from integrations.espn_api import ESPNApiError
from utils.errors import BadRequestError, NotFoundError
from utils.mongo_helpers import db_datetime
from utils.timezone import iso_utc

logger = logging.getLogger(__name__)

LEAGUE_KEYS = {"nfl": League.NFL, "nba": League.NBA, "mlb": League.MLB, "nhl": League.NHL}


def _cached_response(doc: Dict[str, Any], stale: bool = False) -> Dict[str, Any]:
    body = {
        "standings": doc.get("standings") or [],
        "division": doc.get("division"),
        "lastUpdated": doc.get("lastUpdated"),
        "cached": True,
    }
    if stale:
        body["stale"] = True
    return body


def _read_cache(cache: Collection, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    try:
        return cache.find_one(query)
    except PyMongoError as e:
        logger.warning(f"Standings cache lookup failed: {e}")
        return None


def _write_cache(cache: Collection, key: str, fields: Dict[str, Any]) -> None:
    try:
        cache.update_one({"league": key}, {"$set": {"league": key, **fields}}, upsert=True)
    except PyMongoError as e:
        logger.warning(f"Standings cache write failed for {key}: {e}")


def get_division_standings(league_key: str, db: Database, now: datetime) -> Dict[str, Any]:
    """
    Ranked standings of the Philly team's division.

    Raises:
        BadRequestError: unknown league
        NotFoundError: ESPN has no such division and nothing is cached
        ESPNApiError: ESPN is down and nothing is cached
    """
    key = (league_key or "").lower()
    if key not in LEAGUE_KEYS:
        raise BadRequestError(f"Unsupported league: {league_key}")

    cache = db["standings_cache"]
    fresh = _read_cache(cache, {"league": key, "expiresAt": {"$gt": db_datetime(now)}})
    if fresh:
        return _cached_response(fresh)

    division_name, label = ESPN_DIVISIONS[key]
    try:
        standings = extract_espn_division(espn_api.fetch_standings(LEAGUE_KEYS[key]), division_name)
    except ESPNApiError:
        stale = _read_cache(cache, {"league": key})
        if stale:
            logger.warning(f"Serving stale {key} standings, ESPN unavailable")
            return _cached_response(stale, stale=True)
        raise

    if not standings:
        raise NotFoundError("No standings data available")

    last_updated = iso_utc(now)
    _write_cache(cache, key, {
        "standings": standings,
        "division": label,
        "lastUpdated": last_updated,
        "expiresAt": db_datetime(now + timedelta(seconds=STANDINGS_CACHE_TTL_SECONDS)),
    })

    return {
        "standings": standings,
        "division": label,
        "lastUpdated": last_updated,
        "cached": False,
    }


def get_college_standings(team: Optional[str], now: datetime) -> Dict[str, Any]:
    """Conference table for one of the Big 5 college basketball programs."""
    if not team:
        raise BadRequestError("Team parameter required")

    key = team.strip().lower()
    cfg = COLLEGE_TEAMS.get(key)
    if cfg is None:
        raise BadRequestError(f"Invalid team. Valid options: {', '.join(COLLEGE_TEAMS)}")

    season = get_current_season(League.NCAAB, now)
    rows = sportsdata_api.fetch_standings(League.NCAAB, season)

    return {
        "conference": cfg.conference,
        "team": key,
        "teamColor": cfg.color,
        "standings": rank_conference(rows or [], cfg),
        "updated": iso_utc(now),
        "source": "sportsdata",
    }
