"""
Content lookups: article thumbnails from the photo library and YouTube
highlight videos.
"""
import logging
import re
from typing import Any, Dict, List, Optional

from pymongo import DESCENDING
from pymongo.database import Database

from config import PHOTO_SEARCH_MAX_LIMIT, PHOTO_SEARCH_MAX_TERMS, get_youtube_api_key
from integrations import youtube_api
from integrations.youtube_api import YouTubeApiError
from utils.errors import ApiError, BadRequestError, ServiceUnavailableError
from utils.mongo_helpers import clamp_limit

logger = logging.getLogger(__name__)


def search_terms(q: Optional[str]) -> List[str]:
    """Lowercased words longer than two characters, regex-escaped."""
    if not q:
        return []
    terms = [t for t in q.lower().split() if len(t) > 2]
    return [re.escape(t) for t in terms[:PHOTO_SEARCH_MAX_TERMS]]


def build_photo_query(q: Optional[str], team: Optional[str]) -> Dict[str, Any]:
    query: Dict[str, Any] = {"status": "active"}
    conditions = []

    terms = search_terms(q)
    if terms:
        pattern = "|".join(terms)
        conditions.append({"keywords": {"$in": [re.compile(t, re.IGNORECASE) for t in terms]}})
        conditions.append({"description": {"$regex": pattern, "$options": "i"}})
        conditions.append({"title": {"$regex": pattern, "$options": "i"}})

    if team:
        conditions.append({"teams": team.lower()})

    if conditions:
        query["$or"] = conditions
    return query


def search_photos(db: Database, q: Optional[str], team: Optional[str], limit: Optional[int] = None) -> Dict[str, Any]:
    if not q and not team:
        raise BadRequestError("Search query (q) or team required")

    limit = clamp_limit(limit, 1, PHOTO_SEARCH_MAX_LIMIT)
    photos = list(
        db["photos"]
        .find(build_photo_query(q, team))
        .sort([("priority", DESCENDING), ("usedCount", DESCENDING), ("createdAt", DESCENDING)])
        .limit(limit)
    )

    if not photos:
        return {"success": True, "photos": [], "message": "No matching photos found"}

    return {
        "success": True,
        "photos": [
            {
                "_id": str(p["_id"]),
                "url": p.get("url"),
                "title": p.get("title"),
                "teams": p.get("teams"),
                "keywords": p.get("keywords"),
            }
            for p in photos
        ],
    }


def search_highlights(q: Optional[str]) -> Dict[str, Any]:
    """
    YouTube highlight search.

    Raises:
        BadRequestError: no query
        ServiceUnavailableError: no YouTube key; the client falls back to
            its embedded search
        ApiError: YouTube failed
    """
    if not q:
        raise BadRequestError("Search query required")

    api_key = get_youtube_api_key()
    if not api_key:
        raise ServiceUnavailableError(
            "YouTube API not configured",
            {"message": "Please use embedded YouTube search", "videos": []},
        )

    try:
        videos = youtube_api.search_videos(q, api_key)
    except YouTubeApiError as e:
        raise ApiError("Failed to fetch highlights", {"message": e.message})

    return {"videos": videos, "source": "youtube_api", "query": q}
