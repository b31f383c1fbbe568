"""
YouTube Data API v3 - highlight video search
"""
import logging
from typing import Any, Dict, List

import requests

from config import HIGHLIGHTS_MAX_RESULTS, REQUEST_TIMEOUT
from utils.errors import UpstreamError

logger = logging.getLogger(__name__)

YOUTUBE_SEARCH_URL = "https://www.googleapis.com/youtube/v3/search"


class YouTubeApiError(UpstreamError):
    pass


def _video(item: Dict[str, Any]) -> Dict[str, Any]:
    snippet = item.get("snippet") or {}
    thumbnails = snippet.get("thumbnails") or {}
    thumbnail = (thumbnails.get("high") or thumbnails.get("default") or {}).get("url")
    return {
        "id": (item.get("id") or {}).get("videoId"),
        "title": snippet.get("title"),
        "description": snippet.get("description"),
        "thumbnail": thumbnail,
        "channel": snippet.get("channelTitle"),
        "publishedAt": snippet.get("publishedAt"),
    }


def search_videos(query: str, api_key: str) -> List[Dict[str, Any]]:
    """
    Search embeddable videos by relevance.

    Raises:
        YouTubeApiError: non-2xx response or network failure
    """
    params = {
        "part": "snippet",
        "q": query,
        "type": "video",
        "maxResults": HIGHLIGHTS_MAX_RESULTS,
        "order": "relevance",
        "videoEmbeddable": "true",
        "key": api_key,
    }
    try:
        response = requests.get(YOUTUBE_SEARCH_URL, params=params, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as e:
        logger.error(f"YouTube search failed for '{query}': {e}")
        raise YouTubeApiError(f"YouTube request failed: {e}")

    if not response.ok:
        logger.error(f"YouTube API error {response.status_code} for '{query}'")
        raise YouTubeApiError(f"YouTube API error: {response.status_code}", response.status_code)

    items = response.json().get("items") or []
    return [_video(item) for item in items]
