"""
Third-party webhooks and public realtime config
"""
import hashlib
import logging
from typing import Optional

from fastapi import APIRouter, Query, Request

from config import get_ebay_endpoint, get_ebay_verification_token, get_pusher_cluster, get_pusher_key
from utils.errors import BadRequestError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["webhooks"])


def ebay_challenge_response(challenge_code: str, token: str, endpoint: str) -> str:
    """sha256 hex of challengeCode + verificationToken + endpoint."""
    return hashlib.sha256((challenge_code + token + endpoint).encode("utf-8")).hexdigest()


@router.get("/webhooks/ebay")
def ebay_verify(challenge_code: Optional[str] = Query(None)):
    """Marketplace account-deletion endpoint handshake."""
    if not challenge_code:
        raise BadRequestError("Missing challenge_code")
    return {
        "challengeResponse": ebay_challenge_response(
            challenge_code, get_ebay_verification_token(), get_ebay_endpoint()
        )
    }


@router.post("/webhooks/ebay")
async def ebay_notification(request: Request):
    body = await request.body()
    logger.info(f"eBay deletion notification received: {body[:500]!r}")
    return {"success": True}


@router.get("/pusher/config")
def pusher_config():
    """Public key and cluster only; the secret never leaves the server."""
    return {"key": get_pusher_key(), "cluster": get_pusher_cluster()}
