"""
Coin Ledger & Tips

Balances live on the user document; every movement is appended to
`transactions`. A tip debits the sender with a conditional $inc so the
balance never goes negative, then credits the recipient.
"""
import logging
from datetime import datetime, time
from typing import Any, Dict, Optional

from bson import ObjectId
from pymongo import DESCENDING, ReturnDocument
from pymongo.database import Database

from config import DAILY_TIP_LIMIT, HISTORY_DEFAULT_LIMIT, HISTORY_MAX_LIMIT, MAX_TIP, MIN_TIP
from utils.errors import BadRequestError, NotFoundError
from utils.mongo_helpers import clamp_limit, clamp_offset, db_datetime, parse_object_id, sanitize_mongo_list
from utils.timezone import ET_TZ, to_et

logger = logging.getLogger(__name__)

TIP_TYPES = ["tip_sent", "tip_received"]
TIP_MESSAGE_MAX = 100

BALANCE_PROJECTION = {
    "coinBalance": 1,
    "lifetimeCoins": 1,
    "dailyLoginStreak": 1,
    "badges": 1,
    "predictionStats": 1,
}


# ============================================================================
# READS
# ============================================================================

def get_balance(db: Database, user_id: ObjectId) -> Dict[str, Any]:
    user = db["users"].find_one({"_id": user_id}, BALANCE_PROJECTION)
    if not user:
        raise NotFoundError("User not found")

    return {
        "success": True,
        "coinBalance": user.get("coinBalance") or 0,
        "lifetimeCoins": user.get("lifetimeCoins") or 0,
        "dailyLoginStreak": user.get("dailyLoginStreak") or 0,
        "badges": user.get("badges") or [],
        "predictionStats": user.get("predictionStats") or {},
    }


def _page(db: Database, query: Dict[str, Any], limit, offset) -> Dict[str, Any]:
    limit = clamp_limit(limit, HISTORY_DEFAULT_LIMIT, HISTORY_MAX_LIMIT)
    offset = clamp_offset(offset)

    transactions = list(
        db["transactions"]
        .find(query)
        .sort("createdAt", DESCENDING)
        .skip(offset)
        .limit(limit)
    )
    total = db["transactions"].count_documents(query)

    return {
        "success": True,
        "transactions": sanitize_mongo_list(transactions),
        "total": total,
        "hasMore": offset + len(transactions) < total,
    }


def get_coin_history(db: Database, user_id: ObjectId, limit: Optional[int] = None, offset: Optional[int] = None) -> Dict[str, Any]:
    """Newest-first page of every ledger entry for the user."""
    return _page(db, {"userId": user_id}, limit, offset)


def _tip_stats(db: Database, user_id: ObjectId) -> Dict[str, Dict[str, int]]:
    pipeline = [
        {"$match": {"userId": user_id, "type": {"$in": TIP_TYPES}}},
        {"$group": {"_id": "$type", "total": {"$sum": {"$abs": "$amount"}}, "count": {"$sum": 1}}},
    ]
    stats = {"sent": {"total": 0, "count": 0}, "received": {"total": 0, "count": 0}}
    for row in db["transactions"].aggregate(pipeline):
        key = "sent" if row["_id"] == "tip_sent" else "received"
        stats[key] = {"total": row["total"], "count": row["count"]}
    return stats


def get_tips_history(
    db: Database,
    user_id: ObjectId,
    kind: Optional[str] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Page of tips sent and/or received plus lifetime totals.

    `kind` is "sent", "received" or anything else for both.
    """
    query: Dict[str, Any] = {"userId": user_id}
    if kind == "sent":
        query["type"] = "tip_sent"
    elif kind == "received":
        query["type"] = "tip_received"
    else:
        query["type"] = {"$in": TIP_TYPES}

    page = _page(db, query, limit, offset)
    page["stats"] = _tip_stats(db, user_id)
    return page


# ============================================================================
# TIPS
# ============================================================================

def _parse_tip_amount(amount: Any) -> int:
    if isinstance(amount, bool):
        amount = None
    try:
        value = int(amount)
    except (TypeError, ValueError):
        value = None
    if value is None or value < MIN_TIP or value > MAX_TIP:
        raise BadRequestError(f"Tip amount must be between {MIN_TIP} and {MAX_TIP} coins")
    return value


def _start_of_et_day(now: datetime) -> datetime:
    local = datetime.combine(to_et(now).date(), time.min, tzinfo=ET_TZ)
    return db_datetime(local)


def _sent_today(db: Database, user_id: ObjectId, now: datetime) -> int:
    pipeline = [
        {"$match": {"userId": user_id, "type": "tip_sent", "createdAt": {"$gte": _start_of_et_day(now)}}},
        {"$group": {"_id": None, "total": {"$sum": {"$abs": "$amount"}}}},
    ]
    rows = list(db["transactions"].aggregate(pipeline))
    return rows[0]["total"] if rows else 0


def send_tip(
    db: Database,
    sender_id: ObjectId,
    recipient_id: Optional[str],
    amount: Any,
    message: Optional[str],
    now: datetime,
) -> Dict[str, Any]:
    """
    Move `amount` coins from the sender to another user.

    Raises:
        BadRequestError: bad recipient or amount, self tip, tips disabled,
            daily limit exceeded, or not enough coins
        NotFoundError: sender or recipient missing
    """
    if not recipient_id:
        raise BadRequestError("Recipient ID required")
    tip = _parse_tip_amount(amount)

    recipient_oid = parse_object_id(recipient_id)
    if recipient_oid is None:
        raise BadRequestError("Invalid recipient ID")
    if recipient_oid == sender_id:
        raise BadRequestError("You can't tip yourself")

    users = db["users"]
    sender = users.find_one({"_id": sender_id})
    if not sender:
        raise NotFoundError("Sender not found")

    recipient = users.find_one({"_id": recipient_oid})
    if not recipient:
        raise NotFoundError("Recipient not found")
    if recipient.get("disableTips"):
        raise BadRequestError("This user is not accepting tips")

    sent_today = _sent_today(db, sender_id, now)
    if sent_today + tip > DAILY_TIP_LIMIT:
        remaining = DAILY_TIP_LIMIT - sent_today
        raise BadRequestError(
            f"Daily tip limit reached. You can send {remaining} more coins today.",
            {"remaining": remaining},
        )

    stamp = db_datetime(now)
    debited = users.find_one_and_update(
        {"_id": sender_id, "coinBalance": {"$gte": tip}},
        {"$inc": {"coinBalance": -tip}, "$set": {"updatedAt": stamp}},
        return_document=ReturnDocument.AFTER,
    )
    if debited is None:
        raise BadRequestError(
            "Not enough coins",
            {"required": tip, "current": sender.get("coinBalance") or 0},
        )

    credited = users.find_one_and_update(
        {"_id": recipient_oid},
        {"$inc": {"coinBalance": tip, "lifetimeCoins": tip}, "$set": {"updatedAt": stamp}},
        return_document=ReturnDocument.AFTER,
    )
    if credited is None:
        users.update_one({"_id": sender_id}, {"$inc": {"coinBalance": tip}})
        logger.error(f"Tip from {sender_id} rolled back, recipient {recipient_oid} vanished")
        raise NotFoundError("Recipient not found")

    username = recipient.get("username")
    description = f"Tip to {username}"
    if message:
        description += f': "{message[:TIP_MESSAGE_MAX]}"'

    db["transactions"].insert_many([
        {
            "userId": sender_id,
            "type": "tip_sent",
            "category": "tip",
            "amount": -tip,
            "balance": debited.get("coinBalance"),
            "description": description,
            "metadata": {"relatedUserId": recipient_oid},
            "createdAt": stamp,
        },
        {
            "userId": recipient_oid,
            "type": "tip_received",
            "category": "tip",
            "amount": tip,
            "balance": credited.get("coinBalance"),
            "description": f"Tip from {sender.get('username')}",
            "metadata": {"relatedUserId": sender_id},
            "createdAt": stamp,
        },
    ])
    logger.info(f"User {sender_id} tipped {recipient_oid} {tip} coins")

    return {
        "success": True,
        "message": f"Successfully tipped {username} {tip} coins!",
        "newBalance": debited.get("coinBalance"),
        "recipientUsername": username,
    }
