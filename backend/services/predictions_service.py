"""
Game Predictions & Leaderboards

One prediction per (user, game), accepted only before kickoff. Uniqueness is
enforced by the store: the write is a single insert-if-absent upsert backed
by the unique (userId, gameId) index created in db/mongo.py.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from config import (
    LEADERBOARD_DEFAULT_LIMIT,
    LEADERBOARD_MAX_LIMIT,
    LEADERBOARD_MIN_SETTLED,
    PREDICTIONS_PAGE_SIZE,
    USER_PREDICTIONS_LIMIT,
)
from utils.errors import AuthError, BadRequestError, NotFoundError
from utils.mongo_helpers import clamp_limit, db_datetime, parse_object_id, sanitize_mongo_doc, sanitize_mongo_list
from utils.timezone import parse_iso

logger = logging.getLogger(__name__)

SETTLED_STATUSES = ["won", "lost"]
DUPLICATE_PREDICTION = "You already made a prediction for this game"


# ============================================================================
# READS
# ============================================================================

def list_upcoming_games(db: Database, now: datetime) -> Dict[str, Any]:
    games = (
        db["games"]
        .find({"gameDate": {"$gte": db_datetime(now)}, "status": "scheduled"})
        .sort("gameDate", ASCENDING)
        .limit(PREDICTIONS_PAGE_SIZE)
    )
    return {"success": True, "games": sanitize_mongo_list(list(games))}


def list_results(db: Database) -> Dict[str, Any]:
    games = (
        db["games"]
        .find({"status": "final"})
        .sort("gameDate", DESCENDING)
        .limit(PREDICTIONS_PAGE_SIZE)
    )
    return {"success": True, "games": sanitize_mongo_list(list(games))}


def list_user_predictions(db: Database, user_id: ObjectId) -> Dict[str, Any]:
    """A user's latest predictions, each joined with its game."""
    predictions = list(
        db["predictions"]
        .find({"userId": user_id})
        .sort("createdAt", DESCENDING)
        .limit(USER_PREDICTIONS_LIMIT)
    )

    game_ids = list({p["gameId"] for p in predictions if p.get("gameId") is not None})
    games = {g["_id"]: g for g in db["games"].find({"_id": {"$in": game_ids}})} if game_ids else {}

    for prediction in predictions:
        prediction["game"] = games.get(prediction.get("gameId"))

    return {"success": True, "predictions": sanitize_mongo_list(predictions)}


def get_predictions(db: Database, kind: Optional[str], user_id: Optional[ObjectId], now: datetime) -> Dict[str, Any]:
    kind = kind or "upcoming"
    if kind == "upcoming":
        return list_upcoming_games(db, now)
    if kind == "results":
        return list_results(db)
    if kind == "user":
        if user_id is None:
            raise AuthError("Not authenticated")
        return list_user_predictions(db, user_id)
    raise BadRequestError("Invalid type parameter")


# ============================================================================
# WRITE
# ============================================================================

def create_prediction(
    db: Database,
    user_id: ObjectId,
    game_id: Optional[str],
    predicted_winner: Optional[str],
    now: datetime,
) -> Dict[str, Any]:
    """
    Record a user's pick for a game.

    Raises:
        BadRequestError: missing fields, game already started, team not in
            the game, or a prediction for this game already exists
        NotFoundError: no such game
    """
    if not game_id or not predicted_winner:
        raise BadRequestError("Game ID and predicted winner required")

    game_oid = parse_object_id(game_id)
    if game_oid is None:
        raise BadRequestError("Invalid game ID")

    game = db["games"].find_one({"_id": game_oid})
    if not game:
        raise NotFoundError("Game not found")

    game_date = parse_iso(game.get("gameDate"))
    if game_date is None or now >= game_date:
        raise BadRequestError("Game has already started. Predictions are closed.")

    if predicted_winner not in (game.get("homeTeam"), game.get("awayTeam")):
        raise BadRequestError("Invalid team selection")

    fields = {
        "predictedWinner": predicted_winner,
        "status": "pending",
        "coinsWon": 0,
        "createdAt": db_datetime(now),
    }
    try:
        result = db["predictions"].update_one(
            {"userId": user_id, "gameId": game_oid},
            {"$setOnInsert": fields},
            upsert=True,
        )
    except DuplicateKeyError:
        # Lost a race with a concurrent insert for the same key
        raise BadRequestError(DUPLICATE_PREDICTION)

    if result.upserted_id is None:
        raise BadRequestError(DUPLICATE_PREDICTION)

    db["users"].update_one({"_id": user_id}, {"$inc": {"predictionStats.totalPredictions": 1}})
    logger.info(f"User {user_id} predicted {predicted_winner} for game {game_oid}")

    prediction = {"_id": result.upserted_id, "userId": user_id, "gameId": game_oid, **fields}
    return {
        "success": True,
        "message": "Prediction submitted!",
        "prediction": sanitize_mongo_doc(prediction),
    }


# ============================================================================
# LEADERBOARDS
# ============================================================================

def _accuracy_leaderboard(db: Database, limit: int) -> List[Dict[str, Any]]:
    pipeline = [
        {"$match": {"status": {"$in": SETTLED_STATUSES}}},
        {"$group": {
            "_id": "$userId",
            "total": {"$sum": 1},
            "correct": {"$sum": {"$cond": [{"$eq": ["$status", "won"]}, 1, 0]}},
        }},
        {"$match": {"total": {"$gte": LEADERBOARD_MIN_SETTLED}}},
        {"$addFields": {"accuracy": {"$divide": ["$correct", "$total"]}}},
        {"$sort": {"accuracy": -1, "correct": -1}},
        {"$limit": limit},
        {"$lookup": {"from": "users", "localField": "_id", "foreignField": "_id", "as": "user"}},
    ]

    leaderboard = []
    for idx, row in enumerate(db["predictions"].aggregate(pipeline)):
        user = row["user"][0] if row.get("user") else {}
        leaderboard.append({
            "rank": idx + 1,
            "userId": str(row["_id"]),
            "username": user.get("username"),
            "correct": row["correct"],
            "total": row["total"],
            "accuracy": round(row["accuracy"], 4),
        })
    return leaderboard


def _field_leaderboard(db: Database, field: str, limit: int) -> List[Dict[str, Any]]:
    users = (
        db["users"]
        .find({field: {"$gt": 0}, "isBot": {"$ne": True}}, {"username": 1, field: 1})
        .sort(field, DESCENDING)
        .limit(limit)
    )
    return [
        {"rank": idx + 1, "username": user.get("username"), field: user.get(field)}
        for idx, user in enumerate(users)
    ]


def get_leaderboard(db: Database, kind: Optional[str], limit: Optional[int]) -> Dict[str, Any]:
    kind = kind or "predictions"
    limit = clamp_limit(limit, LEADERBOARD_DEFAULT_LIMIT, LEADERBOARD_MAX_LIMIT)

    if kind == "predictions":
        leaderboard = _accuracy_leaderboard(db, limit)
    elif kind == "coins":
        leaderboard = _field_leaderboard(db, "coinBalance", limit)
    elif kind == "streak":
        leaderboard = _field_leaderboard(db, "dailyLoginStreak", limit)
    else:
        raise BadRequestError("Invalid leaderboard type")

    return {"success": True, "type": kind, "leaderboard": leaderboard}
