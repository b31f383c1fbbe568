"""
Shared fixtures: an in-memory Mongo database, a fixed request clock and
signed session tokens.
"""
from datetime import datetime, timezone
from unittest.mock import Mock

import mongomock
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from db.mongo import ensure_indexes, get_db
from main import app
from middleware.auth import create_access_token
from utils.timezone import get_request_time

TEST_JWT_SECRET = "phillysports-test-signing-secret-0001"


@pytest.fixture(autouse=True)
def env(monkeypatch):
    """Known secrets; provider keys unset unless a test sets them."""
    monkeypatch.setenv("JWT_SECRET", TEST_JWT_SECRET)
    for name in ("SPORTSDATA_API_KEY", "YOUTUBE_API_KEY", "PUSHER_KEY", "PUSHER_CLUSTER",
                 "EBAY_VERIFICATION_TOKEN", "EBAY_WEBHOOK_ENDPOINT"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def mongo_db():
    database = mongomock.MongoClient().db
    ensure_indexes(database)
    return database


class Clock:
    def __init__(self, now: datetime):
        self.now = now


@pytest.fixture
def clock():
    return Clock(datetime(2025, 1, 15, 17, 0, tzinfo=timezone.utc))


@pytest.fixture
def client(mongo_db, clock):
    app.dependency_overrides[get_db] = lambda: mongo_db
    app.dependency_overrides[get_request_time] = lambda: clock.now
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(mongo_db):
    def _make_user(username="fan", **fields):
        doc = {"_id": ObjectId(), "username": username, "coinBalance": 0, "lifetimeCoins": 0}
        doc.update(fields)
        mongo_db["users"].insert_one(doc)
        return doc["_id"]
    return _make_user


def auth_headers(user_id) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


def mock_response(payload=None, status_code=200):
    """Stand-in for a requests.Response."""
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.json.return_value = payload
    return response
