"""
Prediction endpoints
====================

Covers the game-start cutoff, one prediction per (user, game) and the
accuracy leaderboard threshold.
"""
from datetime import datetime, timezone

import pytest
from bson import ObjectId

from conftest import auth_headers

KICKOFF = datetime(2025, 1, 1, 0, 0)  # stored naive UTC


@pytest.fixture
def game_id(mongo_db):
    doc = {
        "_id": ObjectId(),
        "homeTeam": "Eagles",
        "awayTeam": "Cowboys",
        "gameDate": KICKOFF,
        "status": "scheduled",
        "sport": "NFL",
    }
    mongo_db["games"].insert_one(doc)
    return str(doc["_id"])


class TestGameStartCutoff:
    def test_before_kickoff_accepted(self, client, clock, make_user, game_id):
        clock.now = datetime(2024, 12, 31, tzinfo=timezone.utc)
        user = make_user()

        response = client.post(
            "/api/predictions",
            json={"gameId": game_id, "predictedWinner": "Eagles"},
            headers=auth_headers(user),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["prediction"]["status"] == "pending"
        assert body["prediction"]["gameId"] == game_id

    def test_rejected_at_kickoff(self, client, clock, make_user, game_id, mongo_db):
        clock.now = datetime(2025, 1, 1, 0, 0, tzinfo=timezone.utc)

        response = client.post(
            "/api/predictions",
            json={"gameId": game_id, "predictedWinner": "Eagles"},
            headers=auth_headers(make_user()),
        )

        assert response.status_code == 400
        assert mongo_db["predictions"].count_documents({}) == 0

    def test_after_kickoff_rejected(self, client, clock, make_user, game_id, mongo_db):
        clock.now = datetime(2025, 1, 2, tzinfo=timezone.utc)
        user = make_user()

        response = client.post(
            "/api/predictions",
            json={"gameId": game_id, "predictedWinner": "Eagles"},
            headers=auth_headers(user),
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Game has already started. Predictions are closed."}
        assert mongo_db["predictions"].count_documents({}) == 0


class TestSubmitValidation:
    @pytest.fixture(autouse=True)
    def before_kickoff(self, clock):
        clock.now = datetime(2024, 12, 30, tzinfo=timezone.utc)

    def test_duplicate_rejected_single_document(self, client, make_user, game_id, mongo_db):
        user = make_user()
        payload = {"gameId": game_id, "predictedWinner": "Eagles"}

        first = client.post("/api/predictions", json=payload, headers=auth_headers(user))
        second = client.post(
            "/api/predictions",
            json={"gameId": game_id, "predictedWinner": "Cowboys"},
            headers=auth_headers(user),
        )

        assert first.status_code == 201
        assert second.status_code == 400
        assert "already made a prediction" in second.json()["error"]
        assert mongo_db["predictions"].count_documents({"userId": user, "gameId": ObjectId(game_id)}) == 1
        assert mongo_db["users"].find_one({"_id": user})["predictionStats"]["totalPredictions"] == 1

    def test_team_must_be_in_game(self, client, make_user, game_id):
        response = client.post(
            "/api/predictions",
            json={"gameId": game_id, "predictedWinner": "Giants"},
            headers=auth_headers(make_user()),
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid team selection"

    def test_missing_fields(self, client, make_user):
        response = client.post("/api/predictions", json={}, headers=auth_headers(make_user()))
        assert response.status_code == 400
        assert response.json()["error"] == "Game ID and predicted winner required"

    def test_unknown_game(self, client, make_user):
        response = client.post(
            "/api/predictions",
            json={"gameId": str(ObjectId()), "predictedWinner": "Eagles"},
            headers=auth_headers(make_user()),
        )
        assert response.status_code == 404

    def test_malformed_game_id(self, client, make_user):
        response = client.post(
            "/api/predictions",
            json={"gameId": "not-an-id", "predictedWinner": "Eagles"},
            headers=auth_headers(make_user()),
        )
        assert response.status_code == 400

    def test_requires_auth(self, client, game_id):
        response = client.post("/api/predictions", json={"gameId": game_id, "predictedWinner": "Eagles"})
        assert response.status_code == 401
        assert response.json() == {"error": "Not authenticated"}


class TestListing:
    def test_upcoming_only_future_scheduled(self, client, clock, mongo_db, game_id):
        clock.now = datetime(2024, 12, 30, tzinfo=timezone.utc)
        mongo_db["games"].insert_one({"homeTeam": "A", "awayTeam": "B", "gameDate": datetime(2024, 12, 1),
                                      "status": "scheduled"})

        body = client.get("/api/predictions").json()
        assert [g["_id"] for g in body["games"]] == [game_id]
        assert body["games"][0]["gameDate"] == "2025-01-01T00:00:00Z"

    def test_user_predictions_joined_with_game(self, client, clock, make_user, game_id):
        clock.now = datetime(2024, 12, 30, tzinfo=timezone.utc)
        user = make_user()
        client.post("/api/predictions", json={"gameId": game_id, "predictedWinner": "Eagles"},
                    headers=auth_headers(user))

        body = client.get("/api/predictions?type=user", headers=auth_headers(user)).json()
        assert len(body["predictions"]) == 1
        assert body["predictions"][0]["game"]["homeTeam"] == "Eagles"

    def test_user_type_requires_auth(self, client):
        assert client.get("/api/predictions?type=user").status_code == 401

    def test_user_type_rejects_bad_token(self, client):
        response = client.get("/api/predictions?type=user", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid token"}

    def test_upcoming_ignores_bad_token(self, client):
        response = client.get("/api/predictions", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 200

    def test_invalid_type(self, client):
        response = client.get("/api/predictions?type=everything")
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid type parameter"}


class TestLeaderboard:
    def _settle(self, mongo_db, user, won, lost):
        for i in range(won + lost):
            mongo_db["predictions"].insert_one({
                "userId": user,
                "gameId": ObjectId(),
                "predictedWinner": "Eagles",
                "status": "won" if i < won else "lost",
                "coinsWon": 0,
            })

    def test_minimum_five_settled(self, client, mongo_db, make_user):
        four = make_user("four")
        five = make_user("five")
        self._settle(mongo_db, four, won=4, lost=0)
        self._settle(mongo_db, five, won=3, lost=2)
        mongo_db["predictions"].insert_one({"userId": four, "gameId": ObjectId(), "status": "pending"})

        body = client.get("/api/predictions/leaderboard?type=predictions").json()

        assert [row["username"] for row in body["leaderboard"]] == ["five"]
        row = body["leaderboard"][0]
        assert row["rank"] == 1
        assert row["correct"] == 3
        assert row["total"] == 5
        assert row["accuracy"] == 0.6

    def test_sorted_by_accuracy_then_correct(self, client, mongo_db, make_user):
        a = make_user("a")
        b = make_user("b")
        c = make_user("c")
        self._settle(mongo_db, a, won=3, lost=2)   # 0.6
        self._settle(mongo_db, b, won=8, lost=2)   # 0.8
        self._settle(mongo_db, c, won=4, lost=1)   # 0.8, fewer correct

        body = client.get("/api/predictions/leaderboard").json()
        assert [row["username"] for row in body["leaderboard"]] == ["b", "c", "a"]
        assert [row["rank"] for row in body["leaderboard"]] == [1, 2, 3]

    def test_coins_excludes_bots_and_zero(self, client, make_user):
        make_user("rich", coinBalance=900)
        make_user("bot", coinBalance=5000, isBot=True)
        make_user("broke", coinBalance=0)
        make_user("middle", coinBalance=300)

        body = client.get("/api/predictions/leaderboard?type=coins").json()
        assert [row["username"] for row in body["leaderboard"]] == ["rich", "middle"]
        assert body["leaderboard"][0]["coinBalance"] == 900

    def test_streak_excludes_bots_and_zero(self, client, make_user):
        make_user("a", dailyLoginStreak=4)
        make_user("b", dailyLoginStreak=12)
        make_user("bot", dailyLoginStreak=99, isBot=True)
        make_user("lapsed", dailyLoginStreak=0)

        body = client.get("/api/predictions/leaderboard?type=streak").json()
        assert body["type"] == "streak"
        assert [row["username"] for row in body["leaderboard"]] == ["b", "a"]
        assert body["leaderboard"][0]["dailyLoginStreak"] == 12

    def test_invalid_type(self, client):
        assert client.get("/api/predictions/leaderboard?type=karma").status_code == 400
