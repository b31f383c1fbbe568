"""
Coin ledger and tips endpoints
"""
from datetime import datetime, timedelta

import pytest
from bson import ObjectId

from conftest import auth_headers


def _seed_transactions(mongo_db, user, count, start=datetime(2025, 1, 1)):
    mongo_db["transactions"].insert_many([
        {"userId": user, "type": "earn", "amount": 5, "createdAt": start + timedelta(minutes=i)}
        for i in range(count)
    ])


class TestBalance:
    def test_balance(self, client, make_user):
        user = make_user(coinBalance=120, lifetimeCoins=400, dailyLoginStreak=3, badges=["early"])
        body = client.get("/api/coins/balance", headers=auth_headers(user)).json()
        assert body == {
            "success": True,
            "coinBalance": 120,
            "lifetimeCoins": 400,
            "dailyLoginStreak": 3,
            "badges": ["early"],
            "predictionStats": {},
        }

    def test_unknown_user(self, client):
        response = client.get("/api/coins/balance", headers=auth_headers(ObjectId()))
        assert response.status_code == 404
        assert response.json() == {"error": "User not found"}


class TestHistoryPagination:
    def test_limit_and_offset(self, client, mongo_db, make_user):
        user = make_user()
        _seed_transactions(mongo_db, user, 35)

        body = client.get("/api/coins/history?limit=10&offset=20", headers=auth_headers(user)).json()

        assert len(body["transactions"]) == 10
        assert body["total"] == 35
        assert body["hasMore"] is True  # 20 + 10 < 35

    def test_last_page(self, client, mongo_db, make_user):
        user = make_user()
        _seed_transactions(mongo_db, user, 35)

        body = client.get("/api/coins/history?limit=10&offset=30", headers=auth_headers(user)).json()
        assert len(body["transactions"]) == 5
        assert body["hasMore"] is False

    def test_newest_first(self, client, mongo_db, make_user):
        user = make_user()
        _seed_transactions(mongo_db, user, 3)

        body = client.get("/api/coins/history", headers=auth_headers(user)).json()
        dates = [t["createdAt"] for t in body["transactions"]]
        assert dates == sorted(dates, reverse=True)

    def test_limit_clamped_to_100(self, client, mongo_db, make_user):
        user = make_user()
        _seed_transactions(mongo_db, user, 120)

        body = client.get("/api/coins/history?limit=500", headers=auth_headers(user)).json()
        assert len(body["transactions"]) == 100
        assert body["hasMore"] is True

    def test_only_own_transactions(self, client, mongo_db, make_user):
        user = make_user()
        _seed_transactions(mongo_db, make_user("other"), 4)
        body = client.get("/api/coins/history", headers=auth_headers(user)).json()
        assert body["total"] == 0


class TestSendTip:
    @pytest.fixture
    def pair(self, make_user):
        sender = make_user("sender", coinBalance=600)
        recipient = make_user("recipient", coinBalance=10, lifetimeCoins=10)
        return sender, recipient

    def _send(self, client, sender, recipient, amount, message=None):
        return client.post(
            "/api/tips/send",
            json={"recipientId": str(recipient), "amount": amount, "message": message},
            headers=auth_headers(sender),
        )

    def test_moves_coins_and_logs_both_sides(self, client, mongo_db, pair):
        sender, recipient = pair

        response = self._send(client, sender, recipient, 50, "great take")

        assert response.status_code == 200
        body = response.json()
        assert body["newBalance"] == 550
        assert body["recipientUsername"] == "recipient"
        assert mongo_db["users"].find_one({"_id": recipient})["coinBalance"] == 60
        assert mongo_db["users"].find_one({"_id": recipient})["lifetimeCoins"] == 60

        sent = mongo_db["transactions"].find_one({"userId": sender})
        received = mongo_db["transactions"].find_one({"userId": recipient})
        assert sent["type"] == "tip_sent" and sent["amount"] == -50
        assert 'great take' in sent["description"]
        assert received["type"] == "tip_received" and received["amount"] == 50

    @pytest.mark.parametrize("amount", [4, 501, "lots", None])
    def test_amount_bounds(self, client, pair, amount):
        sender, recipient = pair
        response = self._send(client, sender, recipient, amount)
        assert response.status_code == 400
        assert response.json()["error"] == "Tip amount must be between 5 and 500 coins"

    def test_no_self_tip(self, client, pair):
        sender, _ = pair
        response = self._send(client, sender, sender, 10)
        assert response.status_code == 400

    def test_recipient_opted_out(self, client, mongo_db, pair):
        sender, recipient = pair
        mongo_db["users"].update_one({"_id": recipient}, {"$set": {"disableTips": True}})
        response = self._send(client, sender, recipient, 10)
        assert response.json()["error"] == "This user is not accepting tips"

    def test_not_enough_coins(self, client, make_user, pair):
        _, recipient = pair
        poor = make_user("poor", coinBalance=20)
        response = self._send(client, poor, recipient, 25)
        assert response.status_code == 400
        assert response.json() == {"error": "Not enough coins", "required": 25, "current": 20}

    def test_daily_limit(self, client, mongo_db, clock, pair):
        sender, recipient = pair
        mongo_db["transactions"].insert_one({
            "userId": sender, "type": "tip_sent", "amount": -990,
            "createdAt": clock.now.replace(tzinfo=None) - timedelta(hours=1),
        })
        response = self._send(client, sender, recipient, 20)
        assert response.status_code == 400
        assert response.json()["remaining"] == 10

    def test_unknown_recipient(self, client, pair):
        sender, _ = pair
        response = self._send(client, sender, ObjectId(), 10)
        assert response.status_code == 404


class TestTipsHistory:
    def test_filter_and_stats(self, client, mongo_db, make_user):
        user = make_user()
        mongo_db["transactions"].insert_many([
            {"userId": user, "type": "tip_sent", "amount": -20, "createdAt": datetime(2025, 1, 1)},
            {"userId": user, "type": "tip_sent", "amount": -5, "createdAt": datetime(2025, 1, 2)},
            {"userId": user, "type": "tip_received", "amount": 40, "createdAt": datetime(2025, 1, 3)},
            {"userId": user, "type": "earn", "amount": 10, "createdAt": datetime(2025, 1, 4)},
        ])

        both = client.get("/api/tips/history", headers=auth_headers(user)).json()
        assert both["total"] == 3
        assert both["stats"] == {"sent": {"total": 25, "count": 2}, "received": {"total": 40, "count": 1}}

        sent = client.get("/api/tips/history?type=sent", headers=auth_headers(user)).json()
        assert [t["amount"] for t in sent["transactions"]] == [-5, -20]
