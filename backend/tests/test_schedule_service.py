from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from core.sports_models import HomeGame, ScheduleEntry, ScoreEntry
from integrations.espn_api import ESPNApiError
from services import schedule_service
from utils.errors import BadRequestError, ConfigError

NOW = datetime(2025, 1, 15, 17, 0, tzinfo=timezone.utc)


def _entry(team, sport, date):
    return ScheduleEntry(sport=sport, team=team, teamColor="#000", opponent="TBD", isHome=True, date=date)


def _score(team, sport, date):
    return ScoreEntry(sport=sport, team=team, teamColor="#000", homeTeam="PHI", homeScore="3",
                      awayTeam="NYR", awayScore="2", isHome=True, date=date)


class TestUpcomingSchedule:
    @patch("services.schedule_service.espn_api")
    def test_merges_sorts_and_windows(self, mock_espn):
        def parse(events, team, now):
            return {
                "Eagles": [_entry("Eagles", "NFL", "2025-01-19T20:00Z")],
                "76ers": [_entry("76ers", "NBA", "2025-01-16T00:00Z"),
                          _entry("76ers", "NBA", "2025-02-20T00:00Z")],
            }.get(team.name, [])

        mock_espn.parse_schedule_events.side_effect = parse
        body = schedule_service.get_upcoming_schedule(None, 10, NOW)

        assert [g["team"] for g in body["schedule"]] == ["76ers", "Eagles"]
        assert body["count"] == 2
        assert body["errors"] == []

    @patch("services.schedule_service.espn_api")
    def test_team_failure_is_partial(self, mock_espn):
        def fetch(team):
            if team.name == "Flyers":
                raise ESPNApiError("ESPN API error: 500", 500)
            return []

        mock_espn.fetch_team_schedule.side_effect = fetch
        mock_espn.parse_schedule_events.return_value = []
        body = schedule_service.get_upcoming_schedule(None, 10, NOW)

        assert body["schedule"] == []
        assert body["errors"] == [{"source": "flyers", "error": "ESPN API error: 500"}]


class TestHomeGames:
    def test_rejects_unknown_team(self):
        with pytest.raises(BadRequestError) as exc_info:
            schedule_service.get_philly_home_games("union", 60, NOW)
        assert "eagles, phillies, sixers, flyers" in exc_info.value.message

    @patch("services.schedule_service.espn_api")
    def test_only_future_home_games(self, mock_espn):
        def game(game_id, date, is_home, status="pre"):
            return HomeGame(id=game_id, team="sixers", teamName="76ers", eventTitle="", opponent="BOS",
                            date=date, venue="Wells Fargo Center", isHome=is_home, status=status,
                            gameId=game_id, espnId=game_id)

        mock_espn.parse_home_games.return_value = [
            game("1", "2025-01-20T00:00Z", True),
            game("2", "2025-01-21T00:00Z", False),
            game("3", "2025-01-10T00:00Z", True),
            game("4", "2025-06-01T00:00Z", True),
        ]
        body = schedule_service.get_philly_home_games("76ers", 60, NOW)
        assert [g["id"] for g in body["games"]] == ["1"]
        mock_espn.fetch_team_schedule.assert_called_once()


class TestRecentScores:
    def test_requires_key(self):
        with pytest.raises(ConfigError):
            schedule_service.get_recent_scores(None, NOW)

    @patch("services.schedule_service.espn_api")
    def test_drops_stale_and_filters_team(self, mock_espn, env):
        env.setenv("SPORTSDATA_API_KEY", "sd-key")

        def latest(events, team):
            return {
                "Flyers": _score("Flyers", "NHL", "2025-01-15T00:00Z"),
                "76ers": _score("76ers", "NBA", "2025-01-14T23:00Z"),
                "Eagles": _score("Eagles", "NFL", "2025-01-05T20:00Z"),
            }.get(team.name)

        mock_espn.latest_completed_game.side_effect = latest

        body = schedule_service.get_recent_scores(None, NOW)
        assert [s["team"] for s in body["scores"]] == ["Flyers", "76ers"]

        body = schedule_service.get_recent_scores("eagles", NOW)
        assert body["scores"] == []

    @patch("services.schedule_service.sportsdata_api")
    @patch("services.schedule_service.espn_api")
    def test_college_final_read_as_eastern(self, mock_espn, mock_sd, env):
        env.setenv("SPORTSDATA_API_KEY", "sd-key")
        mock_espn.latest_completed_game.return_value = None
        mock_sd.fetch_team_schedule.return_value = [
            {"GameID": 7, "Status": "Final", "DateTime": "2025-01-11T12:00:00", "HomeTeam": "VILL",
             "AwayTeam": "UCONN", "HomeTeamScore": 60, "AwayTeamScore": 58},
            {"GameID": 8, "Status": "Final", "DateTime": "2025-01-14T19:00:00", "HomeTeam": "SETON",
             "AwayTeam": "VILL", "HomeScore": 70, "AwayScore": 74},
            {"GameID": 9, "Status": "Scheduled", "DateTime": "2025-01-18T12:00:00", "HomeTeam": "VILL",
             "AwayTeam": "XAV"},
        ]

        body = schedule_service.get_recent_scores("villanova", NOW)

        assert [s["team"] for s in body["scores"]] == ["Villanova"]
        score = body["scores"][0]
        assert score["date"] == "2025-01-15T00:00:00Z"
        assert score["homeScore"] == "70"
        assert score["awayScore"] == "74"
        assert score["isHome"] is False
