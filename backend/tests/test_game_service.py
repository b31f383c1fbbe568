from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from core.sport_config import League
from core.sports_models import NormalizedGame, TeamSide
from integrations.sportsdata_api import SportsDataApiError
from services import game_service
from utils.errors import BadRequestError, NotFoundError

NOW = datetime(2025, 1, 15, 17, 0, tzinfo=timezone.utc)

SCORE = {
    "GameID": 18001,
    "Status": "Final",
    "DateTime": "2025-01-12T16:30:00",
    "HomeTeam": "PHI",
    "AwayTeam": "GB",
    "HomeScore": 22,
    "AwayScore": 10,
}


def test_format_team_stats():
    stats = {"Games": 17, "Score": 463, "OffensiveYards": 6452, "PassingYards": 0}
    formatted = game_service.format_team_stats(stats, League.NFL)
    assert formatted["pointsPerGame"] == "27.2"
    assert formatted["passingYardsPerGame"] is None
    assert game_service.format_team_stats(None, League.NFL) is None


def test_summarize_injuries_caps_per_team():
    injuries = [{"Team": "PHI", "Name": f"P{i}", "Status": "Out"} for i in range(8)]
    summary = game_service.summarize_injuries(injuries, "PHI", "GB")
    assert len(summary["home"]) == 5
    assert summary["away"] == []


class TestGameDetail:
    def test_unsupported_sport(self):
        with pytest.raises(BadRequestError):
            game_service.get_game_detail("1", "cricket", None, NOW)

    @patch("services.game_service.sportsdata_api")
    def test_enriched_game_with_partial_failure(self, mock_sd, env):
        env.setenv("SPORTSDATA_API_KEY", "sd-key")
        from integrations import sportsdata_api as real

        mock_sd.fetch_score.return_value = SCORE
        mock_sd.transform_game.side_effect = real.transform_game
        mock_sd.extract_box_score.side_effect = real.extract_box_score
        mock_sd.fetch_game_odds_by_game.return_value = [{"HomePointSpread": -4.5, "Sportsbook": "Consensus"}]
        mock_sd.fetch_standings.return_value = [{"Team": "PHI", "Wins": 14, "Losses": 3}]
        mock_sd.fetch_team_season_stats.side_effect = SportsDataApiError("SportsDataIO API error: 500", 500)
        mock_sd.fetch_injuries.return_value = None
        mock_sd.fetch_box_score.return_value = {"Game": {"HomeTeamTotalYards": 410}}

        body = game_service.get_game_detail("18001", "nfl", None, NOW)
        game = body["game"]

        assert game["id"] == "18001"
        assert game["odds"]["spread"] == -4.5
        assert game["homeTeam"]["record"]["wins"] == 14
        assert game["awayTeam"]["record"] is None
        assert game["homeTeam"]["seasonStats"] is None
        assert game["injuries"] is None
        assert game["boxScore"]["home"]["totalYards"] == 410
        assert body["errors"] == [{"source": "teamStats", "error": "SportsDataIO API error: 500"}]

    @patch("services.game_service.sportsdata_api")
    def test_scheduled_game_skips_box_score(self, mock_sd):
        from integrations import sportsdata_api as real

        mock_sd.fetch_score.return_value = dict(SCORE, Status="Scheduled")
        mock_sd.transform_game.side_effect = real.transform_game
        mock_sd.extract_box_score.side_effect = real.extract_box_score
        mock_sd.fetch_game_odds_by_game.return_value = None
        mock_sd.fetch_standings.return_value = None
        mock_sd.fetch_team_season_stats.return_value = None
        mock_sd.fetch_injuries.return_value = None

        body = game_service.get_game_detail("18001", "nfl", None, NOW)
        mock_sd.fetch_box_score.assert_not_called()
        assert body["game"]["boxScore"] is None

    @patch("services.game_service.sportsdata_api")
    def test_unknown_game(self, mock_sd):
        mock_sd.fetch_score.return_value = None
        mock_sd.fetch_box_score.return_value = None
        with pytest.raises(NotFoundError):
            game_service.get_game_detail("999", "nfl", None, NOW)


class TestEspnSource:
    @patch("services.game_service.espn_api")
    def test_espn_game(self, mock_espn):
        mock_espn.fetch_game_summary.return_value = NormalizedGame(
            id="402", sport="NFL", homeTeam=TeamSide(abbr="PHI"), awayTeam=TeamSide(abbr="LAR"), source="espn"
        )
        body = game_service.get_game_detail("402", "nfl", "espn", NOW)
        assert body["game"]["source"] == "espn"

    @patch("services.game_service.espn_api")
    def test_espn_not_found_carries_context(self, mock_espn):
        mock_espn.fetch_game_summary.return_value = None
        with pytest.raises(NotFoundError) as exc_info:
            game_service.get_game_detail("402", "nfl", "espn", NOW)
        assert exc_info.value.to_dict() == {"error": "Game not found in ESPN", "gameId": "402", "sport": "NFL"}
