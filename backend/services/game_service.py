"""
Game Detail Service

Builds a single-game view: ESPN summary, or a SportsDataIO game enriched in
parallel with odds, standings records, team season stats, injuries and (once
the game has started) the box score.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.sport_config import PRO_LEAGUES, SPORTSDATA_LEAGUES, League, get_standings_season, normalize_sport
from core.sports_models import GameOddsSummary
from core.standings import find_team_record
from integrations import espn_api, sportsdata_api
from integrations.normalization import NormalizationError
from services.aggregation import fan_out
from utils.errors import BadRequestError, NotFoundError

logger = logging.getLogger(__name__)

INJURIES_PER_TEAM = 5

# output key -> (provider field, kind, decimals)
#   per_game: total / Games, pct: ratio * 100, value: as-is rounded, raw: untouched
TEAM_STAT_FORMATS = {
    "NFL": [
        ("pointsPerGame", "Score", "per_game", 1),
        ("yardsPerGame", "OffensiveYards", "per_game", 1),
        ("passingYardsPerGame", "PassingYards", "per_game", 1),
        ("rushingYardsPerGame", "RushingYards", "per_game", 1),
        ("pointsAllowedPerGame", "OpponentScore", "per_game", 1),
    ],
    "NBA": [
        ("pointsPerGame", "Points", "per_game", 1),
        ("reboundsPerGame", "Rebounds", "per_game", 1),
        ("assistsPerGame", "Assists", "per_game", 1),
        ("fieldGoalPct", "FieldGoalsPercentage", "pct", 1),
        ("threePointPct", "ThreePointersPercentage", "pct", 1),
    ],
    "MLB": [
        ("runsPerGame", "Runs", "per_game", 2),
        ("battingAverage", "BattingAverage", "value", 3),
        ("era", "EarnedRunAverage", "value", 2),
        ("homeRuns", "HomeRuns", "raw", 0),
    ],
    "NHL": [
        ("goalsPerGame", "Goals", "per_game", 2),
        ("goalsAgainstPerGame", "GoalsAgainst", "per_game", 2),
        ("powerPlayPct", "PowerPlayPercentage", "pct", 1),
        ("penaltyKillPct", "PenaltyKillPercentage", "pct", 1),
    ],
}


def format_team_stats(stats: Optional[Dict[str, Any]], league: League) -> Optional[Dict[str, Any]]:
    if not stats:
        return None
    formats = TEAM_STAT_FORMATS.get(league.value)
    if not formats:
        return None

    games = stats.get("Games") or 1
    formatted = {}
    for key, field, kind, decimals in formats:
        value = stats.get(field)
        if not value:
            formatted[key] = None
        elif kind == "per_game":
            formatted[key] = f"{value / games:.{decimals}f}"
        elif kind == "pct":
            formatted[key] = f"{value * 100:.{decimals}f}"
        elif kind == "value":
            formatted[key] = f"{value:.{decimals}f}"
        else:
            formatted[key] = value
    return formatted


def summarize_game_odds(quotes: Optional[List[Dict[str, Any]]]) -> Optional[GameOddsSummary]:
    """First quote of GameOddsByGameID, or None when there are none."""
    if not quotes:
        return None
    odds = quotes[0]
    return GameOddsSummary(
        spread=odds.get("HomePointSpread"),
        overUnder=odds.get("OverUnder"),
        homeMoneyLine=odds.get("HomeMoneyLine"),
        awayMoneyLine=odds.get("AwayMoneyLine"),
        sportsbook=odds.get("Sportsbook"),
    )


def summarize_injuries(injuries: Optional[List[Dict[str, Any]]], home: str, away: str) -> Optional[Dict[str, Any]]:
    if injuries is None:
        return None

    def for_team(abbr):
        return [
            {
                "player": i.get("Name"),
                "position": i.get("Position"),
                "status": i.get("Status"),
                "injury": i.get("BodyPart"),
            }
            for i in injuries if i.get("Team") == abbr
        ][:INJURIES_PER_TEAM]

    return {"home": for_team(home), "away": for_team(away)}


def _season_stats(rows: Optional[List[Dict[str, Any]]], abbr: str, league: League):
    row = next((r for r in rows or [] if r.get("Team") == abbr), None)
    return format_team_stats(row, league)


def _fetch_base_game(league: League, game_id: str) -> Optional[Dict[str, Any]]:
    """Score feed first; the BoxScore feed covers games the Score feed misses."""
    game = sportsdata_api.fetch_score(league, game_id)
    if game:
        return game
    box = sportsdata_api.fetch_box_score(league, game_id)
    if box:
        return box.get("Game") or box
    return None


def get_espn_game(game_id: str, sport: Optional[str]) -> Dict[str, Any]:
    league = normalize_sport(sport, PRO_LEAGUES, default=League.NFL)
    game = espn_api.fetch_game_summary(league, game_id)
    if game is None:
        raise NotFoundError("Game not found in ESPN", {"gameId": game_id, "sport": league.value})
    return {"success": True, "game": game.model_dump(), "errors": []}


def get_game_detail(game_id: str, sport: Optional[str], source: Optional[str], now: datetime) -> Dict[str, Any]:
    """
    Single-game detail.

    Raises:
        BadRequestError: missing id or unsupported sport
        ConfigError: SportsDataIO key missing (SportsDataIO source only)
        NotFoundError: neither feed knows the game
    """
    if not game_id:
        raise BadRequestError("Game ID is required")

    if source == "espn":
        return get_espn_game(game_id, sport)

    league = normalize_sport(sport, SPORTSDATA_LEAGUES, default=League.NFL)

    raw = _fetch_base_game(league, game_id)
    if raw is None:
        raise NotFoundError("Game not found")
    try:
        game = sportsdata_api.transform_game(raw, league, fallback_id=game_id)
    except NormalizationError as e:
        logger.warning(f"Unusable SportsDataIO game {game_id}: {e}")
        raise NotFoundError("Game not found")

    season = get_standings_season(league, now)
    tasks = {
        "odds": lambda: sportsdata_api.fetch_game_odds_by_game(league, game_id),
        "standings": lambda: sportsdata_api.fetch_standings(league, season, optional=True),
        "teamStats": lambda: sportsdata_api.fetch_team_season_stats(league, season),
        "injuries": lambda: sportsdata_api.fetch_injuries(league),
    }
    if game.status != "Scheduled":
        tasks["boxScore"] = lambda: sportsdata_api.fetch_box_score(league, game_id)

    result = fan_out(tasks)
    data = result.data
    home, away = game.homeTeam.abbr, game.awayTeam.abbr

    game.odds = summarize_game_odds(data.get("odds"))
    game.injuries = summarize_injuries(data.get("injuries"), home, away)
    game.boxScore = sportsdata_api.extract_box_score(data.get("boxScore"), league)
    game.homeTeam.record = find_team_record(data.get("standings"), home)
    game.awayTeam.record = find_team_record(data.get("standings"), away)
    game.homeTeam.seasonStats = _season_stats(data.get("teamStats"), home, league)
    game.awayTeam.seasonStats = _season_stats(data.get("teamStats"), away, league)

    return {"success": True, "game": game.model_dump(), "errors": result.errors}
