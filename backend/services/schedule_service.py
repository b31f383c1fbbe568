"""
Schedule & Score Aggregation

Fans out to the ESPN team-schedule feeds of the Philly teams and merges the
results into upcoming-schedule, home-game and recent-score feeds.
"""
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from config import (
    PHILLY_HOME_DEFAULT_DAYS,
    SCHEDULE_DEFAULT_DAYS,
    SCHEDULE_MAX_RESULTS,
    SCORES_MAX_AGE_HOURS,
    get_sportsdata_api_key,
)
from core.sport_config import (
    COLLEGE_TEAMS,
    PHILLY_HOME_TEAMS,
    PRO_LEAGUES,
    PRO_TEAMS,
    TeamConfig,
    get_current_season,
    get_team,
    in_season,
    resolve_team_key,
    team_for_league,
)
from core.sports_models import ScoreEntry
from integrations import espn_api, sportsdata_api
from integrations.normalization import AWAY_SCORE_FIELDS, GAME_DATE_FIELDS, HOME_SCORE_FIELDS, first_present
from services.aggregation import fan_out
from utils.errors import BadRequestError, ConfigError
from utils.timezone import ET_TZ, hours_since, iso_utc, parse_iso

logger = logging.getLogger(__name__)

FINAL_STATUSES = ("Final", "F/OT")


def _sorted_by_date(records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(records, key=lambda r: parse_iso(r.get("date")).timestamp())


# ============================================================================
# UPCOMING SCHEDULE
# ============================================================================

def _schedule_teams(team_key: Optional[str], now: datetime) -> List[TeamConfig]:
    teams = [
        team for key, team in PRO_TEAMS.items()
        if in_season(team.league, now) and (team_key is None or team_key == key)
    ]
    # College schedules only on request
    college = COLLEGE_TEAMS.get(team_key) if team_key else None
    if college and in_season(college.league, now):
        teams.append(college)
    return teams


def get_upcoming_schedule(team: Optional[str], days: int, now: datetime) -> Dict[str, Any]:
    """
    Upcoming games of every in-season Philly team (or one team) within `days`.

    Returns:
        {schedule, updated, source, count, errors}; at most 10 games, soonest first
    """
    team_key = resolve_team_key(team)
    days = days if days and days > 0 else SCHEDULE_DEFAULT_DAYS
    max_date = now + timedelta(days=days)

    tasks = {
        cfg.key: (lambda cfg=cfg: espn_api.parse_schedule_events(espn_api.fetch_team_schedule(cfg), cfg, now))
        for cfg in _schedule_teams(team_key, now)
    }
    result = fan_out(tasks)

    games = []
    for entries in result.data.values():
        for entry in entries:
            game_date = parse_iso(entry.date)
            if game_date is not None and now <= game_date <= max_date:
                games.append(entry.model_dump())

    schedule = _sorted_by_date(games)[:SCHEDULE_MAX_RESULTS]
    return {
        "schedule": schedule,
        "updated": iso_utc(now),
        "source": "espn",
        "count": len(schedule),
        "errors": result.errors,
    }


# ============================================================================
# PHILLY HOME GAMES
# ============================================================================

def get_philly_home_games(team: Optional[str], days: int, now: datetime) -> Dict[str, Any]:
    """Future home games of the four major-league teams within `days`."""
    team_key = resolve_team_key(team)
    if team_key is not None and team_key not in PHILLY_HOME_TEAMS:
        raise BadRequestError(f"Invalid team. Must be one of: {', '.join(PHILLY_HOME_TEAMS)}")

    days = days if days and days > 0 else PHILLY_HOME_DEFAULT_DAYS
    max_date = now + timedelta(days=days)
    keys = [team_key] if team_key else list(PHILLY_HOME_TEAMS)

    tasks = {
        key: (lambda cfg=PRO_TEAMS[key]: espn_api.parse_home_games(espn_api.fetch_team_schedule(cfg), cfg))
        for key in keys
    }
    result = fan_out(tasks)

    games = []
    for team_games in result.data.values():
        for game in team_games:
            game_date = parse_iso(game.date)
            if (
                game.isHome
                and game_date is not None
                and now < game_date <= max_date
                and game.status not in FINAL_STATUSES
            ):
                games.append(game.model_dump())

    games = _sorted_by_date(games)
    return {
        "success": True,
        "games": games,
        "count": len(games),
        "source": "espn",
        "errors": result.errors,
    }


# ============================================================================
# RECENT SCORES
# ============================================================================

def _latest_college_score(team: TeamConfig, now: datetime) -> Optional[ScoreEntry]:
    season = get_current_season(team.league, now)
    games = sportsdata_api.fetch_team_schedule(team.league, season, team.sportsdata_key)

    completed = [g for g in games if g.get("Status") in FINAL_STATUSES]
    completed.sort(
        key=lambda g: (parse_iso(first_present(g, GAME_DATE_FIELDS), ET_TZ) or now).timestamp(),
        reverse=True,
    )
    if not completed:
        return None

    game = completed[0]
    game_id = game.get("GameID")
    # SportsDataIO times are ET wall clock; ESPN scores carry UTC
    played_at = parse_iso(first_present(game, GAME_DATE_FIELDS), ET_TZ)
    return ScoreEntry(
        sport=team.league.value,
        team=team.name,
        teamColor=team.color,
        homeTeam=game.get("HomeTeam") or "Home",
        homeScore=str(first_present(game, HOME_SCORE_FIELDS, 0) or 0),
        awayTeam=game.get("AwayTeam") or "Away",
        awayScore=str(first_present(game, AWAY_SCORE_FIELDS, 0) or 0),
        isHome=game.get("HomeTeam") == team.sportsdata_key,
        date=iso_utc(played_at) if played_at else None,
        gameId=str(game_id) if game_id is not None else None,
    )


def get_recent_scores(team: Optional[str], now: datetime) -> Dict[str, Any]:
    """
    Most recent final of each major-league team (plus a college team on
    request), dropping results older than 72 hours.
    """
    if not get_sportsdata_api_key():
        raise ConfigError("SportsDataIO API key not configured")

    team_key = resolve_team_key(team)
    tasks = {}
    for league in PRO_LEAGUES:
        cfg = team_for_league(league)
        tasks[league.value] = lambda cfg=cfg: espn_api.latest_completed_game(espn_api.fetch_team_schedule(cfg), cfg)

    college = COLLEGE_TEAMS.get(team_key) if team_key else None
    if college:
        tasks[college.key] = lambda: _latest_college_score(college, now)

    result = fan_out(tasks)

    scores = [
        score.model_dump() for score in result.data.values()
        if score is not None and hours_since(score.date, now) <= SCORES_MAX_AGE_HOURS
    ]

    target = get_team(team_key)
    if target is not None:
        scores = [s for s in scores if s["team"] == target.name]

    scores.sort(key=lambda s: parse_iso(s["date"]).timestamp(), reverse=True)
    return {
        "scores": scores,
        "updated": iso_utc(now),
        "source": "espn",
        "errors": result.errors,
    }
