"""
ESPN API Integration - Free Sports Data

Team schedules, game summaries and division standings for the Philly teams.

NO API KEY REQUIRED - Free public endpoints
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import requests

from config import REQUEST_TIMEOUT
from core.sport_config import (
    ESPN_PATHS,
    ESPN_STANDINGS_URL,
    ESPN_SITE_URL,
    League,
    PHILLY_ABBR,
    PHILLY_NAME_MARKERS,
    TeamConfig,
)
from core.sports_models import GameOddsSummary, HomeGame, NormalizedGame, ScheduleEntry, ScoreEntry, TeamSide
from integrations.normalization import ESPN_BOX_SCORE_STATS, espn_score, espn_score_display, to_float
from utils.errors import UpstreamError
from utils.timezone import parse_iso

logger = logging.getLogger(__name__)


class ESPNApiError(UpstreamError):
    """ESPN API error"""
    pass


def _get(url: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
    try:
        return requests.get(url, params=params, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as e:
        logger.error(f"ESPN request failed for {url}: {e}")
        raise ESPNApiError(f"ESPN request failed: {e}")


def _get_json(url: str, params: Optional[Dict[str, Any]] = None) -> Any:
    response = _get(url, params)
    if not response.ok:
        logger.error(f"ESPN API error {response.status_code} for {url}")
        raise ESPNApiError(f"ESPN API error: {response.status_code}", response.status_code)
    return response.json()


# ============================================================================
# EVENT HELPERS
# ============================================================================

def _split_competitors(event: Dict[str, Any]) -> Tuple[Dict[str, Any], Dict[str, Any], Dict[str, Any]]:
    """Return (competition, home, away); missing parts come back as {}."""
    competitions = event.get("competitions") or [{}]
    competition = competitions[0] or {}
    home, away = {}, {}
    for competitor in competition.get("competitors") or []:
        if competitor.get("homeAway") == "home":
            home = competitor
        elif competitor.get("homeAway") == "away":
            away = competitor
    return competition, home, away


def _team_names(competitor: Dict[str, Any]) -> Tuple[str, str]:
    team = competitor.get("team") or {}
    return team.get("displayName") or "", team.get("shortDisplayName") or ""


def _is_philly_side(competitor: Dict[str, Any], markers) -> bool:
    display, short = _team_names(competitor)
    return any(m and (m in display or m in short) for m in markers)


def _is_completed(competition: Dict[str, Any]) -> bool:
    return bool((((competition.get("status") or {}).get("type")) or {}).get("completed"))


def _broadcast(competition: Dict[str, Any]) -> str:
    broadcasts = competition.get("broadcasts") or []
    if broadcasts and (broadcasts[0].get("names") or []):
        return broadcasts[0]["names"][0]
    geo = competition.get("geoBroadcasts") or []
    if geo:
        return ((geo[0].get("media") or {}).get("shortName")) or ""
    return ""


# ============================================================================
# TEAM SCHEDULES
# ============================================================================

def fetch_team_schedule(team: TeamConfig) -> List[Dict[str, Any]]:
    """
    Fetch a team's season schedule.

    Returns:
        Raw ESPN event list

    Raises:
        ESPNApiError: non-2xx response or network failure
    """
    data = _get_json(team.schedule_url)
    events = data.get("events") or []
    logger.info(f"Fetched {len(events)} ESPN events for {team.name}")
    return events


def parse_schedule_events(events: List[Dict[str, Any]], team: TeamConfig, now: datetime) -> List[ScheduleEntry]:
    """Future, not-yet-completed events of one team as ScheduleEntry records."""
    markers = PHILLY_NAME_MARKERS + (team.name,)
    entries = []

    for event in events:
        competition, home, away = _split_competitors(event)
        if not competition or _is_completed(competition):
            continue

        game_date = parse_iso(event.get("date"))
        if game_date is None or game_date < now:
            continue

        is_home = _is_philly_side(home, markers)
        other = away if is_home else home
        display, short = _team_names(other)

        entries.append(ScheduleEntry(
            sport=team.league.value,
            team=team.name,
            teamColor=team.color,
            opponent=short or display or "TBD",
            isHome=is_home,
            date=event.get("date"),
            venue=((competition.get("venue") or {}).get("fullName")) or "",
            broadcast=_broadcast(competition),
            gameId=event.get("id"),
        ))

    return entries


def parse_home_games(events: List[Dict[str, Any]], team: TeamConfig) -> List[HomeGame]:
    """Every event of a team shaped for the home-game feed (filtering happens upstream)."""
    markers = ("Philadelphia", team.name)
    games = []

    for event in events:
        competition, home, away = _split_competitors(event)
        if not competition or not event.get("id"):
            continue

        is_home = _is_philly_side(home, markers)
        other = (away if is_home else home).get("team") or {}
        opponent = other.get("shortDisplayName") or other.get("abbreviation") or "TBD"
        status_type = (competition.get("status") or {}).get("type") or {}

        games.append(HomeGame(
            id=event["id"],
            team=team.key,
            teamName=team.name,
            eventTitle=f"{team.name} vs {opponent}" if is_home else f"{team.name} @ {opponent}",
            opponent=opponent,
            date=event.get("date") or "",
            venue=team.venue if is_home else (((competition.get("venue") or {}).get("fullName")) or "Away"),
            city="Philadelphia" if is_home else "",
            isHome=is_home,
            week=(event.get("week") or {}).get("number"),
            seasonType=(event.get("seasonType") or {}).get("name") or "Regular Season",
            status="Final" if status_type.get("completed") else (status_type.get("state") or "scheduled"),
            gameId=event["id"],
            espnId=event["id"],
            broadcast=_broadcast(competition) if (competition.get("broadcasts") or []) else "",
        ))

    return games


def latest_completed_game(events: List[Dict[str, Any]], team: TeamConfig) -> Optional[ScoreEntry]:
    """Most recent completed game in schedule order, as a score line."""
    completed = [e for e in events if _is_completed(_split_competitors(e)[0])]
    if not completed:
        return None

    event = completed[-1]
    competition, home, away = _split_competitors(event)
    home_team = home.get("team") or {}
    away_team = away.get("team") or {}
    status_type = (competition.get("status") or {}).get("type") or {}
    league = team.league.value

    return ScoreEntry(
        sport=league,
        team=team.name,
        teamColor=team.color,
        homeTeam=home_team.get("abbreviation") or home_team.get("shortDisplayName") or "Home",
        homeScore=espn_score_display(home.get("score")),
        awayTeam=away_team.get("abbreviation") or away_team.get("shortDisplayName") or "Away",
        awayScore=espn_score_display(away.get("score")),
        isHome=home_team.get("abbreviation") == PHILLY_ABBR or "Philadelphia" in (home_team.get("displayName") or ""),
        date=event.get("date"),
        gameId=event.get("id"),
        status=status_type.get("shortDetail") or "Final",
        link=f"/game-preview.html?id={event.get('id')}&sport={league}&source=espn",
    )


# ============================================================================
# GAME SUMMARY
# ============================================================================

def _stat_value(stats: List[Dict[str, Any]], names) -> Optional[str]:
    for name in names:
        for stat in stats:
            if stat.get("name") == name or stat.get("label") == name:
                value = stat.get("displayValue")
                if value is None:
                    value = stat.get("value")
                if value is not None:
                    return value
    return None


def extract_box_score(data: Dict[str, Any], league: League) -> Optional[Dict[str, Dict[str, Any]]]:
    fields = ESPN_BOX_SCORE_STATS.get(league.value)
    teams = ((data.get("boxscore") or {}).get("teams")) or []
    if not fields or not teams:
        return None

    box = {}
    for side in ("home", "away"):
        stats = next((t.get("statistics") or [] for t in teams if t.get("homeAway") == side), [])
        box[side] = {key: _stat_value(stats, names) for key, names in fields.items()}
    return box


def extract_pickcenter_odds(data: Dict[str, Any]) -> Optional[GameOddsSummary]:
    picks = data.get("pickcenter") or []
    if not picks:
        return None
    odds = picks[0]
    return GameOddsSummary(
        spread=odds.get("details"),
        overUnder=to_float(odds.get("overUnder")),
        homeMoneyLine=(odds.get("homeTeamOdds") or {}).get("moneyLine"),
        awayMoneyLine=(odds.get("awayTeamOdds") or {}).get("moneyLine"),
        sportsbook=(odds.get("provider") or {}).get("name"),
    )


def _summary_side(competitor: Dict[str, Any]) -> TeamSide:
    team = competitor.get("team") or {}
    records = competitor.get("record") or []
    summary = records[0].get("summary") if records else None
    logos = team.get("logos") or []
    return TeamSide(
        abbr=team.get("abbreviation"),
        name=team.get("displayName"),
        score=espn_score(competitor.get("score")),
        record={"display": summary} if summary else None,
        logoUrl=logos[0].get("href") if logos else None,
    )


def fetch_game_summary(league: League, game_id: str) -> Optional[NormalizedGame]:
    """
    Fetch a single game from ESPN's summary endpoint.

    Returns:
        NormalizedGame, or None when ESPN has no such game

    Raises:
        ESPNApiError: network failure
    """
    path = ESPN_PATHS.get(league)
    if path is None:
        return None

    response = _get(f"{ESPN_SITE_URL}/{path}/summary", params={"event": game_id})
    if not response.ok:
        logger.warning(f"ESPN summary {game_id} ({league.value}) returned {response.status_code}")
        return None

    data = response.json()
    competitions = ((data.get("header") or {}).get("competitions")) or []
    if not competitions:
        return None

    competition = competitions[0]
    _, home, away = _split_competitors({"competitions": [competition]})
    if not home or not away:
        return None

    game_info = data.get("gameInfo") or {}
    broadcasts = competition.get("broadcasts") or []
    return NormalizedGame(
        id=str(game_id),
        sport=league.value,
        status=(((competition.get("status") or {}).get("type")) or {}).get("description") or "Final",
        dateTime=competition.get("date"),
        venue=((game_info.get("venue") or {}).get("fullName")) or ((competition.get("venue") or {}).get("fullName")),
        channel=((broadcasts[0].get("media") or {}).get("shortName")) if broadcasts else None,
        weather=(game_info.get("weather") or {}).get("displayValue"),
        homeTeam=_summary_side(home),
        awayTeam=_summary_side(away),
        odds=extract_pickcenter_odds(data),
        boxScore=extract_box_score(data, league),
        source="espn",
    )


# ============================================================================
# STANDINGS
# ============================================================================

def fetch_standings(league: League) -> Dict[str, Any]:
    """
    Raw ESPN league standings tree.

    Raises:
        ESPNApiError: non-2xx response or network failure
    """
    return _get_json(f"{ESPN_STANDINGS_URL}/{ESPN_PATHS[league]}/standings")
