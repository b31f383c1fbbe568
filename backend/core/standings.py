"""
Standings grouping and ranking.

Ranks are positional: after sorting, the first entry is 1 and ranks run
contiguously to N with no shared places.
"""
import logging
from typing import Any, Dict, List, Optional

from core.sport_config import PHILLY_ABBR, TeamConfig
from core.sports_models import StandingsEntry
from integrations.normalization import (
    GAMES_BACK_FIELDS,
    NormalizationError,
    POINT_DIFF_FIELDS,
    POINTS_AGAINST_FIELDS,
    POINTS_FOR_FIELDS,
    STREAK_FIELDS,
    first_present,
    to_float,
)

logger = logging.getLogger(__name__)

# Hard-coded ESPN division names per league (exact match)
ESPN_DIVISIONS = {
    "nfl": ("NFC East", "NFC East"),
    "nba": ("Atlantic", "Atlantic"),
    "mlb": ("National League East", "NL East"),
    "nhl": ("Metropolitan", "Metropolitan"),
}


def win_pct(wins, losses, percentage=None) -> float:
    if percentage is not None:
        return float(percentage)
    games = (wins or 0) + (losses or 0)
    return (wins or 0) / games if games else 0.0


def rank_entries(entries: List[Dict[str, Any]], pct_key: str = "winPct") -> List[Dict[str, Any]]:
    """Sort by wins desc, then win pct desc, and assign ranks 1..N."""
    ordered = sorted(
        entries,
        key=lambda e: (-(e.get("wins") or 0), -(e.get(pct_key) or 0)),
    )
    for idx, entry in enumerate(ordered):
        entry["rank"] = idx + 1
    return ordered


def _record(row: Dict[str, Any], prefix: str) -> Optional[str]:
    wins = row.get(f"{prefix}Wins")
    if wins is None:
        return None
    return f"{wins}-{row.get(f'{prefix}Losses') or 0}"


def _point_diff(row: Dict[str, Any]) -> Optional[float]:
    diff = first_present(row, POINT_DIFF_FIELDS)
    if diff is not None:
        return diff
    goals_for, goals_against = row.get("GoalsFor"), row.get("GoalsAgainst")
    if goals_for is not None and goals_against is not None:
        return goals_for - goals_against
    return None


def transform_standing(row: Dict[str, Any]) -> StandingsEntry:
    """Reshape one SportsDataIO Standings row."""
    team = row.get("Team") or row.get("Key")
    if not team:
        raise NormalizationError("Standings row has no team", row)

    wins = row.get("Wins") or 0
    losses = row.get("Losses") or 0

    return StandingsEntry(
        team=team,
        teamName=row.get("Name"),
        city=row.get("City"),
        wins=wins,
        losses=losses,
        ties=row.get("Ties") or 0,
        otLosses=row.get("OvertimeLosses") or 0,
        winPct=win_pct(wins, losses, row.get("Percentage")),
        gamesBack=first_present(row, GAMES_BACK_FIELDS, 0),
        streak=first_present(row, STREAK_FIELDS),
        lastTen=_record(row, "LastTen"),
        homeRecord=_record(row, "Home"),
        awayRecord=_record(row, "Away"),
        divisionRecord=_record(row, "Division"),
        conferenceRecord=_record(row, "Conference"),
        pointsFor=to_float(first_present(row, POINTS_FOR_FIELDS)),
        pointsAgainst=to_float(first_present(row, POINTS_AGAINST_FIELDS)),
        pointDiff=to_float(_point_diff(row)),
        isPhilly=team == PHILLY_ABBR,
        division=row.get("Division"),
        conference=row.get("Conference"),
    )


def group_standings(rows: List[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    """Group rows by Division (else Conference, else 'League') and rank each group."""
    grouped: Dict[str, List[Dict[str, Any]]] = {}
    for row in rows or []:
        try:
            entry = transform_standing(row)
        except NormalizationError as e:
            logger.warning(f"Skipping standings row: {e}")
            continue
        group = row.get("Division") or row.get("Conference") or "League"
        grouped.setdefault(group, []).append(entry.model_dump())

    return {group: rank_entries(entries) for group, entries in grouped.items()}


def find_team_record(rows: Optional[List[Dict[str, Any]]], abbr: Optional[str]) -> Optional[Dict[str, Any]]:
    """Record block for a game detail side, looked up by Team or Key."""
    if not rows or not abbr:
        return None
    row = next((r for r in rows if r.get("Team") == abbr or r.get("Key") == abbr), None)
    if row is None:
        return None

    wins = row.get("Wins") or 0
    losses = row.get("Losses") or 0
    return {
        "wins": wins,
        "losses": losses,
        "ties": row.get("Ties") or 0,
        "winPct": round(win_pct(wins, losses, row.get("Percentage")), 3),
        "divisionRank": row.get("DivisionRank"),
        "conferenceRank": row.get("ConferenceRank"),
        "streak": row.get("Streak"),
        "lastTen": _record(row, "LastTen"),
    }


# ============================================================================
# ESPN DIVISIONS
# ============================================================================

def _espn_stat(stats: List[Dict[str, Any]], name: str) -> float:
    for stat in stats or []:
        if stat.get("name") == name:
            return stat.get("value") or 0
    return 0


def extract_espn_division(data: Dict[str, Any], division_name: str) -> Optional[List[Dict[str, Any]]]:
    """
    Find `division_name` under children[].children[] of an ESPN standings
    payload and return its ranked entries, or None when the division is absent
    or empty.
    """
    entries = None
    for group in (data or {}).get("children") or []:
        for division in group.get("children") or []:
            if division.get("name") == division_name:
                entries = (division.get("standings") or {}).get("entries") or []
                break
        if entries is not None:
            break

    if not entries:
        return None

    standings = []
    for entry in entries:
        team = entry.get("team") or {}
        stats = entry.get("stats") or []
        standings.append({
            "abbreviation": team.get("abbreviation"),
            "name": team.get("displayName"),
            "wins": int(_espn_stat(stats, "wins")),
            "losses": int(_espn_stat(stats, "losses")),
            "pct": _espn_stat(stats, "winPercent"),
            "isPhilly": team.get("abbreviation") == PHILLY_ABBR,
        })
    return rank_entries(standings, pct_key="pct")


# ============================================================================
# COLLEGE CONFERENCES
# ============================================================================

def format_streak(streak) -> str:
    if not streak:
        return "-"
    return f"{'W' if streak > 0 else 'L'}{abs(streak)}"


def rank_conference(rows: List[Dict[str, Any]], team: TeamConfig) -> List[Dict[str, Any]]:
    """Conference table for a college team: conf wins desc, conf losses asc, wins desc."""
    members = [
        r for r in rows or []
        if r.get("Conference") == team.conference or r.get("ConferenceAbbreviation") == team.conference_abbr
    ]

    standings = []
    for row in members:
        percentage = row.get("Percentage")
        standings.append({
            "rank": row.get("ConferenceRank") or 0,
            "teamId": str(row["TeamID"]) if row.get("TeamID") is not None else None,
            "teamName": row.get("School") or row.get("Name"),
            "teamAbbr": row.get("Key"),
            "teamLogo": None,
            "wins": row.get("Wins") or 0,
            "losses": row.get("Losses") or 0,
            "confWins": row.get("ConferenceWins") or 0,
            "confLosses": row.get("ConferenceLosses") or 0,
            "winPct": f"{percentage * 100:.1f}%" if percentage else "0%",
            "streak": format_streak(row.get("Streak")),
            "isHighlighted": row.get("Key") == team.sportsdata_key,
        })

    standings.sort(key=lambda s: (-s["confWins"], s["confLosses"], -s["wins"]))
    for idx, entry in enumerate(standings):
        entry["rank"] = idx + 1
    return standings
