"""
Provider field normalization.

SportsDataIO and ESPN spell the same field several ways across leagues and
feed versions. Each alternate spelling set is listed here as an explicit
priority tuple; normalizers read fields through first_present() instead of
chaining lookups inline.
"""
from typing import Any, Optional, Sequence


class NormalizationError(ValueError):
    """A provider record lacks a field we cannot default."""

    def __init__(self, message: str, record: Any = None):
        super().__init__(message)
        self.record = record


# ============================================================================
# SPORTSDATAIO FIELD PRIORITIES
# ============================================================================

GAME_ID_FIELDS = ("GameID", "GameId", "ScoreID")
GAME_DATE_FIELDS = ("DateTime", "Day")
HOME_SCORE_FIELDS = ("HomeScore", "HomeTeamScore", "HomeTeamRuns")
AWAY_SCORE_FIELDS = ("AwayScore", "AwayTeamScore", "AwayTeamRuns")
VENUE_FIELDS = ("StadiumDetails.Name", "Stadium")

GAMES_BACK_FIELDS = ("GamesBack", "GamesBehind")
STREAK_FIELDS = ("Streak", "StreakDescription")
POINTS_FOR_FIELDS = ("PointsFor", "RunsScored", "GoalsFor")
POINTS_AGAINST_FIELDS = ("PointsAgainst", "RunsAgainst", "GoalsAgainst")
POINT_DIFF_FIELDS = ("NetPoints", "PointDifferential", "RunDifferential", "GoalDifferential")

ODDS_GAME_ID_FIELDS = ("GameId", "GameID", "ScoreId", "ScoreID")

# Per-league box score stats: output key -> priority tuple of provider field
# suffixes, read as "HomeTeam<suffix>" / "AwayTeam<suffix>"
BOX_SCORE_FIELDS = {
    "NFL": {
        "totalYards": ("TotalYards", "OffensiveYards"),
        "passingYards": ("PassingYards",),
        "rushingYards": ("RushingYards",),
        "turnovers": ("Turnovers", "Giveaways"),
        "timeOfPossession": ("TimeOfPossession",),
        "firstDowns": ("FirstDowns",),
    },
    "NBA": {
        "rebounds": ("Rebounds",),
        "assists": ("Assists",),
        "steals": ("Steals",),
        "blocks": ("Blocks", "BlockedShots"),
        "turnovers": ("Turnovers",),
        "fieldGoalPct": ("FieldGoalPercentage", "FieldGoalsPercentage"),
    },
    "MLB": {
        "hits": ("Hits",),
        "errors": ("Errors",),
        "runs": ("Runs",),
    },
    "NHL": {
        "shots": ("Shots", "ShotsOnGoal"),
        "powerPlayGoals": ("PowerPlayGoals",),
        "penaltyMinutes": ("PenaltyMinutes",),
    },
}

# ESPN summary box score: output key -> stat names/labels in priority order
ESPN_BOX_SCORE_STATS = {
    "NFL": {
        "totalYards": ("totalYards", "Total Yards"),
        "passingYards": ("netPassingYards", "Passing"),
        "rushingYards": ("rushingYards", "Rushing"),
        "turnovers": ("turnovers", "Turnovers"),
        "firstDowns": ("firstDowns", "First Downs"),
    },
    "NBA": {
        "rebounds": ("rebounds",),
        "assists": ("assists",),
        "steals": ("steals",),
        "blocks": ("blocks",),
        "turnovers": ("turnovers",),
        "fieldGoalPct": ("fieldGoalPct",),
    },
}


def _lookup(doc: Any, path: str) -> Any:
    current = doc
    for part in path.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(part)
    return current


def first_present(doc: Any, keys: Sequence[str], default: Any = None) -> Any:
    """
    Return the first non-None value among `keys` (dotted paths allowed).

    Zero, empty string and False are real values and are returned as-is.
    """
    if not isinstance(doc, dict):
        return default
    for key in keys:
        value = _lookup(doc, key)
        if value is not None:
            return value
    return default


def require(doc: Any, keys: Sequence[str], what: str) -> Any:
    """first_present() that raises NormalizationError when nothing matches."""
    value = first_present(doc, keys)
    if value is None:
        raise NormalizationError(f"Missing {what} (tried {', '.join(keys)})", doc)
    return value


def espn_score(value: Any) -> int:
    """ESPN scores come as 24, '24' or {'value': 24.0, 'displayValue': '24'}."""
    if isinstance(value, dict):
        value = first_present(value, ("value", "displayValue"))
    if value is None or value == "":
        return 0
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def espn_score_display(value: Any) -> str:
    if isinstance(value, dict):
        value = first_present(value, ("displayValue", "value"))
    if value is None or value == "":
        return "0"
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def to_float(value: Any, default: Optional[float] = None) -> Optional[float]:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default
