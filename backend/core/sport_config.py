"""
core/sport_config.py
League and team tables for the Philadelphia teams we cover.
Season-year rules follow the providers' season keys.
"""
from datetime import date, datetime
from enum import Enum
from typing import Dict, Iterable, Optional, Union

from utils.errors import BadRequestError
from utils.timezone import to_et


class League(str, Enum):
    NFL = "NFL"
    NBA = "NBA"
    MLB = "MLB"
    NHL = "NHL"
    NCAAF = "NCAAF"
    NCAAB = "NCAAB"
    MLS = "MLS"


PRO_LEAGUES = (League.NFL, League.NBA, League.MLB, League.NHL)
SPORTSDATA_LEAGUES = PRO_LEAGUES + (League.NCAAF, League.NCAAB)

# SportsDataIO URL slugs
SPORTSDATA_SLUGS = {
    League.NFL: "nfl",
    League.NBA: "nba",
    League.MLB: "mlb",
    League.NHL: "nhl",
    League.NCAAF: "cfb",
    League.NCAAB: "cbb",
}

ESPN_SITE_URL = "https://site.api.espn.com/apis/site/v2/sports"
ESPN_STANDINGS_URL = "https://site.api.espn.com/apis/v2/sports"

ESPN_PATHS = {
    League.NFL: "football/nfl",
    League.NBA: "basketball/nba",
    League.MLB: "baseball/mlb",
    League.NHL: "hockey/nhl",
    League.NCAAF: "football/college-football",
    League.NCAAB: "basketball/mens-college-basketball",
    League.MLS: "soccer/usa.1",
}

# ESPN CDN logo folders
LOGO_LEAGUES = {
    League.NFL: "nfl",
    League.NBA: "nba",
    League.MLB: "mlb",
    League.NHL: "nhl",
}

DateLike = Union[date, datetime]


class TeamConfig:
    """One Philadelphia team and where its data lives."""

    def __init__(
        self,
        key: str,
        name: str,
        league: League,
        color: str,
        venue: Optional[str] = None,
        espn_team_id: str = "phi",
        sportsdata_key: Optional[str] = None,
        conference: Optional[str] = None,
        conference_abbr: Optional[str] = None,
    ):
        self.key = key
        self.name = name
        self.league = league
        self.color = color
        self.venue = venue
        self.espn_team_id = espn_team_id
        self.sportsdata_key = sportsdata_key
        self.conference = conference
        self.conference_abbr = conference_abbr

    @property
    def schedule_url(self) -> str:
        return f"{ESPN_SITE_URL}/{ESPN_PATHS[self.league]}/teams/{self.espn_team_id}/schedule"

    @property
    def is_college(self) -> bool:
        return self.league in (League.NCAAB, League.NCAAF)


# ============================================================================
# TEAMS
# ============================================================================

PRO_TEAMS: Dict[str, TeamConfig] = {
    "eagles": TeamConfig("eagles", "Eagles", League.NFL, "#004C54", venue="Lincoln Financial Field"),
    "sixers": TeamConfig("sixers", "76ers", League.NBA, "#006BB6", venue="Wells Fargo Center"),
    "phillies": TeamConfig("phillies", "Phillies", League.MLB, "#E81828", venue="Citizens Bank Park"),
    "flyers": TeamConfig("flyers", "Flyers", League.NHL, "#F74902", venue="Wells Fargo Center"),
    "union": TeamConfig("union", "Union", League.MLS, "#B49759", venue="Subaru Park"),
}

# '76ers' is accepted as an alias of 'sixers' everywhere a team is filtered
TEAM_ALIASES = {"76ers": "sixers"}

# Home-game feed covers the four major-league teams only
PHILLY_HOME_TEAMS = ("eagles", "phillies", "sixers", "flyers")

COLLEGE_TEAMS: Dict[str, TeamConfig] = {
    "villanova": TeamConfig("villanova", "Villanova", League.NCAAB, "#003366", espn_team_id="222",
                            sportsdata_key="VILL", conference="Big East", conference_abbr="BIG-EAST"),
    "penn": TeamConfig("penn", "Penn", League.NCAAB, "#011F5B", espn_team_id="219",
                       sportsdata_key="PENN", conference="Ivy League", conference_abbr="IVY"),
    "lasalle": TeamConfig("lasalle", "La Salle", League.NCAAB, "#00833E", espn_team_id="2325",
                          sportsdata_key="LAS", conference="Atlantic 10", conference_abbr="A-10"),
    "drexel": TeamConfig("drexel", "Drexel", League.NCAAB, "#07294D", espn_team_id="2182",
                         sportsdata_key="DREX", conference="CAA", conference_abbr="CAA"),
    "stjosephs": TeamConfig("stjosephs", "St. Joseph's", League.NCAAB, "#9E1B32", espn_team_id="2603",
                            sportsdata_key="SJU", conference="Atlantic 10", conference_abbr="A-10"),
    "temple": TeamConfig("temple", "Temple", League.NCAAB, "#9D2235", espn_team_id="218",
                         sportsdata_key="TEM", conference="AAC", conference_abbr="AAC"),
}

# Substrings that identify a Philadelphia side in ESPN competitor names
PHILLY_NAME_MARKERS = ("Philadelphia", "Eagles", "Phillies", "76ers", "Flyers", "Union")

PHILLY_ABBR = "PHI"


def resolve_team_key(team: Optional[str]) -> Optional[str]:
    """Lowercase a team filter and fold aliases; None stays None."""
    if not team:
        return None
    key = team.strip().lower()
    return TEAM_ALIASES.get(key, key)


def get_team(team: Optional[str]) -> Optional[TeamConfig]:
    key = resolve_team_key(team)
    if key is None:
        return None
    return PRO_TEAMS.get(key) or COLLEGE_TEAMS.get(key)


def team_for_league(league: League) -> Optional[TeamConfig]:
    for team in PRO_TEAMS.values():
        if team.league == league:
            return team
    return None


# ============================================================================
# SPORT PARAMETER
# ============================================================================

def normalize_sport(value: Optional[str], allowed: Iterable[League], default: Optional[League] = None) -> League:
    """
    Validate a `sport` query parameter against the leagues an endpoint supports.

    Raises:
        BadRequestError: the value is missing (with no default) or unsupported
    """
    allowed = tuple(allowed)
    if not value:
        if default is None:
            raise BadRequestError("Sport parameter required")
        return default

    candidate = value.strip().upper()
    for league in allowed:
        if league.value == candidate:
            return league
    raise BadRequestError(f"Unsupported sport: {value}")


# ============================================================================
# SEASONS
# ============================================================================

def _month_year(today: Optional[DateLike]):
    if today is None:
        today = datetime.now()
    if isinstance(today, datetime) and today.tzinfo is not None:
        today = to_et(today)
    return today.month, today.year


def get_current_season(league: League, today: Optional[DateLike] = None) -> int:
    """Season year used for SportsDataIO Games/Standings keys."""
    month, year = _month_year(today)

    if league == League.NFL:
        # Season named for its starting year; Jan-Feb belong to last year's season
        return year if month >= 3 else year - 1
    if league in (League.NBA, League.NHL):
        # Named for the year it ends
        return year + 1 if month >= 10 else year
    if league == League.NCAAF:
        return year if month >= 8 else year - 1
    if league == League.NCAAB:
        return year + 1 if month >= 11 else year
    return year


def get_schedule_season(league: League, today: Optional[DateLike] = None) -> str:
    """Season key for the per-league schedule feeds."""
    month, year = _month_year(today)

    if league == League.NFL:
        suffix = "PRE" if 3 <= month <= 8 else "REG"
        season_year = year if month >= 3 else year - 1
        return f"{season_year}{suffix}"
    if league in (League.NBA, League.NHL):
        return str(year + 1 if month >= 9 else year)
    return str(year)


def get_standings_season(league: League, today: Optional[DateLike] = None) -> str:
    month, year = _month_year(today)

    if league == League.NFL:
        # Through July the latest completed or running season started last year
        return str(year - 1 if month <= 7 else year)
    if league in (League.NBA, League.NHL):
        return str(year + 1 if month >= 9 else year)
    return str(year)


def in_season(league: League, today: Optional[DateLike] = None) -> bool:
    """Rough in-season month windows used to skip dormant schedule feeds."""
    month, _ = _month_year(today)

    if league == League.NFL:
        return month >= 8 or month <= 2
    if league in (League.NBA, League.NHL):
        return month >= 10 or month <= 6
    if league == League.MLB:
        return 2 <= month <= 11
    if league == League.MLS:
        return month >= 2
    if league == League.NCAAB:
        return month >= 11 or month <= 3
    if league == League.NCAAF:
        return month >= 8 or month <= 1
    return True


def team_logo_url(league, abbr: Optional[str]) -> Optional[str]:
    if not abbr:
        return None
    try:
        folder = LOGO_LEAGUES.get(League(league))
    except ValueError:
        return None
    if folder is None:
        return None
    return f"https://a.espncdn.com/i/teamlogos/{folder}/500/{abbr.lower()}.png"
