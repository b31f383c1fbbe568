"""
Normalized Sports Records
Common shapes every provider response is reshaped into before it leaves the API.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


# ============================================================================
# GAMES
# ============================================================================

class TeamSide(BaseModel):
    abbr: Optional[str] = None
    name: Optional[str] = None
    score: Optional[int] = 0
    record: Optional[Dict[str, Any]] = None
    logoUrl: Optional[str] = None
    seasonStats: Optional[Dict[str, Any]] = None


class GameOddsSummary(BaseModel):
    """Single-book odds attached to a game detail."""
    spread: Optional[Any] = None
    overUnder: Optional[float] = None
    homeMoneyLine: Optional[int] = None
    awayMoneyLine: Optional[int] = None
    sportsbook: Optional[str] = None


class NormalizedGame(BaseModel):
    id: str
    sport: str
    status: Optional[str] = None
    dateTime: Optional[str] = None
    venue: Optional[str] = None
    channel: Optional[str] = None
    weather: Optional[str] = None
    homeTeam: TeamSide
    awayTeam: TeamSide
    odds: Optional[GameOddsSummary] = None
    boxScore: Optional[Dict[str, Dict[str, Any]]] = None
    injuries: Optional[Dict[str, List[Dict[str, Any]]]] = None
    quarter: Optional[Any] = None
    timeRemaining: Optional[Any] = None
    possession: Optional[str] = None
    source: str = "sportsdata"


# ============================================================================
# SCHEDULES / SCORES
# ============================================================================

class ScheduleEntry(BaseModel):
    sport: str
    team: str
    teamColor: str
    opponent: str
    isHome: bool
    date: str
    venue: str = ""
    broadcast: str = ""
    gameId: Optional[str] = None


class HomeGame(BaseModel):
    """Entry of the Philly home-game feed."""
    id: str
    team: str
    teamName: str
    eventTitle: str
    opponent: str
    date: str
    venue: str
    city: str = ""
    isHome: bool
    week: Optional[int] = None
    seasonType: str = "Regular Season"
    status: str = "scheduled"
    gameId: str
    espnId: str
    broadcast: str = ""


class ScoreEntry(BaseModel):
    sport: str
    team: str
    teamColor: str
    homeTeam: str
    homeScore: str
    awayTeam: str
    awayScore: str
    isHome: bool
    date: Optional[str] = None
    gameId: Optional[str] = None
    status: str = "Final"
    link: Optional[str] = None


class LeagueGame(BaseModel):
    """A row of a full-league schedule."""
    id: Optional[str] = None
    date: Optional[str] = None
    dateDisplay: str = "TBD"
    homeTeam: Optional[str] = None
    awayTeam: Optional[str] = None
    homeScore: Optional[int] = None
    awayScore: Optional[int] = None
    status: Optional[str] = None
    channel: Optional[str] = None
    stadium: Optional[str] = None
    week: Optional[int] = None
    isHome: Optional[bool] = None
    quarter: Optional[Any] = None
    period: Optional[Any] = None
    inning: Optional[Any] = None


# ============================================================================
# ODDS
# ============================================================================

class Spread(BaseModel):
    home: Optional[float] = None
    away: Optional[float] = None
    homeOdds: Optional[int] = None
    awayOdds: Optional[int] = None


class Moneyline(BaseModel):
    home: Optional[int] = None
    away: Optional[int] = None


class Total(BaseModel):
    overUnder: Optional[float] = None
    overOdds: Optional[int] = None
    underOdds: Optional[int] = None


class LiveOdds(BaseModel):
    spread: Spread
    moneyline: Moneyline
    total: Total


class SportsbookLine(BaseModel):
    name: Optional[str] = None
    spread: Optional[float] = None
    moneylineHome: Optional[int] = None
    moneylineAway: Optional[int] = None
    total: Optional[float] = None


class OddsQuote(BaseModel):
    gameId: Optional[str] = None
    date: Optional[str] = None
    dateDisplay: str = "TBD"
    homeTeam: Optional[str] = None
    awayTeam: Optional[str] = None
    status: Optional[str] = None
    sportsbook: Optional[str] = None
    spread: Spread = Field(default_factory=Spread)
    moneyline: Moneyline = Field(default_factory=Moneyline)
    total: Total = Field(default_factory=Total)
    live: Optional[LiveOdds] = None
    sportsbooks: List[SportsbookLine] = Field(default_factory=list)
    display: Dict[str, Optional[str]] = Field(default_factory=dict)
    isPhilly: bool = False
    phillyIsHome: Optional[bool] = None
    phillySpread: Optional[float] = None
    phillyMoneyline: Optional[int] = None


# ============================================================================
# STANDINGS
# ============================================================================

class StandingsEntry(BaseModel):
    team: str
    teamName: Optional[str] = None
    city: Optional[str] = None
    wins: int = 0
    losses: int = 0
    ties: int = 0
    otLosses: Optional[int] = None
    winPct: float = 0.0
    gamesBack: Optional[Any] = None
    streak: Optional[Any] = None
    lastTen: Optional[str] = None
    homeRecord: Optional[str] = None
    awayRecord: Optional[str] = None
    divisionRecord: Optional[str] = None
    conferenceRecord: Optional[str] = None
    pointsFor: Optional[float] = None
    pointsAgainst: Optional[float] = None
    pointDiff: Optional[float] = None
    isPhilly: bool = False
    division: Optional[str] = None
    conference: Optional[str] = None
    rank: int = 0
