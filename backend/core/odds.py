"""
Odds consensus selection and transformation.

A game carries quotes from several sportsbooks; one representative quote is
picked by a fixed name priority, not computed from the books.
"""
from typing import Any, Dict, List, Optional

from core.sport_config import PHILLY_ABBR
from core.sports_models import (
    LiveOdds,
    Moneyline,
    OddsQuote,
    Spread,
    SportsbookLine,
    Total,
)
from integrations.normalization import GAME_DATE_FIELDS, ODDS_GAME_ID_FIELDS, first_present
from utils.timezone import ET_TZ, format_display_datetime

CONSENSUS_PRIORITY = ("Consensus", "DraftKings", "FanDuel")
LIVE_CONSENSUS_PRIORITY = ("Consensus",)


def select_consensus(quotes: Optional[List[Dict[str, Any]]], priority=CONSENSUS_PRIORITY) -> Dict[str, Any]:
    """
    Pick the representative quote.

    Books are searched in `priority` order regardless of their position in
    `quotes`; with no named book present the first quote wins; with no quotes
    an empty dict is returned.
    """
    quotes = [q for q in (quotes or []) if isinstance(q, dict)]
    for book in priority:
        for quote in quotes:
            if quote.get("Sportsbook") == book:
                return quote
    return quotes[0] if quotes else {}


def format_spread(spread, team) -> Optional[str]:
    if spread is None:
        return None
    sign = "+" if spread > 0 else ""
    return f"{team} {sign}{_trim(spread)}"


def format_moneyline(home_ml, away_ml, home_team, away_team) -> Optional[str]:
    if not home_ml and not away_ml:
        return None
    return f"{home_team} {_signed(home_ml)} / {away_team} {_signed(away_ml)}"


def _signed(value) -> str:
    if value is None:
        return "-"
    return f"+{_trim(value)}" if value > 0 else str(_trim(value))


def _trim(value):
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def transform_odds(game: Dict[str, Any]) -> OddsQuote:
    """Reshape a SportsDataIO GameOdds record into an OddsQuote."""
    pregame = game.get("PregameOdds") or []
    consensus = select_consensus(pregame)
    live_consensus = select_consensus(game.get("LiveOdds"), LIVE_CONSENSUS_PRIORITY)

    home = game.get("HomeTeam")
    away = game.get("AwayTeam")
    game_id = first_present(game, ODDS_GAME_ID_FIELDS)
    date = first_present(game, GAME_DATE_FIELDS)

    live = None
    if live_consensus.get("HomePointSpread") is not None:
        live = LiveOdds(
            spread=Spread(home=live_consensus.get("HomePointSpread"), away=live_consensus.get("AwayPointSpread")),
            moneyline=Moneyline(home=live_consensus.get("HomeMoneyLine"), away=live_consensus.get("AwayMoneyLine")),
            total=Total(overUnder=live_consensus.get("OverUnder")),
        )

    over_under = consensus.get("OverUnder")
    philly_home = home == PHILLY_ABBR

    return OddsQuote(
        gameId=str(game_id) if game_id is not None else None,
        date=date,
        dateDisplay=format_display_datetime(date, ET_TZ),
        homeTeam=home,
        awayTeam=away,
        status=game.get("Status"),
        sportsbook=consensus.get("Sportsbook"),
        spread=Spread(
            home=consensus.get("HomePointSpread"),
            away=consensus.get("AwayPointSpread"),
            homeOdds=consensus.get("HomePointSpreadPayout"),
            awayOdds=consensus.get("AwayPointSpreadPayout"),
        ),
        moneyline=Moneyline(home=consensus.get("HomeMoneyLine"), away=consensus.get("AwayMoneyLine")),
        total=Total(
            overUnder=over_under,
            overOdds=consensus.get("OverPayout"),
            underOdds=consensus.get("UnderPayout"),
        ),
        live=live,
        sportsbooks=[
            SportsbookLine(
                name=q.get("Sportsbook"),
                spread=q.get("HomePointSpread"),
                moneylineHome=q.get("HomeMoneyLine"),
                moneylineAway=q.get("AwayMoneyLine"),
                total=q.get("OverUnder"),
            )
            for q in pregame if isinstance(q, dict)
        ],
        display={
            "spread": format_spread(consensus.get("HomePointSpread"), home),
            "moneyline": format_moneyline(consensus.get("HomeMoneyLine"), consensus.get("AwayMoneyLine"), home, away),
            "total": f"O/U {_trim(over_under)}" if over_under else None,
        },
        isPhilly=philly_home or away == PHILLY_ABBR,
        phillyIsHome=philly_home,
        phillySpread=consensus.get("HomePointSpread") if philly_home else consensus.get("AwayPointSpread"),
        phillyMoneyline=consensus.get("HomeMoneyLine") if philly_home else consensus.get("AwayMoneyLine"),
    )


def is_team_game(game: Dict[str, Any], team: Optional[str]) -> bool:
    """Team filter used by the odds feed; no team means Philly games only."""
    target = (team or PHILLY_ABBR).upper()
    return (game.get("HomeTeam") or "").upper() == target or (game.get("AwayTeam") or "").upper() == target
