from kendo_bracket.models.bracket import (
    Edge,
    Match,
    MatchResult,
    Player,
    Slot,
    Tournament,
    TournamentStatus,
)
from kendo_bracket.models.tournament import TournamentSnapshot

__all__ = [
    "Edge",
    "Match",
    "MatchResult",
    "Player",
    "Slot",
    "Tournament",
    "TournamentStatus",
    "TournamentSnapshot",
]
