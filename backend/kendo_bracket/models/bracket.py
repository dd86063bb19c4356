"""
Bracket domain model: players, matches, routing edges, results and the tournament aggregate.

These are plain pydantic values, not database tables. A tournament is stored as one
JSON snapshot (see models/tournament.py); field aliases are camelCase so the stored
snapshot reads as {id, lastUpdated, title, players, matches, totalMatches, status}.
"""
from __future__ import annotations

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_TITLE = "New Kendo Tournament"
WALKOVER_DETAILS = "walkover"


class Slot(str, Enum):
    RED = "red"
    WHITE = "white"
    AUTO = "auto"  # edge target only; resolved at placement time


class TournamentStatus(str, Enum):
    SETUP = "SETUP"
    ACTIVE = "ACTIVE"
    FINISHED = "FINISHED"


class _Snapshot(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Player(_Snapshot):
    id: str
    name: str


class Edge(_Snapshot):
    """Where a match's winner (or loser) goes next."""

    to_match_id: int
    to_slot: Slot = Slot.AUTO


class MatchResult(_Snapshot):
    winner_id: str
    red_score: int = Field(default=0, ge=0)
    white_score: int = Field(default=0, ge=0)
    details: str = ""


class Match(_Snapshot):
    id: int
    red_player_id: Optional[str] = None
    white_player_id: Optional[str] = None
    winner_edge: Optional[Edge] = None  # None marks a root match
    loser_edge: Optional[Edge] = None
    result: Optional[MatchResult] = None

    @property
    def is_finished(self) -> bool:
        return self.result is not None

    @property
    def is_root(self) -> bool:
        return self.winner_edge is None

    def occupant(self, slot: Slot) -> Optional[str]:
        if slot == Slot.RED:
            return self.red_player_id
        if slot == Slot.WHITE:
            return self.white_player_id
        raise ValueError(f"A match has no {slot.value} side")

    def participants(self) -> Tuple[str, ...]:
        """Player ids currently seated, red first."""
        return tuple(p for p in (self.red_player_id, self.white_player_id) if p)

    def loser_id(self) -> Optional[str]:
        """
        The occupant who is not the recorded winner (None while unfinished).

        Read from the current slots, not stored with the result. Re-submitting
        an upstream match after this one finished can rewrite a slot here: if
        the winner's slot was rewritten this returns None, but if the loser's
        slot was rewritten it returns the new occupant, who never played.
        """
        if self.result is None:
            return None
        if self.result.winner_id == self.red_player_id:
            return self.white_player_id
        if self.result.winner_id == self.white_player_id:
            return self.red_player_id
        return None

    def with_slot(self, slot: Slot, player_id: Optional[str]) -> "Match":
        if slot == Slot.RED:
            return self.model_copy(update={"red_player_id": player_id})
        if slot == Slot.WHITE:
            return self.model_copy(update={"white_player_id": player_id})
        raise ValueError("Cannot seat a player on the auto side")


class Tournament(_Snapshot):
    id: str
    last_updated: int = 0  # epoch milliseconds
    title: str = DEFAULT_TITLE
    players: List[Player] = Field(default_factory=list)
    matches: List[Match] = Field(default_factory=list)
    total_matches: int = 0
    status: TournamentStatus = TournamentStatus.SETUP

    def find_match(self, match_id: int) -> Optional[Match]:
        for match in self.matches:
            if match.id == match_id:
                return match
        return None

    def find_player(self, player_id: Optional[str]) -> Optional[Player]:
        if not player_id:
            return None
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def with_matches(self, matches: List[Match]) -> "Tournament":
        return self.model_copy(update={"matches": sorted(matches, key=lambda m: m.id)})

    def to_snapshot(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
