"""Bracket engine exceptions. Raised before any state is written."""
from dataclasses import dataclass
from typing import Optional


class BracketError(Exception):
    """Base exception for bracket engine errors"""
    pass


class TiedScoreError(BracketError):
    """Kendo matches must have a winner; equal scores are rejected"""
    pass


class InvalidScoreError(BracketError):
    pass


class SlotNotReadyError(BracketError):
    """Score submitted while a side is still empty"""
    pass


class NoEligiblePlayerError(BracketError):
    """Walkover requested on a match with nobody seated"""
    pass


class NotAByeError(BracketError):
    """Walkover requested while an opponent is seated or can still arrive"""
    pass


class MatchAlreadyFinishedError(BracketError):
    pass


class UnknownMatchError(BracketError):
    def __init__(self, match_id: int):
        super().__init__(f"Match {match_id} not found")
        self.match_id = match_id


class UnknownPlayerError(BracketError):
    def __init__(self, player_id: str):
        super().__init__(f"Player {player_id} not found")
        self.player_id = player_id


class SlotLockedError(BracketError):
    """Slot is fed by another match; pass force=True to edit it anyway"""
    pass


class InvalidCommandError(BracketError):
    pass


class InvalidTransitionError(BracketError):
    """Tournament status change not allowed from the current status"""
    pass


@dataclass
class MalformedGraphWarning:
    """Non-fatal report about a graph shape the engine had to work around."""

    message: str
    match_id: Optional[int] = None


class TournamentNotFoundError(BracketError):
    def __init__(self, tournament_id: str):
        super().__init__(f"Tournament {tournament_id} not found")
        self.tournament_id = tournament_id
