"""
Slot resolution: which upstream matches feed a given match side, and what that
means for the match's state.

An AUTO edge cannot be pinned to a side until placement time, so it counts as a
potential feeder of both sides. That keeps a slot "waiting" (and locked against
manual edits) whenever it might still be filled by routing.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from kendo_bracket.models.bracket import Edge, Match, Slot
from kendo_bracket.services.errors import UnknownMatchError

KIND_WINNER = "WINNER"
KIND_LOSER = "LOSER"


class MatchState(str, Enum):
    EMPTY = "EMPTY"  # nothing seated and nothing will ever arrive
    WAITING = "WAITING"
    READY = "READY"
    BYE = "BYE"
    FINISHED = "FINISHED"


@dataclass
class Feeder:
    source_match: Match
    kind: str  # KIND_WINNER | KIND_LOSER


@dataclass
class IncomingCounts:
    red: int = 0
    white: int = 0

    def for_slot(self, slot: Slot) -> int:
        return self.red if slot == Slot.RED else self.white


def require_match(matches: Iterable[Match], match_id: int) -> Match:
    for match in matches:
        if match.id == match_id:
            return match
    raise UnknownMatchError(match_id)


def _targets(edge: Optional[Edge], match_id: int, slot: Slot) -> bool:
    if edge is None or edge.to_match_id != match_id:
        return False
    return edge.to_slot == slot or edge.to_slot == Slot.AUTO


def feeders_of(matches: Iterable[Match], match_id: int, slot: Slot) -> List[Feeder]:
    """Every match whose winner or loser edge may land in match_id's given side."""
    feeders: List[Feeder] = []
    for m in matches:
        if _targets(m.winner_edge, match_id, slot):
            feeders.append(Feeder(source_match=m, kind=KIND_WINNER))
        if _targets(m.loser_edge, match_id, slot):
            feeders.append(Feeder(source_match=m, kind=KIND_LOSER))
    return feeders


def incoming_counts(matches: Iterable[Match], match_id: int) -> IncomingCounts:
    counts = IncomingCounts()
    for m in matches:
        for edge in (m.winner_edge, m.loser_edge):
            if edge is None or edge.to_match_id != match_id:
                continue
            if edge.to_slot == Slot.RED:
                counts.red += 1
            elif edge.to_slot == Slot.WHITE:
                counts.white += 1
            else:
                counts.red += 1
                counts.white += 1
    return counts


def is_slot_locked(matches: Iterable[Match], match_id: int, slot: Slot) -> bool:
    """An externally fed slot is not manually editable."""
    return incoming_counts(matches, match_id).for_slot(slot) > 0


def match_state(matches: List[Match], match: Match) -> MatchState:
    if match.is_finished:
        return MatchState.FINISHED
    if match.red_player_id and match.white_player_id:
        return MatchState.READY

    counts = incoming_counts(matches, match.id)
    red_present = bool(match.red_player_id) or counts.red > 0
    white_present = bool(match.white_player_id) or counts.white > 0
    red_terminal = not match.red_player_id and counts.red == 0
    white_terminal = not match.white_player_id and counts.white == 0

    if (red_present and white_terminal) or (white_present and red_terminal):
        return MatchState.BYE
    if red_present or white_present:
        return MatchState.WAITING
    return MatchState.EMPTY


def waiting_label(matches: Iterable[Match], match_id: int, slot: Slot) -> str:
    """Short placeholder for an empty side, e.g. 'Wait W-#3'."""
    feeders = feeders_of(matches, match_id, slot)
    for kind, prefix in ((KIND_WINNER, "W"), (KIND_LOSER, "L")):
        for feeder in feeders:
            if feeder.kind == kind:
                return f"Wait {prefix}-#{feeder.source_match.id}"
    return "Waiting..."
