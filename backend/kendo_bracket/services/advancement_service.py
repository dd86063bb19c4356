"""
Advancement: when a match result is recorded, route its winner (and loser) into
downstream match slots.

Pure functions over the Tournament value. Nothing here touches the database;
callers persist the returned tournament (see services/snapshot_store.py).

Guarantees:
    - Only the finished match and its edge targets change
    - Validation happens before any write; errors leave the input untouched
    - place_player is idempotent
"""
from __future__ import annotations

import logging
from typing import Collection, List, Optional

from kendo_bracket.models.bracket import (
    WALKOVER_DETAILS,
    Edge,
    Match,
    MatchResult,
    Slot,
    Tournament,
)
from kendo_bracket.services.errors import (
    InvalidScoreError,
    MalformedGraphWarning,
    MatchAlreadyFinishedError,
    NoEligiblePlayerError,
    NotAByeError,
    SlotNotReadyError,
    TiedScoreError,
)
from kendo_bracket.services.slot_resolution import MatchState, match_state, require_match

logger = logging.getLogger(__name__)


def _resolve_auto(target: Match, player_id: str, source_participants: Collection[str]) -> Match:
    # Correction mode: a slot still holding someone from the same source match
    # is stale advancement from an earlier submission.
    if target.red_player_id and target.red_player_id in source_participants:
        return target.with_slot(Slot.RED, player_id)
    if target.white_player_id and target.white_player_id in source_participants:
        return target.with_slot(Slot.WHITE, player_id)

    if not target.red_player_id:
        return target.with_slot(Slot.RED, player_id)
    if not target.white_player_id:
        return target.with_slot(Slot.WHITE, player_id)

    warning = MalformedGraphWarning(
        match_id=target.id,
        message=(
            f"Match {target.id} is full and holds no source participant; "
            f"player {player_id} was not placed"
        ),
    )
    logger.warning(warning.message)
    return target


def place_player(
    matches: List[Match],
    target_match_id: int,
    player_id: str,
    target_slot: Slot,
    source_participants: Collection[str] = (),
) -> List[Match]:
    """
    Seat player_id in the target match and return the updated match list.

    RED/WHITE overwrite that side unconditionally. AUTO overwrites a side that
    holds one of source_participants, else fills the first empty side (red
    first), else leaves the match unchanged.
    """
    target = require_match(matches, target_match_id)

    if target_slot in (Slot.RED, Slot.WHITE):
        updated = target.with_slot(target_slot, player_id)
    else:
        updated = _resolve_auto(target, player_id, source_participants)

    return [updated if m.id == target_match_id else m for m in matches]


def _route(matches: List[Match], edge: Optional[Edge], player_id: Optional[str], participants) -> List[Match]:
    if edge is None or not player_id:
        return matches
    return place_player(matches, edge.to_match_id, player_id, edge.to_slot, participants)


def _record(matches: List[Match], match_id: int, result: MatchResult) -> List[Match]:
    return [m.model_copy(update={"result": result}) if m.id == match_id else m for m in matches]


def submit_score(
    tournament: Tournament,
    match_id: int,
    red_score: int,
    white_score: int,
    details: str = "",
) -> Tournament:
    """
    Record a scored result and advance winner and loser.

    Re-submitting a finished match is allowed: the result is replaced and
    placement's correction mode overwrites the stale downstream players.

    Raises:
        UnknownMatchError, SlotNotReadyError, InvalidScoreError, TiedScoreError
    """
    match = require_match(tournament.matches, match_id)
    if not match.red_player_id or not match.white_player_id:
        raise SlotNotReadyError(f"Match {match_id} needs both players before scoring")
    if red_score < 0 or white_score < 0:
        raise InvalidScoreError("Scores cannot be negative")
    if red_score == white_score:
        raise TiedScoreError(f"Match {match_id} must have a winner ({red_score}-{white_score})")

    if red_score > white_score:
        winner_id, loser_id = match.red_player_id, match.white_player_id
    else:
        winner_id, loser_id = match.white_player_id, match.red_player_id

    result = MatchResult(
        winner_id=winner_id,
        red_score=red_score,
        white_score=white_score,
        details=details,
    )
    participants = {match.red_player_id, match.white_player_id}

    matches = _record(tournament.matches, match_id, result)
    matches = _route(matches, match.winner_edge, winner_id, participants)
    matches = _route(matches, match.loser_edge, loser_id, participants)

    logger.info(
        "Match %d finished %d-%d, winner %s%s",
        match_id,
        red_score,
        white_score,
        winner_id,
        " (re-submitted)" if match.is_finished else "",
    )
    return tournament.with_matches(matches)


def walkover(tournament: Tournament, match_id: int) -> Tournament:
    """
    Advance the sole seated player of a bye.

    The loser edge is never followed: there is no loser, so a consolation
    slot fed only by walkovers stays empty.

    Raises:
        UnknownMatchError, MatchAlreadyFinishedError, NoEligiblePlayerError,
        NotAByeError (both sides seated, or the empty side still has a feeder)
    """
    match = require_match(tournament.matches, match_id)
    if match.is_finished:
        raise MatchAlreadyFinishedError(f"Match {match_id} already has a result")

    seated = match.participants()
    if not seated:
        raise NoEligiblePlayerError(f"Match {match_id} has no seated player to advance")
    state = match_state(tournament.matches, match)
    if state != MatchState.BYE:
        raise NotAByeError(f"Match {match_id} is {state.value}, not a bye")
    winner_id = seated[0]

    result = MatchResult(winner_id=winner_id, red_score=0, white_score=0, details=WALKOVER_DETAILS)
    matches = _record(tournament.matches, match_id, result)
    matches = _route(matches, match.winner_edge, winner_id, set(seated))

    logger.info("Match %d walkover, %s advances", match_id, winner_id)
    return tournament.with_matches(matches)
