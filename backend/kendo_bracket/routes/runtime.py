"""
Runtime: match setup commands, scoring, walkovers and derived views (rankings, rounds).

Every mutating call loads the tournament snapshot, applies one engine function
and persists the whole snapshot again.
"""
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlmodel import Session

from kendo_bracket.database import get_session
from kendo_bracket.models.bracket import Match, Slot, Tournament, TournamentStatus
from kendo_bracket.services import snapshot_store, tournament_service
from kendo_bracket.services.advancement_service import submit_score, walkover
from kendo_bracket.services.errors import BracketError, InvalidTransitionError
from kendo_bracket.services.match_commands import MatchCommand, apply_command
from kendo_bracket.services.ranking_service import DEFAULT_RANKING_LIMIT, rankings
from kendo_bracket.services.round_layout import default_root_match_id, layout, round_label
from kendo_bracket.services.slot_resolution import (
    feeders_of,
    incoming_counts,
    match_state,
    waiting_label,
)
from kendo_bracket.utils.guards import require_running, require_tournament, to_http_exception

router = APIRouter()


class ScoreSubmission(BaseModel):
    red_score: int
    white_score: int
    details: str = ""


class MatchCommandRequest(BaseModel):
    command: MatchCommand


class FeederState(BaseModel):
    match_id: int
    kind: str


class MatchView(BaseModel):
    match: Match
    state: str
    red_feeders: List[FeederState]
    white_feeders: List[FeederState]
    incoming_red: int
    incoming_white: int
    red_label: Optional[str] = None
    white_label: Optional[str] = None


class MatchListResponse(BaseModel):
    tournament_id: str
    status: TournamentStatus
    finished_matches: int
    total_matches: int
    matches: List[MatchView]


class RankingEntryState(BaseModel):
    player_id: str
    player_name: str
    title: str
    rank_order: int


class RoundState(BaseModel):
    label: str
    depth: int
    match_ids: List[int]


class WarningState(BaseModel):
    match_id: Optional[int] = None
    message: str


class LayoutResponse(BaseModel):
    root_match_id: int
    rounds: List[RoundState]
    depths: Dict[int, int]
    warnings: List[WarningState] = Field(default_factory=list)


def _label(matches: List[Match], m: Match, slot: Slot) -> Optional[str]:
    if m.occupant(slot):
        return None
    return waiting_label(matches, m.id, slot)


def _match_view(matches: List[Match], m: Match) -> MatchView:
    counts = incoming_counts(matches, m.id)
    return MatchView(
        match=m,
        state=match_state(matches, m).value,
        red_feeders=[
            FeederState(match_id=f.source_match.id, kind=f.kind) for f in feeders_of(matches, m.id, Slot.RED)
        ],
        white_feeders=[
            FeederState(match_id=f.source_match.id, kind=f.kind) for f in feeders_of(matches, m.id, Slot.WHITE)
        ],
        incoming_red=counts.red,
        incoming_white=counts.white,
        red_label=_label(matches, m, Slot.RED),
        white_label=_label(matches, m, Slot.WHITE),
    )


@router.get("/tournaments/{tournament_id}/matches", response_model=MatchListResponse)
def list_matches(tournament_id: str, session: Session = Depends(get_session)):
    """Matches with their state and feeder info. Unfinished first, then by id."""
    tournament = require_tournament(session, tournament_id)
    ordered = sorted(tournament.matches, key=lambda m: (m.is_finished, m.id))
    finished, total = tournament_service.progress(tournament)
    return MatchListResponse(
        tournament_id=tournament.id,
        status=tournament.status,
        finished_matches=finished,
        total_matches=total,
        matches=[_match_view(tournament.matches, m) for m in ordered],
    )


@router.post("/tournaments/{tournament_id}/matches/{match_id}/commands", response_model=Tournament)
def run_match_command(
    tournament_id: str,
    match_id: int,
    payload: MatchCommandRequest,
    session: Session = Depends(get_session),
):
    """Apply one setup command (seat a player, set a winner/loser edge) to a match"""
    tournament = require_tournament(session, tournament_id)
    command = payload.command
    if command.match_id != match_id:
        raise HTTPException(status_code=422, detail="command.match_id does not match the URL")
    if tournament.status == TournamentStatus.FINISHED:
        raise to_http_exception(InvalidTransitionError("Tournament is finished"))
    try:
        tournament = apply_command(tournament, command)
    except BracketError as e:
        raise to_http_exception(e)
    return snapshot_store.persist(session, tournament)


@router.post("/tournaments/{tournament_id}/matches/{match_id}/score", response_model=Tournament)
def score_match(
    tournament_id: str,
    match_id: int,
    payload: ScoreSubmission,
    session: Session = Depends(get_session),
):
    """Record a result; winner and loser are routed to their next matches"""
    tournament = require_running(require_tournament(session, tournament_id))
    try:
        tournament = submit_score(
            tournament, match_id, payload.red_score, payload.white_score, payload.details
        )
    except BracketError as e:
        raise to_http_exception(e)
    tournament = tournament_service.refresh_status(tournament)
    return snapshot_store.persist(session, tournament)


@router.post("/tournaments/{tournament_id}/matches/{match_id}/walkover", response_model=Tournament)
def walkover_match(tournament_id: str, match_id: int, session: Session = Depends(get_session)):
    """Advance the only seated player of a bye"""
    tournament = require_running(require_tournament(session, tournament_id))
    try:
        tournament = walkover(tournament, match_id)
    except BracketError as e:
        raise to_http_exception(e)
    tournament = tournament_service.refresh_status(tournament)
    return snapshot_store.persist(session, tournament)


@router.get("/tournaments/{tournament_id}/rankings", response_model=List[RankingEntryState])
def get_rankings(
    tournament_id: str,
    limit: int = Query(default=DEFAULT_RANKING_LIMIT, ge=1),
    session: Session = Depends(get_session),
):
    """Final standings derived from finished root matches and their feeders"""
    tournament = require_tournament(session, tournament_id)
    return [
        RankingEntryState(
            player_id=e.player_id, player_name=e.player_name, title=e.title, rank_order=e.rank_order
        )
        for e in rankings(tournament, limit)
    ]


@router.get("/tournaments/{tournament_id}/layout", response_model=LayoutResponse)
def get_layout(
    tournament_id: str,
    root_match_id: Optional[int] = Query(default=None),
    session: Session = Depends(get_session),
):
    """Matches grouped into rounds by distance from the final, earliest first"""
    tournament = require_tournament(session, tournament_id)
    root_id = root_match_id if root_match_id is not None else default_root_match_id(tournament)
    result = layout(tournament.matches, root_id)
    count = len(result.rounds)
    return LayoutResponse(
        root_match_id=root_id,
        rounds=[
            RoundState(label=round_label(i, count), depth=count - 1 - i, match_ids=[m.id for m in group])
            for i, group in enumerate(result.rounds)
        ],
        depths=result.depths,
        warnings=[WarningState(match_id=w.match_id, message=w.message) for w in result.warnings],
    )
