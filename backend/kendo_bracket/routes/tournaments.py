import base64
import binascii
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field, field_validator
from sqlmodel import Session

from kendo_bracket.database import get_session
from kendo_bracket.models.bracket import Tournament, TournamentStatus
from kendo_bracket.services import snapshot_store, tournament_service
from kendo_bracket.services.errors import BracketError, InvalidTransitionError
from kendo_bracket.services.extraction_client import ExtractionClient, ExtractionError
from kendo_bracket.utils.guards import require_tournament, to_http_exception

router = APIRouter()


def get_extraction_client() -> ExtractionClient:
    return ExtractionClient()


class TournamentCreate(BaseModel):
    title: Optional[str] = None
    players: List[str] = Field(default_factory=list)
    total_matches: Optional[int] = Field(default=None, ge=0)


class TournamentUpdate(BaseModel):
    title: Optional[str] = None
    total_matches: Optional[int] = Field(default=None, ge=0)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if v is not None and not v.strip():
            raise ValueError("title cannot be blank")
        return v.strip() if v else v


class PlayersUpdate(BaseModel):
    names: List[str]


class InitializeMatchesRequest(BaseModel):
    total_matches: Optional[int] = Field(default=None, ge=1)


class ExtractionRequest(BaseModel):
    image_base64: str
    mime_type: str = "image/jpeg"


class TournamentSummary(BaseModel):
    id: str
    title: str
    status: TournamentStatus
    total_matches: int
    player_count: int
    finished_matches: int
    last_updated: int


def _summary(t: Tournament) -> TournamentSummary:
    finished, _ = tournament_service.progress(t)
    return TournamentSummary(
        id=t.id,
        title=t.title,
        status=t.status,
        total_matches=t.total_matches,
        player_count=len(t.players),
        finished_matches=finished,
        last_updated=t.last_updated,
    )


@router.get("/tournaments", response_model=List[TournamentSummary])
def list_tournaments(session: Session = Depends(get_session)):
    """List all tournaments, most recently updated first"""
    return [_summary(t) for t in snapshot_store.load_all(session)]


@router.post("/tournaments", response_model=Tournament, status_code=201)
def create_tournament(payload: TournamentCreate, session: Session = Depends(get_session)):
    """Create a tournament in SETUP, optionally with a roster and match count"""
    tournament = tournament_service.new_tournament(payload.title)
    update = {"players": tournament_service.build_roster(payload.players)}
    if payload.total_matches is not None:
        update["total_matches"] = payload.total_matches
    tournament = tournament.model_copy(update=update)
    return snapshot_store.persist(session, tournament)


@router.get("/tournaments/{tournament_id}", response_model=Tournament)
def get_tournament(tournament_id: str, session: Session = Depends(get_session)):
    """Get a full tournament snapshot"""
    return require_tournament(session, tournament_id)


@router.patch("/tournaments/{tournament_id}", response_model=Tournament)
def update_tournament(
    tournament_id: str, payload: TournamentUpdate, session: Session = Depends(get_session)
):
    """Rename a tournament; the match count can only change during setup"""
    tournament = require_tournament(session, tournament_id)
    update = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "total_matches" in update and tournament.status != TournamentStatus.SETUP:
        raise to_http_exception(
            InvalidTransitionError("total_matches can only change during setup")
        )
    tournament = tournament.model_copy(update=update)
    return snapshot_store.persist(session, tournament)


@router.delete("/tournaments/{tournament_id}", status_code=204)
def delete_tournament(tournament_id: str, session: Session = Depends(get_session)):
    """Delete a tournament record. Cannot be undone."""
    try:
        snapshot_store.delete_tournament(session, tournament_id)
    except BracketError as e:
        raise to_http_exception(e)
    return Response(status_code=204)


@router.put("/tournaments/{tournament_id}/players", response_model=Tournament)
def set_players(tournament_id: str, payload: PlayersUpdate, session: Session = Depends(get_session)):
    """Replace the roster; players get ids p1..pN in the order given"""
    tournament = require_tournament(session, tournament_id)
    try:
        tournament = tournament_service.set_roster(tournament, payload.names)
    except BracketError as e:
        raise to_http_exception(e)
    return snapshot_store.persist(session, tournament)


@router.post("/tournaments/{tournament_id}/extraction", response_model=Tournament)
def extract_from_image(
    tournament_id: str,
    payload: ExtractionRequest,
    session: Session = Depends(get_session),
    client: ExtractionClient = Depends(get_extraction_client),
):
    """Fill title, roster and match count from a photo of the bracket sheet"""
    tournament = require_tournament(session, tournament_id)
    try:
        image_bytes = base64.b64decode(payload.image_base64, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=422, detail="image_base64 is not valid base64")

    try:
        extracted = client.analyze(image_bytes, payload.mime_type)
    except ExtractionError as e:
        raise HTTPException(status_code=502, detail={"error": "ExtractionError", "message": str(e)})

    try:
        tournament = tournament_service.apply_extraction(tournament, extracted)
    except BracketError as e:
        raise to_http_exception(e)
    return snapshot_store.persist(session, tournament)


@router.post("/tournaments/{tournament_id}/matches/initialize", response_model=Tournament)
def initialize_matches(
    tournament_id: str,
    payload: Optional[InitializeMatchesRequest] = None,
    session: Session = Depends(get_session),
):
    """Create empty matches 1..total_matches (replaces any existing matches)"""
    tournament = require_tournament(session, tournament_id)
    total = payload.total_matches if payload else None
    try:
        tournament = tournament_service.initialize_matches(tournament, total)
    except BracketError as e:
        raise to_http_exception(e)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return snapshot_store.persist(session, tournament)


@router.post("/tournaments/{tournament_id}/start", response_model=Tournament)
def start_tournament(tournament_id: str, session: Session = Depends(get_session)):
    """Move a tournament from SETUP to ACTIVE"""
    tournament = require_tournament(session, tournament_id)
    try:
        tournament = tournament_service.start_tournament(tournament)
    except BracketError as e:
        raise to_http_exception(e)
    return snapshot_store.persist(session, tournament)
