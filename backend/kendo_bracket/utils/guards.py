"""
Route guards and engine-error translation.

Routes load the tournament through require_tournament and wrap engine calls so
BracketError subclasses surface as 404/422 responses.
"""

from fastapi import HTTPException
from sqlmodel import Session

from kendo_bracket.models.bracket import Tournament, TournamentStatus
from kendo_bracket.services import snapshot_store
from kendo_bracket.services.errors import (
    BracketError,
    TournamentNotFoundError,
    UnknownMatchError,
    UnknownPlayerError,
)

_NOT_FOUND = (TournamentNotFoundError, UnknownMatchError, UnknownPlayerError)


def to_http_exception(error: BracketError) -> HTTPException:
    """
    Map an engine error to an HTTPException.

    Unknown tournament/match/player -> 404, everything else -> 422.
    The detail carries the error class name so clients can branch on it.
    """
    status_code = 404 if isinstance(error, _NOT_FOUND) else 422
    return HTTPException(
        status_code=status_code,
        detail={"error": type(error).__name__, "message": str(error)},
    )


def require_tournament(session: Session, tournament_id: str) -> Tournament:
    """
    Load a tournament snapshot or raise 404.

    Raises:
        HTTPException 404: Tournament not found
    """
    try:
        return snapshot_store.get_tournament(session, tournament_id)
    except TournamentNotFoundError as e:
        raise to_http_exception(e)


def require_running(tournament: Tournament) -> Tournament:
    """
    Results can only be entered once the tournament has been started.

    Raises:
        HTTPException 422: Tournament still in SETUP
    """
    if tournament.status == TournamentStatus.SETUP:
        raise HTTPException(
            status_code=422,
            detail={
                "error": "InvalidTransitionError",
                "message": "Start the tournament before entering results",
            },
        )
    return tournament
