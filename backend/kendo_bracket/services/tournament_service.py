"""
Tournament lifecycle: roster entry, match-set initialization and status changes.

Status moves SETUP -> ACTIVE -> FINISHED. The engine itself never advances the
status; the API calls start_tournament and refresh_status at the right moments.
"""
from __future__ import annotations

import logging
import uuid
from typing import Iterable, List, Optional, Tuple

from kendo_bracket.models.bracket import (
    DEFAULT_TITLE,
    Match,
    Player,
    Tournament,
    TournamentStatus,
)
from kendo_bracket.services.errors import InvalidTransitionError

logger = logging.getLogger(__name__)


def new_tournament(title: Optional[str] = None) -> Tournament:
    return Tournament(
        id=f"t{uuid.uuid4().hex}",
        title=(title or "").strip() or DEFAULT_TITLE,
        status=TournamentStatus.SETUP,
    )


def build_roster(names: Iterable[str]) -> List[Player]:
    """Players p1..pN in the order given; blank lines are dropped."""
    cleaned = [n.strip() for n in names if n and n.strip()]
    return [Player(id=f"p{i}", name=name) for i, name in enumerate(cleaned, start=1)]


def _require_setup(tournament: Tournament, action: str) -> None:
    if tournament.status != TournamentStatus.SETUP:
        raise InvalidTransitionError(
            f"Cannot {action} while tournament is {tournament.status.value}"
        )


def set_roster(tournament: Tournament, names: Iterable[str]) -> Tournament:
    _require_setup(tournament, "change the roster")
    return tournament.model_copy(update={"players": build_roster(names)})


def apply_extraction(tournament: Tournament, extracted) -> Tournament:
    """Reset setup data from an extraction result (title, roster, match count)."""
    _require_setup(tournament, "apply an extracted bracket")
    return tournament.model_copy(
        update={
            "title": extracted.title.strip() or tournament.title,
            "players": build_roster(extracted.players),
            "total_matches": extracted.total_matches or 1,
            "matches": [],
        }
    )


def initialize_matches(tournament: Tournament, total_matches: Optional[int] = None) -> Tournament:
    """Create empty matches 1..N, replacing any existing match set."""
    _require_setup(tournament, "initialize matches")
    count = tournament.total_matches if total_matches is None else total_matches
    if count < 1:
        raise ValueError("total_matches must be at least 1")
    matches = [Match(id=i) for i in range(1, count + 1)]
    return tournament.model_copy(update={"matches": matches, "total_matches": count})


def start_tournament(tournament: Tournament) -> Tournament:
    _require_setup(tournament, "start")
    if not tournament.matches:
        raise InvalidTransitionError("Initialize matches before starting the tournament")
    logger.info("Tournament %s started with %d matches", tournament.id, len(tournament.matches))
    return tournament.model_copy(update={"status": TournamentStatus.ACTIVE})


def progress(tournament: Tournament) -> Tuple[int, int]:
    finished = sum(1 for m in tournament.matches if m.is_finished)
    return finished, len(tournament.matches)


def refresh_status(tournament: Tournament) -> Tournament:
    """ACTIVE becomes FINISHED once every match has a result."""
    finished, total = progress(tournament)
    if tournament.status == TournamentStatus.ACTIVE and total > 0 and finished == total:
        logger.info("Tournament %s finished", tournament.id)
        return tournament.model_copy(update={"status": TournamentStatus.FINISHED})
    return tournament
