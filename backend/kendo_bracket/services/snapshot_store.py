"""
Snapshot store: whole-tournament persistence.

Each tournament is written as one JSON payload row. Writes are last-write-wins
at snapshot granularity; there is no partial update or merge.
"""
from __future__ import annotations

import logging
import time
from typing import List

from pydantic import ValidationError
from sqlmodel import Session, select

from kendo_bracket.models.bracket import Tournament
from kendo_bracket.models.tournament import TournamentSnapshot
from kendo_bracket.services.errors import TournamentNotFoundError

logger = logging.getLogger(__name__)


def now_millis() -> int:
    return int(time.time() * 1000)


def _write_row(session: Session, tournament: Tournament) -> None:
    row = session.get(TournamentSnapshot, tournament.id)
    if row is None:
        row = TournamentSnapshot(id=tournament.id, title=tournament.title)
    row.title = tournament.title
    row.status = tournament.status.value
    row.total_matches = tournament.total_matches
    row.last_updated = tournament.last_updated
    row.payload = tournament.to_snapshot()
    session.add(row)


def _read_row(row: TournamentSnapshot) -> Tournament:
    return Tournament.model_validate(row.payload)


def load_all(session: Session) -> List[Tournament]:
    """Every stored tournament, most recently updated first. Unreadable rows are skipped."""
    rows = session.exec(
        select(TournamentSnapshot).order_by(TournamentSnapshot.last_updated.desc())
    ).all()
    tournaments: List[Tournament] = []
    for row in rows:
        try:
            tournaments.append(_read_row(row))
        except ValidationError:
            logger.exception("Skipping unreadable snapshot %s", row.id)
    return tournaments


def save_all(session: Session, tournaments: List[Tournament]) -> None:
    """Replace the stored collection with exactly these tournaments."""
    keep = {t.id for t in tournaments}
    for row in session.exec(select(TournamentSnapshot)).all():
        if row.id not in keep:
            session.delete(row)
    for tournament in tournaments:
        _write_row(session, tournament)
    session.commit()


def get_tournament(session: Session, tournament_id: str) -> Tournament:
    row = session.get(TournamentSnapshot, tournament_id)
    if row is None:
        raise TournamentNotFoundError(tournament_id)
    return _read_row(row)


def persist(session: Session, tournament: Tournament) -> Tournament:
    """Stamp last_updated and write this one snapshot. Returns the stamped value."""
    stamped = tournament.model_copy(update={"last_updated": now_millis()})
    _write_row(session, stamped)
    session.commit()
    logger.info("Saved tournament %s (%s)", stamped.id, stamped.status.value)
    return stamped


def delete_tournament(session: Session, tournament_id: str) -> None:
    row = session.get(TournamentSnapshot, tournament_id)
    if row is None:
        raise TournamentNotFoundError(tournament_id)
    session.delete(row)
    session.commit()
