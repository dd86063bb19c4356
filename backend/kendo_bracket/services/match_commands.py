"""
Setup commands: the only way match slots and edges are edited by hand.

Each command is a small tagged pydantic model; apply_command validates it
against the current tournament and returns the updated tournament.
"""
from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from kendo_bracket.models.bracket import Edge, Slot, Tournament
from kendo_bracket.services.errors import (
    InvalidCommandError,
    SlotLockedError,
    UnknownPlayerError,
)
from kendo_bracket.services.slot_resolution import is_slot_locked, require_match


class SetRedPlayer(BaseModel):
    kind: Literal["set_red_player"] = "set_red_player"
    match_id: int
    player_id: Optional[str] = None
    force: bool = False  # edit a slot that another match feeds


class SetWhitePlayer(BaseModel):
    kind: Literal["set_white_player"] = "set_white_player"
    match_id: int
    player_id: Optional[str] = None
    force: bool = False


class SetWinnerEdge(BaseModel):
    kind: Literal["set_winner_edge"] = "set_winner_edge"
    match_id: int
    to_match_id: Optional[int] = None  # None removes the edge (match becomes a root)
    to_slot: Slot = Slot.AUTO


class SetLoserEdge(BaseModel):
    kind: Literal["set_loser_edge"] = "set_loser_edge"
    match_id: int
    to_match_id: Optional[int] = None
    to_slot: Slot = Slot.AUTO


MatchCommand = Annotated[
    Union[SetRedPlayer, SetWhitePlayer, SetWinnerEdge, SetLoserEdge],
    Field(discriminator="kind"),
]


def _seat(tournament: Tournament, command, slot: Slot) -> Tournament:
    match = require_match(tournament.matches, command.match_id)
    if command.player_id and tournament.find_player(command.player_id) is None:
        raise UnknownPlayerError(command.player_id)
    if not command.force and is_slot_locked(tournament.matches, match.id, slot):
        raise SlotLockedError(
            f"The {slot.value} side of match {match.id} is fed by another match"
        )
    updated = match.with_slot(slot, command.player_id or None)
    return tournament.with_matches(
        [updated if m.id == match.id else m for m in tournament.matches]
    )


def _route(tournament: Tournament, command, field_name: str) -> Tournament:
    match = require_match(tournament.matches, command.match_id)
    edge = None
    if command.to_match_id is not None:
        if command.to_match_id == match.id:
            raise InvalidCommandError(f"Match {match.id} cannot feed itself")
        require_match(tournament.matches, command.to_match_id)
        edge = Edge(to_match_id=command.to_match_id, to_slot=command.to_slot)
    updated = match.model_copy(update={field_name: edge})
    return tournament.with_matches(
        [updated if m.id == match.id else m for m in tournament.matches]
    )


def apply_command(tournament: Tournament, command: MatchCommand) -> Tournament:
    if isinstance(command, SetRedPlayer):
        return _seat(tournament, command, Slot.RED)
    if isinstance(command, SetWhitePlayer):
        return _seat(tournament, command, Slot.WHITE)
    if isinstance(command, SetWinnerEdge):
        return _route(tournament, command, "winner_edge")
    if isinstance(command, SetLoserEdge):
        return _route(tournament, command, "loser_edge")
    raise InvalidCommandError(f"Unsupported command: {command!r}")
