"""
Round layout: place each match by its distance from the final.

Depth is computed by walking feeder edges (winner and loser) backwards from the
root. A match reachable along several paths takes the longest one, so it lands
in the earliest column that still precedes everything it feeds.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from kendo_bracket.models.bracket import Match, Tournament
from kendo_bracket.services.errors import MalformedGraphWarning

logger = logging.getLogger(__name__)

# Traversal stops past this depth; cyclic edges would otherwise never terminate.
MAX_LAYOUT_DEPTH = 10


@dataclass
class RoundLayout:
    """Matches grouped into rounds, earliest round first, final last."""

    rounds: List[List[Match]]
    depths: Dict[int, int]
    warnings: List[MalformedGraphWarning] = field(default_factory=list)


def default_root_match_id(tournament: Tournament) -> int:
    """The final is assumed to carry the last id."""
    return tournament.total_matches


def round_label(index: int, round_count: int) -> str:
    if index == round_count - 1:
        return "Finals"
    return f"Round {index + 1}"


def _feeders_by_target(matches: List[Match]) -> Dict[int, List[int]]:
    feeders: Dict[int, List[int]] = {}
    for m in matches:
        targets = {e.to_match_id for e in (m.winner_edge, m.loser_edge) if e is not None}
        for target in targets:
            feeders.setdefault(target, []).append(m.id)
    return feeders


def layout(matches: List[Match], root_match_id: int) -> RoundLayout:
    warnings: List[MalformedGraphWarning] = []
    by_id = {m.id: m for m in matches}
    feeders = _feeders_by_target(matches)
    depths: Dict[int, int] = {}

    def warn(message: str, match_id: int) -> None:
        warnings.append(MalformedGraphWarning(message=message, match_id=match_id))
        logger.warning(message)

    def visit(match_id: int, depth: int) -> None:
        if depth > MAX_LAYOUT_DEPTH:
            return
        if depth > depths.get(match_id, -1):
            depths[match_id] = depth
        for feeder_id in feeders.get(match_id, []):
            visit(feeder_id, depth + 1)

    root = by_id.get(root_match_id)
    if root is None:
        warn(f"Layout root {root_match_id} does not exist", root_match_id)
    else:
        if not root.is_root:
            warn(
                f"Layout root {root_match_id} sends its winner to match "
                f"{root.winner_edge.to_match_id}",
                root_match_id,
            )
        visit(root_match_id, 0)

    for m in sorted(matches, key=lambda m: m.id):
        if m.id in depths:
            continue
        parent_ids = [e.to_match_id for e in (m.winner_edge, m.loser_edge) if e is not None]
        placed = [p for p in parent_ids if p in by_id and p in depths]
        if placed:
            visit(m.id, depths[placed[0]] + 1)
            if m.id not in depths:
                warn(
                    f"Match {m.id} lies deeper than {MAX_LAYOUT_DEPTH} rounds "
                    f"from layout root {root_match_id} and was left out",
                    m.id,
                )
                continue
        else:
            depths[m.id] = 0
        warn(f"Match {m.id} is not connected to layout root {root_match_id}", m.id)

    max_depth = max(depths.values(), default=0)
    rounds = [
        sorted((m for m in matches if depths.get(m.id) == d), key=lambda m: m.id)
        for d in range(max_depth, -1, -1)
    ]
    return RoundLayout(rounds=rounds, depths=depths, warnings=warnings)
