"""
Final standings derived from bracket topology.

Roots (matches with no winner edge) are split into championship finals and
consolation finals; a root is a consolation final when any loser edge points at
it. Deeper places (joint 3rd/5th/9th) are read off the losers of the matches
that feed the finals, one winner-edge hop at a time.

Roots in each group are visited in descending id order. This assumes authors
number the bigger final last; it is a heuristic, not a rule of the sport.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Set

from kendo_bracket.models.bracket import Match, Tournament

TITLE_CHAMPION = "Champion"
TITLE_RUNNER_UP = "Runner-up"
TITLE_THIRD = "3rd Place"
TITLE_FOURTH = "4th Place"
TITLE_JOINT_THIRD = "Joint 3rd"
TITLE_JOINT_FIFTH = "Joint 5th"
TITLE_JOINT_NINTH = "Joint 9th"

DEFAULT_RANKING_LIMIT = 4


@dataclass
class RankingEntry:
    player_id: str
    player_name: str
    title: str
    rank_order: int


def split_roots(matches: List[Match]):
    """Return (main_roots, consolation_roots), each sorted by id descending."""
    loser_targets = {m.loser_edge.to_match_id for m in matches if m.loser_edge is not None}
    main_roots: List[Match] = []
    consolation_roots: List[Match] = []
    for m in matches:
        if not m.is_root:
            continue
        if m.id in loser_targets:
            consolation_roots.append(m)
        else:
            main_roots.append(m)
    main_roots.sort(key=lambda m: m.id, reverse=True)
    consolation_roots.sort(key=lambda m: m.id, reverse=True)
    return main_roots, consolation_roots


def _winner_feeders(matches: List[Match], target_ids: Set[int]) -> List[Match]:
    return [
        m for m in matches
        if m.winner_edge is not None and m.winner_edge.to_match_id in target_ids
    ]


def rankings(tournament: Tournament, limit: int = DEFAULT_RANKING_LIMIT) -> List[RankingEntry]:
    """
    Ranked players, best first, at most `limit` entries.

    A player is ranked once; the first (highest priority) title wins.
    """
    matches = tournament.matches
    entries: List[RankingEntry] = []
    seen: Set[str] = set()

    def add(player_id: Optional[str], title: str, order: int) -> None:
        if not player_id or player_id in seen:
            return
        player = tournament.find_player(player_id)
        if player is None:
            return
        entries.append(RankingEntry(player.id, player.name, title, order))
        seen.add(player_id)

    main_roots, consolation_roots = split_roots(matches)

    for root in main_roots:
        if root.result:
            add(root.result.winner_id, TITLE_CHAMPION, 1)
            add(root.loser_id(), TITLE_RUNNER_UP, 2)

    for root in consolation_roots:
        if root.result:
            add(root.result.winner_id, TITLE_THIRD, 3)
            add(root.loser_id(), TITLE_FOURTH, 4)

    main_ids = {m.id for m in main_roots}
    semifinals = _winner_feeders(matches, main_ids)

    # With an explicit 3rd-place match the semifinal losers are ranked there.
    if not consolation_roots:
        for m in semifinals:
            if m.result:
                add(m.loser_id(), TITLE_JOINT_THIRD, 3)

    if limit > 4:
        quarterfinals = _winner_feeders(matches, {m.id for m in semifinals})
        for m in quarterfinals:
            if m.result:
                add(m.loser_id(), TITLE_JOINT_FIFTH, 5)

        if limit > 8:
            for m in _winner_feeders(matches, {m.id for m in quarterfinals}):
                if m.result:
                    add(m.loser_id(), TITLE_JOINT_NINTH, 9)

    entries.sort(key=lambda e: e.rank_order)
    return entries[:limit]
