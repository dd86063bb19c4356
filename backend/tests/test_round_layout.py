"""Round layout: depth from the final, grouping and malformed-graph handling."""

from kendo_bracket.models.bracket import Slot
from kendo_bracket.services.round_layout import (
    MAX_LAYOUT_DEPTH,
    default_root_match_id,
    layout,
    round_label,
)
from tests.factories import edge, four_player_bracket, match


def _ids(result):
    return [[m.id for m in group] for group in result.rounds]


def _double_elimination():
    # 1, 2 -> 3 (winners final); losers of 1, 2 -> 4; loser of 3 -> 5 (red),
    # winner of 4 -> 5 (white); 3 and 5 -> grand final 6
    return [
        match(1, winner_to=edge(3, Slot.RED), loser_to=edge(4, Slot.RED)),
        match(2, winner_to=edge(3, Slot.WHITE), loser_to=edge(4, Slot.WHITE)),
        match(3, winner_to=edge(6, Slot.RED), loser_to=edge(5, Slot.RED)),
        match(4, winner_to=edge(5, Slot.WHITE)),
        match(5, winner_to=edge(6, Slot.WHITE)),
        match(6),
    ]


def test_simple_bracket_rounds():
    result = layout(four_player_bracket().matches, 3)
    assert _ids(result) == [[1, 2], [3]]
    assert result.warnings == []


def test_longest_path_wins():
    result = layout(_double_elimination(), 6)
    # 3 reaches the final directly and through 5; the longer path counts
    assert result.depths == {6: 0, 5: 1, 3: 2, 4: 2, 1: 3, 2: 3}
    assert _ids(result) == [[1, 2], [3, 4], [5], [6]]


def test_depth_strictly_decreases_along_every_edge():
    matches = _double_elimination()
    depths = layout(matches, 6).depths
    for m in matches:
        for e in (m.winner_edge, m.loser_edge):
            if e is not None:
                assert depths[m.id] > depths[e.to_match_id]


def test_feeder_of_a_feeder_is_reached():
    matches = four_player_bracket().matches + [match(4, winner_to=edge(1, Slot.RED))]
    result = layout(matches, 3)
    assert result.depths[4] == 2
    assert result.warnings == []  # reachable through match 1


def test_orphan_without_target_goes_to_final_column():
    matches = four_player_bracket().matches + [match(9)]
    result = layout(matches, 3)
    assert result.depths[9] == 0
    assert _ids(result)[-1] == [3, 9]
    assert [w.match_id for w in result.warnings] == [9]


def test_unknown_root_reports_warning_and_still_lays_out():
    result = layout(four_player_bracket().matches, 99)
    assert any(w.match_id == 99 for w in result.warnings)
    assert sorted(result.depths) == [1, 2, 3]


def test_non_root_layout_root_is_flagged():
    result = layout(four_player_bracket().matches, 1)
    assert result.depths[1] == 0
    assert any("sends its winner" in w.message for w in result.warnings)


def test_cycle_is_bounded_by_depth_cap():
    matches = [
        match(1, winner_to=edge(2)),
        match(2, winner_to=edge(1)),
    ]
    result = layout(matches, 1)
    assert max(result.depths.values()) <= MAX_LAYOUT_DEPTH


def test_default_root_is_last_match_id():
    assert default_root_match_id(four_player_bracket()) == 3


def test_round_labels():
    assert [round_label(i, 3) for i in range(3)] == ["Round 1", "Round 2", "Finals"]


def test_match_past_depth_cap_is_left_out_with_its_own_warning():
    # 1 -> 2 -> ... -> 12; the root is 12, so match 1 sits at depth 11
    matches = [match(i, winner_to=edge(i + 1)) for i in range(1, 12)] + [match(12)]
    result = layout(matches, 12)
    assert 1 not in result.depths
    assert result.depths[2] == MAX_LAYOUT_DEPTH
    assert len(result.rounds) == MAX_LAYOUT_DEPTH + 1
    assert [w.match_id for w in result.warnings] == [1]
    assert "deeper than" in result.warnings[0].message
    assert "not connected" not in result.warnings[0].message
