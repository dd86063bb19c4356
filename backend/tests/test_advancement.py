"""Advancement: placement policy, score submission and walkovers."""

import logging

import pytest

from kendo_bracket.models.bracket import WALKOVER_DETAILS, Slot
from kendo_bracket.services.advancement_service import place_player, submit_score, walkover
from kendo_bracket.services.errors import (
    InvalidScoreError,
    MatchAlreadyFinishedError,
    NoEligiblePlayerError,
    NotAByeError,
    SlotNotReadyError,
    TiedScoreError,
    UnknownMatchError,
)
from tests.factories import edge, four_player_bracket, get, match, tournament


# ---------------------------------------------------------------------------
# place_player
# ---------------------------------------------------------------------------


def test_explicit_placement_overwrites_occupant():
    matches = [match(1, "p1", "p2")]
    updated = place_player(matches, 1, "p9", Slot.RED)
    assert updated[0].red_player_id == "p9"
    assert updated[0].white_player_id == "p2"


def test_explicit_placement_is_idempotent():
    matches = [match(1), match(2, None, "p4")]
    once = place_player(matches, 2, "p1", Slot.RED)
    twice = place_player(once, 2, "p1", Slot.RED)
    assert once == twice


def test_placement_only_changes_target():
    matches = [match(1, "p1", "p2"), match(2)]
    updated = place_player(matches, 2, "p1", Slot.WHITE)
    assert updated[0] == matches[0]
    assert matches[1].white_player_id is None  # input untouched


def test_auto_fills_first_empty_red_then_white():
    matches = [match(1)]
    first = place_player(matches, 1, "p1", Slot.AUTO)
    second = place_player(first, 1, "p2", Slot.AUTO)
    assert (second[0].red_player_id, second[0].white_player_id) == ("p1", "p2")


def test_auto_correction_overwrites_stale_source_participant():
    # p2 advanced earlier from the same source match; p1 is the corrected winner
    matches = [match(5, "p7", "p2")]
    updated = place_player(matches, 5, "p1", Slot.AUTO, {"p1", "p2"})
    assert updated[0].red_player_id == "p7"
    assert updated[0].white_player_id == "p1"


def test_auto_correction_prefers_red_side():
    matches = [match(5, "p1", "p2")]
    updated = place_player(matches, 5, "p2", Slot.AUTO, {"p1", "p2"})
    assert updated[0].red_player_id == "p2"


def test_auto_full_match_without_participant_is_noop(caplog):
    matches = [match(5, "p7", "p8")]
    with caplog.at_level(logging.WARNING):
        updated = place_player(matches, 5, "p1", Slot.AUTO, {"p1", "p2"})
    assert updated == matches
    assert "not placed" in caplog.text


def test_place_unknown_match():
    with pytest.raises(UnknownMatchError):
        place_player([match(1)], 2, "p1", Slot.RED)


# ---------------------------------------------------------------------------
# submit_score
# ---------------------------------------------------------------------------


def test_three_match_scenario_routes_winners():
    t = four_player_bracket()
    t = submit_score(t, 1, 3, 1)
    t = submit_score(t, 2, 0, 2)
    final = get(t, 3)
    assert final.red_player_id == "p1"
    assert final.white_player_id == "p4"
    assert get(t, 1).result.winner_id == "p1"
    assert get(t, 2).result.winner_id == "p4"


@pytest.mark.parametrize("score", [0, 1, 3])
def test_tied_score_rejected_without_mutation(score):
    t = four_player_bracket()
    with pytest.raises(TiedScoreError):
        submit_score(t, 1, score, score)
    assert t == four_player_bracket()


def test_negative_score_rejected():
    with pytest.raises(InvalidScoreError):
        submit_score(four_player_bracket(), 1, -1, 2)


def test_score_requires_both_players():
    t = tournament([match(1, "p1", None)])
    with pytest.raises(SlotNotReadyError):
        submit_score(t, 1, 2, 0)


def test_score_unknown_match():
    with pytest.raises(UnknownMatchError):
        submit_score(four_player_bracket(), 42, 2, 0)


def test_winner_and_loser_both_routed():
    t = tournament(
        [
            match(1, "p1", "p2", winner_to=edge(2, Slot.WHITE), loser_to=edge(3, Slot.RED)),
            match(2, "p5", None),
            match(3, None, "p6"),
        ]
    )
    t = submit_score(t, 1, 0, 2, "Men, Kote")
    assert get(t, 1).result.details == "Men, Kote"
    assert get(t, 2).white_player_id == "p2"
    assert get(t, 3).red_player_id == "p1"


def test_resubmission_corrects_auto_advancement():
    t = tournament([match(1, "p1", "p2", winner_to=edge(2)), match(2, None, None)])
    t = submit_score(t, 1, 2, 0)
    assert get(t, 2).red_player_id == "p1"
    t = submit_score(t, 1, 0, 2)
    assert get(t, 2).red_player_id == "p2"
    assert get(t, 2).white_player_id is None
    assert get(t, 1).result.winner_id == "p2"


def test_resubmission_corrects_loser_route_too():
    t = tournament(
        [
            match(1, "p1", "p2", winner_to=edge(2), loser_to=edge(3)),
            match(2, "p5", None),
            match(3, "p6", None),
        ]
    )
    t = submit_score(t, 1, 1, 0)
    t = submit_score(t, 1, 0, 1)
    assert get(t, 2).white_player_id == "p2"
    assert get(t, 3).white_player_id == "p1"


# ---------------------------------------------------------------------------
# walkover
# ---------------------------------------------------------------------------


def test_walkover_advances_sole_player_and_skips_loser_route():
    t = tournament(
        [
            match(1, None, "p3", winner_to=edge(2, Slot.RED), loser_to=edge(3, Slot.RED)),
            match(2),
            match(3),
        ]
    )
    before_consolation = get(t, 3)
    t = walkover(t, 1)
    result = get(t, 1).result
    assert result.winner_id == "p3"
    assert (result.red_score, result.white_score) == (0, 0)
    assert result.details == WALKOVER_DETAILS
    assert get(t, 2).red_player_id == "p3"
    assert get(t, 3) == before_consolation


def test_walkover_without_players():
    with pytest.raises(NoEligiblePlayerError):
        walkover(tournament([match(1)]), 1)


def test_walkover_on_finished_match():
    with pytest.raises(MatchAlreadyFinishedError):
        walkover(tournament([match(1, "p1", None, winner="p1")]), 1)


def test_walkover_root_match_has_no_route():
    t = walkover(tournament([match(1, "p1", None)]), 1)
    assert get(t, 1).result.winner_id == "p1"


def test_walkover_with_both_players_seated_is_rejected():
    t = tournament([match(1, "p1", "p2", winner_to=edge(2, Slot.RED)), match(2)])
    with pytest.raises(NotAByeError):
        walkover(t, 1)
    assert get(t, 1).result is None
    assert get(t, 2).red_player_id is None


def test_walkover_while_opponent_can_still_arrive_is_rejected():
    t = tournament(
        [
            match(1, "p1", "p2", winner_to=edge(2, Slot.WHITE)),
            match(2, "p3", None, winner_to=edge(3, Slot.RED)),
            match(3),
        ]
    )
    before = t.model_copy(deep=True)
    with pytest.raises(NotAByeError):
        walkover(t, 2)
    assert t == before
