import pytest

import match_engine as me
from engine_errors import InconsistentHoleResult
from match_models import HoleResult, Match, MatchStatus, Side

MATCH = Match("m1", "s1", ["a"], ["b"])


def _results(winners, match_id="m1", start=1):
    return [HoleResult(match_id, start + i, w) for i, w in enumerate(winners)]


def _play(winners):
    results = []
    for r in _results(winners):
        results = me.record_hole_result(MATCH, results, r)
    return results


def test_scheduled_before_any_hole():
    state = me.calculate_match_state(MATCH, [])
    assert state.status == MatchStatus.SCHEDULED
    assert state.display_score == "AS"
    assert state.current_score == 0
    assert state.holes_remaining == 18
    assert state.winning_side is None


def test_in_progress_display_and_leader():
    state = me.calculate_match_state(MATCH, _results([Side.SIDE_B, Side.HALVED, Side.SIDE_B]))
    assert state.status == MatchStatus.IN_PROGRESS
    assert state.current_score == -2
    assert state.display_score == "2 UP"
    assert state.leader == Side.SIDE_B
    assert state.holes_played == 3
    assert state.holes_remaining == 15


def test_closeout_ten_and_eight():
    state = me.calculate_match_state(MATCH, _results([Side.SIDE_A] * 10))
    assert state.is_closed_out
    assert state.status == MatchStatus.COMPLETED
    assert state.winning_side == Side.SIDE_A
    assert state.display_score == "Side A wins 10 & 8"
    assert state.closed_at_hole == 10
    assert me.match_result_label(state) == "10&8"


def test_one_up_match_only_ends_at_eighteen():
    winners = [Side.SIDE_A] + [Side.HALVED] * 16
    state = me.calculate_match_state(MATCH, _results(winners))
    assert state.status == MatchStatus.IN_PROGRESS
    assert state.is_dormie
    assert not state.is_closed_out

    state = me.calculate_match_state(MATCH, _results(winners + [Side.HALVED]))
    assert state.status == MatchStatus.COMPLETED
    assert state.winning_side == Side.SIDE_A
    assert state.display_score == "Side A wins 1 UP"
    assert me.match_result_label(state) == "1 UP"


def test_dormie_three_with_three_to_play():
    state = me.calculate_match_state(MATCH, _results([Side.SIDE_B] * 3 + [Side.HALVED] * 12))
    assert state.is_dormie
    assert state.holes_remaining == 3
    assert state.status == MatchStatus.IN_PROGRESS


def test_all_square_after_eighteen_is_halved():
    state = me.calculate_match_state(MATCH, _results([Side.HALVED] * 18))
    assert state.status == MatchStatus.COMPLETED
    assert state.winning_side == Side.HALVED
    assert state.display_score == "AS"
    assert me.match_points(state) == {"side_a": 0.5, "side_b": 0.5}
    assert me.format_final_result(state, "USA", "Europe") == "Match Halved"


def test_named_sides_in_display():
    names = {Side.SIDE_A: "USA", Side.SIDE_B: "Europe"}
    state = me.calculate_match_state(MATCH, _results([Side.SIDE_B] * 5 + [Side.HALVED] * 10), side_names=names)
    assert state.display_score == "Europe wins 5 & 4"
    assert me.format_final_result(state, "USA", "Europe") == "Europe won 5&4"


def test_state_is_idempotent():
    results = _results([Side.SIDE_A, Side.SIDE_B, Side.HALVED, Side.SIDE_A])
    assert me.calculate_match_state(MATCH, results) == me.calculate_match_state(MATCH, results)


def test_fold_ignores_malformed_and_post_closeout_results():
    results = _results([Side.SIDE_A] * 10) + [
        HoleResult("m1", 11, Side.SIDE_B),
        HoleResult("m1", 25, Side.SIDE_B),
        HoleResult("m1", 0, Side.SIDE_B),
        HoleResult("m1", 12, "nobody"),
    ]
    state = me.calculate_match_state(MATCH, results)
    assert state.display_score == "Side A wins 10 & 8"
    assert state.side_b_holes_won == 0


def test_later_duplicate_wins_in_fold():
    results = [HoleResult("m1", 1, Side.SIDE_A), HoleResult("m1", 1, Side.SIDE_B)]
    assert me.calculate_match_state(MATCH, results).current_score == -1


def test_unplayed_hole_does_not_count():
    results = [HoleResult("m1", 1, Side.NONE), HoleResult("m1", 2, Side.SIDE_A)]
    state = me.calculate_match_state(MATCH, results)
    assert state.holes_played == 1
    assert me.next_hole(results) == 1


def test_record_rejects_duplicates_and_bad_holes():
    results = _play([Side.SIDE_A])
    with pytest.raises(InconsistentHoleResult):
        me.record_hole_result(MATCH, results, HoleResult("m1", 1, Side.SIDE_B))
    with pytest.raises(InconsistentHoleResult):
        me.record_hole_result(MATCH, results, HoleResult("m1", 19, Side.SIDE_B))
    with pytest.raises(InconsistentHoleResult):
        me.record_hole_result(MATCH, results, HoleResult("other", 2, Side.SIDE_B))


def test_record_rejects_after_match_decided():
    results = _play([Side.SIDE_A] * 10)
    with pytest.raises(InconsistentHoleResult):
        me.record_hole_result(MATCH, results, HoleResult("m1", 11, Side.SIDE_B))


def test_correct_hole_result_replaces_entry():
    results = _play([Side.SIDE_A, Side.SIDE_A])
    corrected = me.correct_hole_result(MATCH, results, HoleResult("m1", 1, Side.SIDE_B))
    assert len(corrected) == 2
    assert me.calculate_match_state(MATCH, corrected).current_score == 0
    # original list untouched
    assert me.calculate_match_state(MATCH, results).current_score == 2

    with pytest.raises(InconsistentHoleResult):
        me.correct_hole_result(MATCH, results, HoleResult("m1", 5, Side.SIDE_B))


def test_undo_round_trip_to_scheduled():
    results = _play([Side.HALVED] * 18)
    assert me.calculate_match_state(MATCH, results).status == MatchStatus.COMPLETED

    for _ in range(18):
        results = me.undo_last_hole(results)
    state = me.calculate_match_state(MATCH, results)
    assert state.status == MatchStatus.SCHEDULED
    assert state.current_score == 0
    assert me.undo_last_hole([]) == []


def test_undo_matches_state_before_last_record():
    results = _play([Side.SIDE_A, Side.SIDE_B, Side.SIDE_A])
    before = me.calculate_match_state(MATCH, results)
    after = me.record_hole_result(MATCH, results, HoleResult("m1", 4, Side.SIDE_A))
    assert me.calculate_match_state(MATCH, me.undo_last_hole(after)) == before


def test_undo_reopens_closed_match():
    results = _play([Side.SIDE_A] * 10)
    state = me.calculate_match_state(MATCH, me.undo_last_hole(results))
    assert state.status == MatchStatus.IN_PROGRESS
    assert state.is_dormie


def test_would_close_out():
    # 2 up with 3 to play: winning the next hole closes it out
    assert me.would_close_out(2, 3, Side.SIDE_A)
    assert not me.would_close_out(2, 3, Side.HALVED)
    assert not me.would_close_out(2, 3, Side.SIDE_B)


def test_match_points_and_labels():
    in_progress = me.calculate_match_state(MATCH, _results([Side.SIDE_A]))
    assert me.match_points(in_progress) == {"side_a": 0.0, "side_b": 0.0}
    assert me.match_result_label(in_progress) == "incomplete"
    assert me.format_final_result(in_progress, "A", "B") == "In progress: 1 UP"
