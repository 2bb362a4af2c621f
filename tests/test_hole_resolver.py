import pytest

import hole_resolver as hr
from match_models import HoleResult, Match, SessionType, Side, TeeSet

RANKING = (7, 11, 3, 13, 9, 1, 15, 5, 17, 8, 16, 10, 4, 12, 6, 18, 2, 14)
TEE_SET = TeeSet("white", "White", RANKING, (4,) * 18)


def test_single_score_resolution():
    assert hr.resolve_hole(4, 5) == Side.SIDE_A
    assert hr.resolve_hole(5, 4) == Side.SIDE_B
    assert hr.resolve_hole(5, 5) == Side.HALVED
    # stroke turns a loss into a halve
    assert hr.resolve_hole(5, 4, strokes_a=1) == Side.HALVED


def test_missing_gross_is_an_error():
    with pytest.raises(ValueError):
        hr.resolve_hole(None, 4)


def test_best_ball_picks_lowest_net():
    # 5 - 1 = 4 beats the scratch player's 5
    net, idx = hr.best_ball([5, 5], [0, 1])
    assert net == 4
    assert idx == 1


def test_best_ball_tie_keeps_first_player():
    net, idx = hr.best_ball([4, 5], [0, 1])
    assert net == 4
    assert idx == 0


def test_best_ball_skips_picked_up_balls():
    assert hr.best_ball([None, 6], [0, 0]) == (6, 1)
    assert hr.best_ball([None, None], [0, 0]) == (None, None)


def test_resolve_best_ball_outcomes():
    outcome = hr.resolve_best_ball([4, 6], [5, 5], [0, 0], [0, 1])
    assert outcome["winner"] == Side.HALVED
    assert outcome["side_a_best_index"] == 0
    assert outcome["side_b_best_index"] == 1

    assert hr.resolve_best_ball([None, None], [6, 7], [0, 0], [0, 0])["winner"] == Side.SIDE_B
    assert hr.resolve_best_ball([None], [None], [0], [0])["winner"] == Side.NONE


def test_score_hole_singles_uses_differential():
    match = Match("m1", "s1", ["a"], ["b"], side_a_handicap_allowance=10, side_b_handicap_allowance=3)
    # hole 6 is stroke index 1, so side A gets the single difference stroke there
    result = hr.score_hole(match, TEE_SET, 6, side_a_gross=5, side_b_gross=4)
    assert isinstance(result, HoleResult)
    assert result.winner == Side.HALVED
    assert result.side_a_gross == 5

    # hole 16 is index 18, no stroke
    assert hr.score_hole(match, TEE_SET, 16, side_a_gross=5, side_b_gross=4).winner == Side.SIDE_B


def test_score_hole_fourball_uses_player_allowances():
    match = Match(
        "m2",
        "s1",
        ["a1", "a2"],
        ["b1", "b2"],
        session_type=SessionType.FOURBALL,
        player_allowances={"a1": 0, "a2": 12, "b1": 2, "b2": 0},
    )
    result = hr.score_hole(
        match, TEE_SET, 6, side_a_player_scores=[5, 5], side_b_player_scores=[5, 4]
    )
    # a2 nets 4, b1 nets 4 -> halved
    assert result.winner == Side.HALVED
    assert result.per_player_scores == ((5, 5), (5, 4))
