import pytest

import draft_engine as de
from engine_errors import DraftAlreadyComplete, InsufficientBudget, PlayerNotAvailable
from match_models import DraftMode, DraftStatus, Player


def _players(n=4):
    handicaps = [8.0, 2.5, 15.0, None, 11.0, 20.0, 5.0, 30.0]
    return [Player(f"p{i + 1}", f"Player {i + 1}", handicaps[i]) for i in range(n)]


def _snake(players=None):
    players = players or _players()
    config = de.create_draft_config(DraftMode.SNAKE, ["A", "B"], len(players))
    return de.initialize_draft(config, players)


def test_snake_order_reverses_each_round():
    state = _snake()
    teams = []
    for pid in ["p1", "p2", "p3", "p4"]:
        teams.append(de.current_team(state))
        state = de.make_draft_pick(state, pid)
    assert teams == ["A", "B", "B", "A"]
    assert state.status == DraftStatus.COMPLETE
    assert de.current_team(state) is None


def test_snake_three_teams_order():
    config = de.create_draft_config("snake", ["A", "B", "C"], 9)
    order = [de.team_for_pick(config, i) for i in range(9)]
    assert order == ["A", "B", "C", "C", "B", "A", "A", "B", "C"]
    assert config.round_count == 3


def test_auction_nominations_rotate():
    config = de.create_draft_config(DraftMode.AUCTION, ["A", "B"], 4)
    assert [de.team_for_pick(config, i) for i in range(4)] == ["A", "B", "A", "B"]


def test_pick_records_round_and_removes_player():
    state = de.make_draft_pick(_snake(), "p2")
    assert state.status == DraftStatus.IN_PROGRESS
    assert [p.id for p in state.available_players] == ["p1", "p3", "p4"]
    pick = state.picks[0]
    assert (pick.team_id, pick.round_number, pick.pick_number, pick.price) == ("A", 1, 1, None)


def test_pick_after_complete_raises():
    state = _snake()
    for pid in ["p1", "p2", "p3", "p4"]:
        state = de.make_draft_pick(state, pid)
    with pytest.raises(DraftAlreadyComplete):
        de.make_draft_pick(state, "p1")


def test_pick_unknown_or_taken_player():
    state = de.make_draft_pick(_snake(), "p1")
    with pytest.raises(PlayerNotAvailable):
        de.make_draft_pick(state, "p1")
    with pytest.raises(PlayerNotAvailable):
        de.make_draft_pick(state, "nobody")


def test_auction_budget_enforced():
    players = _players()
    config = de.create_draft_config(DraftMode.AUCTION, ["A", "B"], len(players), budget_per_team=50)
    state = de.initialize_draft(config, players)

    state = de.make_draft_pick(state, "p1", price=45)  # A
    state = de.make_draft_pick(state, "p2", price=10)  # B
    assert de.remaining_budget(state, "A") == 5

    with pytest.raises(InsufficientBudget) as excinfo:
        de.make_draft_pick(state, "p3", price=6)
    assert excinfo.value.team_id == "A"

    # exactly the remaining budget is fine
    state = de.make_draft_pick(state, "p3", price=5)
    assert de.remaining_budget(state, "A") == 0


def test_auction_price_required():
    players = _players()
    config = de.create_draft_config(DraftMode.AUCTION, ["A", "B"], len(players))
    state = de.initialize_draft(config, players)
    with pytest.raises(ValueError):
        de.make_draft_pick(state, "p1")
    with pytest.raises(ValueError):
        de.make_draft_pick(state, "p1", price=-1)


def test_create_config_rejects_bad_input():
    with pytest.raises(ValueError):
        de.create_draft_config(DraftMode.SNAKE, [], 4)
    with pytest.raises(ValueError):
        de.create_draft_config(DraftMode.SNAKE, ["A", "A"], 4)
    with pytest.raises(ValueError):
        de.create_draft_config(DraftMode.AUCTION, ["A", "B"], 4, budget_per_team=0)


def test_validate_draft_ready():
    config = de.create_draft_config(DraftMode.SNAKE, ["A"], 2)
    errors = de.validate_draft_ready(config, _players(2))
    assert len(errors) == 2
    ok = de.create_draft_config(DraftMode.SNAKE, ["A", "B"], 4)
    assert de.validate_draft_ready(ok, _players(4)) == []


def test_auto_pick_is_deterministic():
    state = _snake(_players(8))
    assert de.auto_pick_player(state) == "p2"
    assert de.auto_pick_player(state) == de.auto_pick_player(_snake(_players(8)))

    # run a whole draft on auto pick
    order = []
    while state.status != DraftStatus.COMPLETE:
        pid = de.auto_pick_player(state)
        order.append(pid)
        state = de.make_draft_pick(state, pid)
    # missing handicap goes last
    assert order == ["p2", "p7", "p1", "p5", "p3", "p6", "p8", "p4"]
    assert de.auto_pick_player(state) is None


def test_draft_summary():
    state = de.make_draft_pick(_snake(), "p1")
    summary = de.draft_summary(state, _players())
    assert summary["total_picks"] == 1
    assert summary["remaining_players"] == 3
    assert summary["on_the_clock"] == "B"
    assert summary["teams"][0] == {"team_id": "A", "count": 1, "handicap_total": 8.0}
    assert summary["pick_history"][0]["player"] == "Player 1"


def test_randomize_teams_is_seeded_and_even():
    players = _players(7)
    first = de.randomize_teams(players, ["A", "B"], seed=42)
    second = de.randomize_teams(players, ["A", "B"], seed=42)
    assert first == second

    sizes = sorted(len(r) for r in first["rosters"].values())
    assert sizes == [3, 4]
    assert set(first["assignment"]) == {p.id for p in players}


def test_balance_teams_by_handicap():
    players = [Player(f"p{i}", f"P{i}", h) for i, h in enumerate([2.0, 4.0, 10.0, 12.0, 20.0, 22.0])]
    result = de.balance_teams_by_handicap(players, ["A", "B"])
    totals = result["handicap_totals"]
    assert abs(totals["A"] - totals["B"]) <= 4.0
    assert sorted(len(r) for r in result["rosters"].values()) == [3, 3]


def test_balance_teams_keeps_sizes_within_one():
    players = [Player(f"p{i}", f"P{i}", h) for i, h in enumerate([30.0, 1.0, 1.0, 1.0, 1.0])]
    result = de.balance_teams_by_handicap(players, ["A", "B"])
    assert sorted(len(r) for r in result["rosters"].values()) == [2, 3]


def test_team_handicap_total_uses_default_for_missing():
    assert de.calculate_team_handicap_total([Player("x", "X", None), Player("y", "Y", 2.0)]) == 20.0


def test_assignment_and_rosters_follow_picks():
    state = _snake()
    for pid in ["p4", "p3", "p2"]:
        state = de.make_draft_pick(state, pid)
    assert de.draft_assignment(state) == {"p4": "A", "p3": "B", "p2": "B"}
    assert de.team_rosters(state) == {"A": ["p4"], "B": ["p3", "p2"]}
    assert de.current_team(state) == "A"


def test_balance_teams_even_rosters_can_widen_the_gap():
    players = [Player(f"p{i + 1}", f"P{i + 1}", h) for i, h in enumerate([20.0, 1.0, 1.0, 1.0])]
    result = de.balance_teams_by_handicap(players, ["A", "B"])
    assert result["rosters"] == {"A": ["p1", "p4"], "B": ["p2", "p3"]}
    assert result["handicap_totals"] == {"A": 21.0, "B": 2.0}
