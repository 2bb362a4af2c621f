import draft_engine as de
import standings as sd
import tee_sheet as ts
import views
from match_models import DraftMode, HoleResult, Match, PairingSuggestion, Player, Press, Side, TeeSet

RANKING = (7, 11, 3, 13, 9, 1, 15, 5, 17, 8, 16, 10, 4, 12, 6, 18, 2, 14)
TEE_SET = TeeSet("white", "White", RANKING, (4,) * 18)
MATCH = Match("m1", "s1", ["a"], ["b"], side_a_handicap_allowance=9, side_b_handicap_allowance=2)


def _results(winners, match_id="m1"):
    return [HoleResult(match_id, i + 1, w) for i, w in enumerate(winners)]


def test_stroke_table():
    df = views.stroke_table(TEE_SET, 9, 2)
    assert len(df) == 18
    assert df["Side A Strokes"].sum() == 7
    assert df["Side B Strokes"].sum() == 0
    assert df.loc[df["Hole"] == 6, "Side A Strokes"].item() == 1


def test_match_progress_running_score():
    df = views.match_progress_frame(_results([Side.SIDE_A, Side.SIDE_B, Side.SIDE_A]))
    assert list(df["Score"]) == [1, 0, 1]
    assert list(df["Status"]) == ["A 1 UP", "AS", "A 1 UP"]


def test_match_progress_stops_at_closeout():
    df = views.match_progress_frame(_results([Side.SIDE_A] * 10 + [Side.SIDE_B]))
    assert len(df) == 10
    assert df["Score"].iloc[-1] == 10


def test_match_progress_empty():
    assert views.match_progress_frame([]).empty


def test_scorecard_frame():
    df = views.scorecard_frame(MATCH, _results([Side.SIDE_B, Side.HALVED]), TEE_SET)
    assert len(df) == 18
    assert list(df["Winner"][:3]) == ["B", "½", ""]
    assert list(df["Status"][:3]) == ["B 1 UP", "B 1 UP", ""]


def test_match_board_frame():
    other = Match("m2", "s1", ["c"], ["d"], match_order=2)
    board = views.match_board_frame(
        [other, MATCH],
        {"m1": _results([Side.SIDE_A] * 10), "m2": _results([Side.SIDE_B], "m2")},
    )
    assert list(board["Match"]) == [1, 2]
    assert board["Result"].iloc[0] == "10&8"
    assert board["A Pts"].iloc[0] == 1.0
    assert board["Score"].iloc[1] == "1 UP"


def test_match_board_totals_row():
    other = Match("m2", "s1", ["c"], ["d"], match_order=2)
    board = views.match_board_frame(
        [MATCH, other],
        {"m1": _results([Side.SIDE_A] * 10), "m2": _results([Side.SIDE_B], "m2")},
        totals=True,
    )
    assert list(board["Match"]) == ["1", "2", "Total"]
    total = board.iloc[-1]
    assert (total["A Pts"], total["B Pts"]) == (1.0, 0.0)
    assert total["Status"] == "1 to play"
    assert views.match_board_frame([], {}, totals=True).empty


def test_standings_and_leaderboard_frames():
    standings = sd.calculate_team_standings([MATCH], {"m1": _results([Side.SIDE_A] * 10)})
    magic = sd.calculate_magic_number(standings, sd.points_needed_to_win(1))
    df = views.standings_frame(standings, magic, {Side.SIDE_A: "USA", Side.SIDE_B: "Europe"})
    assert list(df["Team"]) == ["USA", "Europe"]
    assert list(df["Points"]) == [1.0, 0.0]
    assert list(df["Clinched"]) == [True, False]

    board = sd.calculate_player_leaderboard(
        [Player("a", "Alex"), Player("b", "Blake")], [MATCH], {"m1": _results([Side.SIDE_A] * 10)}
    )
    leaders = views.leaderboard_frame(board)
    assert list(leaders["Player"]) == ["Alex", "Blake"]
    assert list(leaders["W"]) == [1, 0]
    assert views.leaderboard_frame([]).empty


def test_press_frame():
    df = views.press_frame([Press(id="p", start_hole=11, initiated_by=Side.SIDE_B, running_score=-2)])
    assert df["Score"].iloc[0] == "B 2 UP"
    assert df["Pressed By"].iloc[0] == "side_b"


def test_draft_frames():
    players = [Player(f"p{i}", f"P{i}", float(i)) for i in range(1, 5)]
    config = de.create_draft_config(DraftMode.AUCTION, ["A", "B"], 4)
    state = de.initialize_draft(config, players)

    empty = views.draft_board_frame(de.draft_summary(state, players))
    assert empty.empty
    assert list(empty.columns) == ["Round", "Pick", "Team", "Player", "Price"]

    state = de.make_draft_pick(state, "p1", price=30)
    summary = de.draft_summary(state, players)
    board = views.draft_board_frame(summary)
    assert board["Player"].iloc[0] == "P1"
    totals = views.team_totals_frame(summary)
    assert list(totals["Budget Left"]) == [70, 100]


def test_allocation_frame():
    players = [Player(f"p{i}", f"P{i}", float(i)) for i in range(1, 5)]
    allocation = de.balance_teams_by_handicap(players, ["A", "B"])
    df = views.allocation_frame(allocation, players)
    assert len(df) == 4
    assert set(df["Team"]) == {"A", "B"}


def test_pairing_frame():
    suggestion = PairingSuggestion(1, ["a1"], ["b1"], 96.0, 1.0, ["First-time matchup"], [])
    df = views.pairing_frame([suggestion], {"a1": Player("a1", "Alex", 10.0)})
    assert df["Side A"].iloc[0] == "Alex"
    assert df["Side B"].iloc[0] == "b1"
    assert views.pairing_frame([], {}).empty


def test_tee_sheet_frame():
    matches = [Match(f"m{i}", "s1", [], [], match_order=i) for i in (1, 2)]
    sheet = ts.generate_tee_sheet(matches, {"first_tee_time": "10:00"})
    df = views.tee_sheet_frame(sheet)
    assert list(df["Tee Time"]) == ["10:00 AM", "10:08 AM"]
