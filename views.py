import numpy as np
import pandas as pd

import handicap_engine as he
import match_engine as me
import standings as sd
import tee_sheet as ts
from match_models import TOTAL_HOLES, MatchStatus, Side

# Column labels shown in the app
WINNER_LABELS = {
    Side.SIDE_A: "A",
    Side.SIDE_B: "B",
    Side.HALVED: "½",
    Side.NONE: "-",
}


# ============================================================
# Scorecard
# ============================================================

def stroke_table(tee_set, side_a_allowance, side_b_allowance) -> pd.DataFrame:
    """Hole-by-hole par, stroke index and strokes received per side."""
    allocation = he.match_stroke_allocation(
        side_a_allowance, side_b_allowance, tee_set.hole_handicap_ranking
    )
    return pd.DataFrame(
        {
            "Hole": np.arange(1, TOTAL_HOLES + 1),
            "Par": list(tee_set.hole_par),
            "Stroke Index": list(tee_set.hole_handicap_ranking),
            "Side A Strokes": allocation["side_a"],
            "Side B Strokes": allocation["side_b"],
        }
    )


def scorecard_frame(match, hole_results, tee_set, side_names=None) -> pd.DataFrame:
    """
    One row per hole: par, strokes, grosses, the hole winner and the match
    score after that hole. Unplayed holes have blank results.
    """
    names = side_names or me.DEFAULT_SIDE_NAMES
    df = stroke_table(tee_set, match.side_a_handicap_allowance, match.side_b_handicap_allowance)

    by_hole = {r.hole_number: r for r in me.normalize_hole_results(hole_results)}
    winners = []
    gross_a = []
    gross_b = []
    for hole in df["Hole"]:
        result = by_hole.get(int(hole))
        winners.append(WINNER_LABELS[Side(result.winner)] if result else "")
        gross_a.append(result.side_a_gross if result else None)
        gross_b.append(result.side_b_gross if result else None)

    df[f"{names[Side.SIDE_A]} Gross"] = gross_a
    df[f"{names[Side.SIDE_B]} Gross"] = gross_b
    df["Winner"] = winners

    progress = match_progress_frame(hole_results)
    status_by_hole = dict(zip(progress["Hole"], progress["Status"]))
    df["Status"] = [status_by_hole.get(int(h), "") for h in df["Hole"]]
    return df


def match_progress_frame(hole_results) -> pd.DataFrame:
    """
    Running score (+ = side A up) after every played hole, stopping where
    the match was closed out.
    """
    results = me.normalize_hole_results(hole_results)
    tally = me.tally_holes(results)
    closed_at = tally["closed_at_hole"]

    holes = []
    swings = []
    for r in results:
        if Side(r.winner) == Side.NONE:
            continue
        if closed_at is not None and r.hole_number > closed_at:
            break
        holes.append(r.hole_number)
        swings.append(1 if r.winner == Side.SIDE_A else -1 if r.winner == Side.SIDE_B else 0)

    if not holes:
        return pd.DataFrame(columns=["Hole", "Score", "Status"])

    running = np.cumsum(swings)
    status = ["AS" if s == 0 else f"A {s} UP" if s > 0 else f"B {-s} UP" for s in running]
    return pd.DataFrame({"Hole": holes, "Score": running.astype(int), "Status": status})


def match_board_frame(matches, results_by_match, side_names=None, totals=False) -> pd.DataFrame:
    """
    Session scoreboard: one row per match with its live or final state.

    With `totals`, a closing "Total" row carries the points won so far.
    """
    rows = []
    for match in sorted(matches, key=lambda m: m.match_order):
        state = me.calculate_match_state(
            match, results_by_match.get(match.id, []), side_names=side_names
        )
        points = me.match_points(state)
        rows.append(
            {
                "Match": match.match_order,
                "Side A": " & ".join(str(p) for p in match.side_a_player_ids),
                "Side B": " & ".join(str(p) for p in match.side_b_player_ids),
                "Score": state.display_score,
                "Thru": state.holes_played,
                "Dormie": state.is_dormie,
                "Status": state.status.value.replace("_", " ").title(),
                "Result": me.match_result_label(state) if state.status == MatchStatus.COMPLETED else "",
                "A Pts": points["side_a"],
                "B Pts": points["side_b"],
            }
        )
    df = pd.DataFrame(rows)
    if totals and not df.empty:
        standings = sd.calculate_team_standings(matches, results_by_match)
        total_row = {col: "" for col in df.columns}
        total_row.update(
            {
                "Match": "Total",
                "Thru": standings["matches_completed"],
                "Dormie": False,
                "Status": f"{standings['matches_remaining']} to play",
                "A Pts": standings["side_a_points"],
                "B Pts": standings["side_b_points"],
            }
        )
        df["Match"] = df["Match"].astype(str)
        df = pd.concat([df, pd.DataFrame([total_row])], ignore_index=True)
    return df


def standings_frame(standings, magic, side_names=None) -> pd.DataFrame:
    """Points, projection and magic number for each side."""
    names = side_names or me.DEFAULT_SIDE_NAMES
    rows = []
    for side, key in ((Side.SIDE_A, "side_a"), (Side.SIDE_B, "side_b")):
        rows.append(
            {
                "Team": names[side],
                "Points": standings[f"{key}_points"],
                "Projected": standings[f"{key}_projected"],
                "Needed": magic[f"{key}_needed"],
                "Can Clinch": magic[f"{key}_can_clinch"],
                "Clinched": magic[f"{key}_clinched"],
            }
        )
    return pd.DataFrame(rows)


def leaderboard_frame(leaderboard) -> pd.DataFrame:
    columns = ["Player", "Team", "W", "L", "H", "Points", "Played"]
    if not leaderboard:
        return pd.DataFrame(columns=columns)
    df = pd.DataFrame(leaderboard).rename(
        columns={
            "player_name": "Player",
            "team_id": "Team",
            "wins": "W",
            "losses": "L",
            "halves": "H",
            "points": "Points",
            "matches_played": "Played",
        }
    )
    return df[columns]


# ============================================================
# Presses
# ============================================================

def press_frame(presses) -> pd.DataFrame:
    rows = []
    for p in presses:
        if p.running_score == 0:
            score = "AS"
        else:
            score = f"{'A' if p.running_score > 0 else 'B'} {abs(p.running_score)} UP"
        rows.append(
            {
                "From Hole": p.start_hole,
                "Pressed By": p.initiated_by.value,
                "Status": p.status.value,
                "Score": score,
                "Result": p.result.value if p.result else "",
                "Closed At": p.closed_at_hole,
                "Value": p.value,
            }
        )
    return pd.DataFrame(rows)


# ============================================================
# Draft
# ============================================================

def draft_board_frame(summary) -> pd.DataFrame:
    """Pick history from draft_engine.draft_summary."""
    df = pd.DataFrame(
        summary["pick_history"], columns=["round", "pick", "team", "player", "price"]
    )
    df.columns = ["Round", "Pick", "Team", "Player", "Price"]
    return df


def team_totals_frame(summary) -> pd.DataFrame:
    df = pd.DataFrame(summary["teams"])
    rename = {
        "team_id": "Team",
        "count": "Players",
        "handicap_total": "Handicap Total",
        "remaining_budget": "Budget Left",
    }
    df = df.rename(columns=rename)
    if "Handicap Total" in df:
        df["Handicap Total"] = df["Handicap Total"].round(1)
    return df


def allocation_frame(allocation, players) -> pd.DataFrame:
    """Roster table for randomize_teams / balance_teams_by_handicap output."""
    by_id = {p.id: p for p in players}
    rows = []
    for team_id, roster in allocation["rosters"].items():
        for pid in roster:
            player = by_id[pid]
            rows.append(
                {
                    "Team": team_id,
                    "Player": player.name,
                    "Handicap": player.handicap_index,
                }
            )
    return pd.DataFrame(rows, columns=["Team", "Player", "Handicap"])


# ============================================================
# Pairings & tee sheet
# ============================================================

def pairing_frame(suggestions, players_by_id) -> pd.DataFrame:
    def _names(ids):
        return " & ".join(players_by_id[i].name if i in players_by_id else str(i) for i in ids)

    rows = [
        {
            "Match": s.match_slot,
            "Side A": _names(s.side_a_player_ids),
            "Side B": _names(s.side_b_player_ids),
            "Fairness": s.fairness_score,
            "Handicap Gap": round(s.handicap_gap, 1),
            "Notes": ", ".join(s.reasoning),
            "Warnings": ", ".join(s.warnings),
        }
        for s in suggestions
    ]
    return pd.DataFrame(
        rows,
        columns=["Match", "Side A", "Side B", "Fairness", "Handicap Gap", "Notes", "Warnings"],
    )


def tee_sheet_frame(sheet) -> pd.DataFrame:
    rows = [
        {
            "Tee Time": ts.format_time_12h(slot["time"]),
            "Starting Hole": slot["starting_hole"],
            "Group": slot["group_name"],
            "Match Id": slot["match_id"],
        }
        for slot in sheet["slots"]
    ]
    return pd.DataFrame(rows, columns=["Tee Time", "Starting Hole", "Group", "Match Id"])
