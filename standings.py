"""
Team standings across a whole event.

Everything here is folded from the matches and their hole results, the
same way a single MatchState is: a match only counts toward the totals
once it is completed, and in-progress matches feed the projection.
"""
import logging

import match_engine as me
from match_models import TOTAL_HOLES, MatchStatus, SessionType, Side, opponent_of

logger = logging.getLogger(__name__)

# Majority of the 28 points in a full Ryder Cup
POINTS_TO_WIN = 14.5

SESSION_CONFIG = {
    SessionType.FOURBALL: {
        "players_per_side": 2,
        "match_count": 4,
        "points_per_match": 1,
        "description": "Best ball - each player plays their own ball",
    },
    SessionType.FOURSOMES: {
        "players_per_side": 2,
        "match_count": 4,
        "points_per_match": 1,
        "description": "Alternate shot - partners alternate shots",
    },
    SessionType.SINGLES: {
        "players_per_side": 1,
        "match_count": 12,
        "points_per_match": 1,
        "description": "Head-to-head individual matches",
    },
}


def _states(matches, results_by_match, total_holes):
    for match in matches:
        yield match, me.calculate_match_state(
            match, results_by_match.get(match.id, []), total_holes=total_holes
        )


def _leader(side_a_points, side_b_points):
    if side_a_points > side_b_points:
        return Side.SIDE_A
    if side_b_points > side_a_points:
        return Side.SIDE_B
    return None


# ============================================================
# Team standings
# ============================================================

def calculate_team_standings(matches, results_by_match, total_holes=TOTAL_HOLES):
    """
    Points won by each side, plus a projection that hands every match in
    progress to whoever leads it right now (half each when all square).
    """
    side_a_points = side_b_points = 0.0
    side_a_projected = side_b_projected = 0.0
    played = completed = 0

    for match, state in _states(matches, results_by_match, total_holes):
        if state.holes_played > 0:
            played += 1
        if state.status == MatchStatus.COMPLETED:
            completed += 1
            points = me.match_points(state)
            side_a_points += points["side_a"]
            side_b_points += points["side_b"]
            side_a_projected += points["side_a"]
            side_b_projected += points["side_b"]
        elif state.status == MatchStatus.IN_PROGRESS:
            if state.leader == Side.SIDE_A:
                side_a_projected += 1
            elif state.leader == Side.SIDE_B:
                side_b_projected += 1
            else:
                side_a_projected += 0.5
                side_b_projected += 0.5

    total = len(matches)
    logger.debug("standings: %s-%s with %s of %s matches complete",
                 side_a_points, side_b_points, completed, total)
    return {
        "side_a_points": side_a_points,
        "side_b_points": side_b_points,
        "side_a_projected": side_a_projected,
        "side_b_projected": side_b_projected,
        "matches_played": played,
        "matches_completed": completed,
        "matches_in_progress": played - completed,
        "matches_remaining": total - completed,
        "total_matches": total,
        "points_remaining": float(total - completed),
        "leader": _leader(side_a_points, side_b_points),
        "margin": abs(side_a_points - side_b_points),
    }


def calculate_session_standings(session_id, matches, results_by_match, total_holes=TOTAL_HOLES):
    session_matches = [m for m in matches if m.session_id == session_id]
    standings = calculate_team_standings(session_matches, results_by_match, total_holes)
    return {
        "session_id": session_id,
        "side_a_points": standings["side_a_points"],
        "side_b_points": standings["side_b_points"],
        "matches_completed": standings["matches_completed"],
        "total_matches": standings["total_matches"],
    }


# ============================================================
# Player records
# ============================================================

def calculate_player_record(player_id, matches, results_by_match, total_holes=TOTAL_HOLES):
    """Win / loss / halve record over the completed matches a player took part in."""
    wins = losses = halves = 0
    for match, state in _states(matches, results_by_match, total_holes):
        if player_id in match.side_a_player_ids:
            side = Side.SIDE_A
        elif player_id in match.side_b_player_ids:
            side = Side.SIDE_B
        else:
            continue
        if state.status != MatchStatus.COMPLETED:
            continue

        if state.winning_side == side:
            wins += 1
        elif state.winning_side == opponent_of(side):
            losses += 1
        else:
            halves += 1

    return {
        "wins": wins,
        "losses": losses,
        "halves": halves,
        "points": wins + halves * 0.5,
        "matches_played": wins + losses + halves,
    }


def calculate_player_leaderboard(players, matches, results_by_match, team_of=None, total_holes=TOTAL_HOLES):
    """
    One row per player, best first: by points, then by win rate.

    `team_of` maps player id to team id (a draft assignment, say); players
    missing from it get an empty team.
    """
    team_of = team_of or {}
    board = []
    for player in players:
        record = calculate_player_record(player.id, matches, results_by_match, total_holes)
        board.append({
            "player_id": player.id,
            "player_name": player.name,
            "team_id": team_of.get(player.id, ""),
            **record,
        })

    def win_rate(row):
        return row["wins"] / row["matches_played"] if row["matches_played"] else 0.0

    board.sort(key=lambda row: (-row["points"], -win_rate(row)))
    return board


# ============================================================
# Magic number
# ============================================================

def points_needed_to_win(total_matches, points_per_match=1):
    """Outright majority of the points on offer; 14.5 for a 28-match cup."""
    return total_matches * points_per_match / 2 + 0.5


def calculate_magic_number(standings, points_to_win=POINTS_TO_WIN):
    """How many more points each side needs, and whether it can still get them."""
    side_a_needed = max(0.0, points_to_win - standings["side_a_points"])
    side_b_needed = max(0.0, points_to_win - standings["side_b_points"])
    remaining = standings["points_remaining"]

    side_a_clinched = standings["side_a_points"] >= points_to_win
    side_b_clinched = standings["side_b_points"] >= points_to_win
    if side_a_clinched:
        clinching_side = Side.SIDE_A
    elif side_b_clinched:
        clinching_side = Side.SIDE_B
    else:
        clinching_side = None

    return {
        "points_to_win": points_to_win,
        "points_remaining": remaining,
        "side_a_needed": side_a_needed,
        "side_b_needed": side_b_needed,
        "side_a_can_clinch": side_a_needed <= remaining,
        "side_b_can_clinch": side_b_needed <= remaining,
        "side_a_clinched": side_a_clinched,
        "side_b_clinched": side_b_clinched,
        "has_clinched": clinching_side is not None,
        "clinching_side": clinching_side,
    }


# ============================================================
# Session lineups
# ============================================================

def get_session_config(session_type):
    return dict(SESSION_CONFIG[SessionType(session_type)])


def validate_session_lineup(session_type, matches, roster_ids=None, match_count=None):
    """
    Check a session's matches before they are sent out.

    Returns a list of problems; empty means the lineup is fine. The match
    count is only checked when `match_count` is given, since a trip rarely
    fields the full twelve singles.
    """
    config = get_session_config(session_type)
    per_side = config["players_per_side"]
    errors = []

    if match_count is not None and len(matches) != match_count:
        errors.append(f"Expected {match_count} matches, got {len(matches)}")

    seen = set()
    repeated = set()
    for i, match in enumerate(matches, start=1):
        for label, ids in (("Side A", match.side_a_player_ids), ("Side B", match.side_b_player_ids)):
            if len(ids) != per_side:
                errors.append(f"Match {i}: {label} expected {per_side} players, got {len(ids)}")
            for pid in ids:
                if pid in seen:
                    repeated.add(pid)
                seen.add(pid)

    for pid in sorted(repeated):
        errors.append(f"Player {pid} appears in more than one match")

    if roster_ids is not None:
        roster = set(roster_ids)
        for pid in sorted(seen - roster):
            errors.append(f"Player {pid} is not on a team roster")

    return errors
