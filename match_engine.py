"""
Match-play state machine.

MatchState is never stored: it is folded from scratch out of a match's
hole results on every call, so recording, correcting and undoing a hole
all reduce to producing a new list of HoleResults.
"""
import logging

from engine_errors import InconsistentHoleResult
from match_models import (
    TOTAL_HOLES,
    MatchState,
    MatchStatus,
    Side,
)

logger = logging.getLogger(__name__)

DEFAULT_SIDE_NAMES = {Side.SIDE_A: "Side A", Side.SIDE_B: "Side B"}


# ============================================================
# Utility functions
# ============================================================

def _as_side(value):
    try:
        return Side(value)
    except ValueError:
        return None


def _valid_hole_number(hole_number, total_holes):
    return (
        isinstance(hole_number, int)
        and not isinstance(hole_number, bool)
        and 1 <= hole_number <= total_holes
    )


def normalize_hole_results(hole_results, total_holes=TOTAL_HOLES):
    """
    One result per hole, in hole order.

    Out-of-range holes and unknown winners are dropped. When a hole shows
    up twice the later entry wins (it is a correction).
    """
    by_hole = {}
    for result in hole_results:
        if not _valid_hole_number(result.hole_number, total_holes):
            logger.debug("skipping out-of-range hole %r", result.hole_number)
            continue
        if _as_side(result.winner) is None:
            logger.debug("skipping hole %s with unknown winner %r", result.hole_number, result.winner)
            continue
        by_hole[result.hole_number] = result
    return [by_hole[h] for h in sorted(by_hole)]


def format_match_score(score, holes_remaining, is_closed_out, holes_played, side_names=None):
    """
    "AS", "<N> UP" (from the leader's side) while live, and
    "<Side> wins <N> & <M>" once closed out. A match decided on the last
    hole reads "<Side> wins <N> UP".
    """
    if holes_played == 0 or score == 0:
        return "AS"

    names = side_names or DEFAULT_SIDE_NAMES
    margin = abs(score)

    if is_closed_out:
        winner = names[Side.SIDE_A] if score > 0 else names[Side.SIDE_B]
        if holes_remaining == 0:
            return f"{winner} wins {margin} UP"
        return f"{winner} wins {margin} & {holes_remaining}"

    return f"{margin} UP"


# ============================================================
# Match state
# ============================================================

def tally_holes(hole_results, first_hole=1, through_hole=None, total_holes=TOTAL_HOLES):
    """
    Running match-play tally over the window first_hole..total_holes.

    Only holes up to through_hole (inclusive) are counted when it is given.
    The fold stops at the hole where the lead exceeds the holes left in
    the window. Returns a dict with score (+ favors side A), holes won per
    side, holes_played, holes_remaining, closed_at_hole and last_hole.
    """
    window = total_holes - first_hole + 1
    side_a_won = 0
    side_b_won = 0
    holes_played = 0
    closed_at_hole = None
    last_hole = None

    for result in normalize_hole_results(hole_results, total_holes):
        if result.hole_number < first_hole:
            continue
        if through_hole is not None and result.hole_number > through_hole:
            break
        winner = _as_side(result.winner)
        if winner == Side.NONE:
            continue
        if winner == Side.SIDE_A:
            side_a_won += 1
        elif winner == Side.SIDE_B:
            side_b_won += 1
        holes_played += 1
        last_hole = result.hole_number

        if abs(side_a_won - side_b_won) > window - holes_played:
            closed_at_hole = result.hole_number
            break

    return {
        "score": side_a_won - side_b_won,
        "side_a_won": side_a_won,
        "side_b_won": side_b_won,
        "holes_played": holes_played,
        "holes_remaining": max(0, window - holes_played),
        "closed_at_hole": closed_at_hole,
        "last_hole": last_hole,
    }


def calculate_match_state(match, hole_results, total_holes=TOTAL_HOLES, side_names=None) -> MatchState:
    """
    Fold a match's hole results into its current MatchState.

    Folding stops at the hole that closes the match out; anything recorded
    after that hole cannot change the result and is ignored.
    """
    tally = tally_holes(hole_results, total_holes=total_holes)
    side_a_won = tally["side_a_won"]
    side_b_won = tally["side_b_won"]
    holes_played = tally["holes_played"]
    closed_at_hole = tally["closed_at_hole"]

    score = tally["score"]
    holes_remaining = tally["holes_remaining"]
    is_closed_out = abs(score) > holes_remaining
    is_dormie = abs(score) == holes_remaining and holes_remaining > 0

    if holes_played == 0:
        status = MatchStatus.SCHEDULED
    elif is_closed_out or holes_remaining == 0:
        status = MatchStatus.COMPLETED
    else:
        status = MatchStatus.IN_PROGRESS

    if score > 0:
        leader = Side.SIDE_A
    elif score < 0:
        leader = Side.SIDE_B
    else:
        leader = None

    winning_side = None
    if status == MatchStatus.COMPLETED:
        winning_side = leader or Side.HALVED
        logger.debug("match %s complete: %s by %s", match.id, winning_side.value, abs(score))

    return MatchState(
        current_score=score,
        holes_played=holes_played,
        holes_remaining=holes_remaining,
        is_dormie=is_dormie,
        is_closed_out=is_closed_out,
        winning_side=winning_side,
        display_score=format_match_score(
            score, holes_remaining, is_closed_out, holes_played, side_names
        ),
        status=status,
        side_a_holes_won=side_a_won,
        side_b_holes_won=side_b_won,
        leader=leader,
        closed_at_hole=closed_at_hole,
    )


# ============================================================
# Hole result management
# ============================================================

def _check_result(match, result, total_holes):
    if result.match_id != match.id:
        raise InconsistentHoleResult(
            f"Hole result belongs to match {result.match_id}, not {match.id}"
        )
    if not _valid_hole_number(result.hole_number, total_holes):
        raise InconsistentHoleResult(
            f"Invalid hole number: {result.hole_number!r}. Must be 1-{total_holes}."
        )
    if _as_side(result.winner) is None:
        raise InconsistentHoleResult(f"Invalid hole winner: {result.winner!r}")


def record_hole_result(match, hole_results, result, total_holes=TOTAL_HOLES):
    """Append a new hole result, returning the new list."""
    _check_result(match, result, total_holes)

    if any(r.hole_number == result.hole_number for r in hole_results):
        raise InconsistentHoleResult(
            f"Hole {result.hole_number} already has a result; correct it instead"
        )

    state = calculate_match_state(match, hole_results, total_holes)
    if state.status == MatchStatus.COMPLETED:
        raise InconsistentHoleResult(
            f"Match {match.id} is already decided ({state.display_score})"
        )

    logger.debug("match %s hole %s -> %s", match.id, result.hole_number, Side(result.winner).value)
    return list(hole_results) + [result]


def correct_hole_result(match, hole_results, result, total_holes=TOTAL_HOLES):
    """Replace an existing hole's result in place."""
    _check_result(match, result, total_holes)

    positions = [i for i, r in enumerate(hole_results) if r.hole_number == result.hole_number]
    if not positions:
        raise InconsistentHoleResult(f"Hole {result.hole_number} has no result to correct")

    updated = list(hole_results)
    updated[positions[-1]] = result
    return updated


def undo_last_hole(hole_results):
    """Drop the most recently recorded result (no-op on an empty list)."""
    return list(hole_results)[:-1]


def next_hole(hole_results, total_holes=TOTAL_HOLES):
    """First hole without a played result, or None when all are in."""
    played = {
        r.hole_number
        for r in normalize_hole_results(hole_results, total_holes)
        if _as_side(r.winner) != Side.NONE
    }
    for hole in range(1, total_holes + 1):
        if hole not in played:
            return hole
    return None


# ============================================================
# Dormie & closeout helpers
# ============================================================

def would_close_out(current_score, holes_remaining, proposed_winner):
    """Would recording proposed_winner on the next hole end the match?"""
    new_score = current_score
    if proposed_winner == Side.SIDE_A:
        new_score += 1
    elif proposed_winner == Side.SIDE_B:
        new_score -= 1
    return abs(new_score) > holes_remaining - 1


# ============================================================
# Results & points
# ============================================================

def match_points(state):
    """Ryder Cup points: 1 for a win, half each for a halve, nothing until decided."""
    if state.status != MatchStatus.COMPLETED:
        return {"side_a": 0.0, "side_b": 0.0}
    if state.winning_side == Side.SIDE_A:
        return {"side_a": 1.0, "side_b": 0.0}
    if state.winning_side == Side.SIDE_B:
        return {"side_a": 0.0, "side_b": 1.0}
    return {"side_a": 0.5, "side_b": 0.5}


def match_result_label(state):
    """Short result notation: "3&2", "1 UP", "halved" or "incomplete"."""
    if state.status != MatchStatus.COMPLETED:
        return "incomplete"
    if state.current_score == 0:
        return "halved"
    margin = abs(state.current_score)
    if state.holes_remaining == 0:
        return f"{margin} UP"
    return f"{margin}&{state.holes_remaining}"


def format_final_result(state, side_a_name, side_b_name):
    if state.status != MatchStatus.COMPLETED:
        return f"In progress: {state.display_score}"
    if state.winning_side == Side.HALVED:
        return "Match Halved"
    winner = side_a_name if state.winning_side == Side.SIDE_A else side_b_name
    return f"{winner} won {match_result_label(state)}"
