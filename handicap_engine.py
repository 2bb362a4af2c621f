import logging
import math
import numbers

from engine_errors import InconsistentHoleResult, InvalidCourseData
from match_models import TOTAL_HOLES

logger = logging.getLogger(__name__)

# ============================================================
# Constants
# ============================================================

STANDARD_SLOPE = 113

# Default format allowances (fraction of handicap used)
SINGLES_ALLOWANCE = 1.0
FOURSOMES_ALLOWANCE = 0.5
FOURBALL_ALLOWANCE = 0.9


# ============================================================
# Utility functions
# ============================================================

def _round_half_up(value):
    """Round .5 up, matching how course handicaps are published."""
    return int(math.floor(value + 0.5))


def validate_hole_ranking(ranking):
    """
    Check that a hole handicap ranking is a permutation of 1..18.

    Returns a list of problems (empty when the ranking is usable).
    """
    if ranking is None:
        return ["No hole handicap ranking supplied"]

    ranking = list(ranking)
    if len(ranking) != TOTAL_HOLES:
        return [f"Expected {TOTAL_HOLES} hole handicaps, got {len(ranking)}"]

    problems = []
    if any(isinstance(r, bool) or not isinstance(r, numbers.Integral) for r in ranking):
        problems.append("Hole handicaps must be whole numbers")
        return problems

    expected = list(range(1, TOTAL_HOLES + 1))
    if sorted(ranking) == expected:
        return problems

    problems.append(f"Hole handicaps must be unique values from 1-{TOTAL_HOLES}")

    seen = set()
    duplicates = []
    for r in ranking:
        if r in seen and r not in duplicates:
            duplicates.append(r)
        seen.add(r)
    if duplicates:
        problems.append("Duplicate handicaps: " + ", ".join(str(d) for d in duplicates))

    out_of_range = [r for r in ranking if r < 1 or r > TOTAL_HOLES]
    if out_of_range:
        problems.append("Out of range values: " + ", ".join(str(r) for r in out_of_range))

    missing = [n for n in expected if n not in seen]
    if missing:
        problems.append("Missing handicaps: " + ", ".join(str(m) for m in missing))

    return problems


def _check_hole_number(hole_number):
    if isinstance(hole_number, bool) or not isinstance(hole_number, numbers.Integral):
        raise InconsistentHoleResult(f"Hole number must be an integer, got {hole_number!r}")
    if hole_number < 1 or hole_number > TOTAL_HOLES:
        raise InconsistentHoleResult(
            f"Invalid hole number: {hole_number}. Must be 1-{TOTAL_HOLES}."
        )


# ============================================================
# Course handicap
# ============================================================

def course_handicap(handicap_index: float, slope_rating: float, course_rating: float, par: int) -> int:
    """
    Course handicap from a WHS index:

        round(index * slope / 113 + (course rating - par))

    Plus handicaps come through as negative numbers.
    """
    value = handicap_index * (slope_rating / STANDARD_SLOPE) + (course_rating - par)
    return _round_half_up(value)


# ============================================================
# Stroke allocation
# ============================================================

def allocate_strokes(handicap_allowance: int, hole_ranking) -> list:
    """
    Spread a whole-stroke allowance over the 18 holes by difficulty.

    One stroke lands on each of the N hardest holes (ranking 1..N). Past 18
    the allocation wraps: every hole gets a stroke and the hardest N-18 get
    a second one, and so on. Negative allowances receive nothing.
    """
    problems = validate_hole_ranking(hole_ranking)
    if problems:
        raise InvalidCourseData(problems)

    allowance = int(handicap_allowance)
    if allowance <= 0:
        return [0] * TOTAL_HOLES

    base, extra = divmod(allowance, TOTAL_HOLES)
    hardest_first = sorted(range(TOTAL_HOLES), key=lambda i: hole_ranking[i])

    strokes = [base] * TOTAL_HOLES
    for idx in hardest_first[:extra]:
        strokes[idx] += 1
    return strokes


def strokes_on_hole_for(hole_number, handicap_allowance, hole_ranking):
    """Strokes a single player/side receives on one hole."""
    _check_hole_number(hole_number)
    return allocate_strokes(handicap_allowance, hole_ranking)[hole_number - 1]


def match_stroke_allocation(side_a_allowance, side_b_allowance, hole_ranking):
    """
    Full-round match-play allocation.

    Only the difference between the two allowances is given, and only to
    the side with the larger one. Returns {"side_a": [...], "side_b": [...]}.
    """
    a = max(0, int(side_a_allowance))
    b = max(0, int(side_b_allowance))
    diff_strokes = allocate_strokes(abs(a - b), hole_ranking)
    zeros = [0] * TOTAL_HOLES

    if a > b:
        return {"side_a": diff_strokes, "side_b": zeros}
    if b > a:
        return {"side_a": zeros, "side_b": diff_strokes}
    return {"side_a": zeros, "side_b": list(zeros)}


def strokes_on_hole(hole_number, side_a_allowance, side_b_allowance, hole_ranking):
    """Match-play strokes for one hole: {"side_a": n, "side_b": 0} or the mirror."""
    _check_hole_number(hole_number)
    allocation = match_stroke_allocation(side_a_allowance, side_b_allowance, hole_ranking)
    return {
        "side_a": allocation["side_a"][hole_number - 1],
        "side_b": allocation["side_b"][hole_number - 1],
    }


# ============================================================
# Net scoring
# ============================================================

def net_score(gross, strokes_received):
    return gross - strokes_received


def stableford_points(net, par):
    rel = net - par
    if rel <= -3:
        return 5
    if rel == -2:
        return 4
    if rel == -1:
        return 3
    if rel == 0:
        return 2
    if rel == 1:
        return 1
    return 0


# ============================================================
# Format allowances
# ============================================================

def singles_allowances(side_a_course_handicap, side_b_course_handicap, allowance=SINGLES_ALLOWANCE):
    """Higher handicap receives (difference * allowance); the other plays off zero."""
    difference = side_a_course_handicap - side_b_course_handicap
    adjusted = _round_half_up(abs(difference) * allowance)

    if difference > 0:
        return {"side_a": adjusted, "side_b": 0}
    if difference < 0:
        return {"side_a": 0, "side_b": adjusted}
    return {"side_a": 0, "side_b": 0}


def foursomes_allowances(side_a_course_handicaps, side_b_course_handicaps, allowance=FOURSOMES_ALLOWANCE):
    """Alternate shot: compare the combined team handicaps scaled by the allowance."""
    combined_a = _round_half_up(sum(side_a_course_handicaps) * allowance)
    combined_b = _round_half_up(sum(side_b_course_handicaps) * allowance)
    difference = combined_a - combined_b

    if difference > 0:
        return {"side_a": difference, "side_b": 0}
    if difference < 0:
        return {"side_a": 0, "side_b": -difference}
    return {"side_a": 0, "side_b": 0}


def fourball_allowances(side_a_course_handicaps, side_b_course_handicaps, allowance=FOURBALL_ALLOWANCE):
    """
    Best ball: the lowest handicap in the match plays off scratch and every
    other player receives a share of their difference from it.

    Returns per-player allowances, in the order given.
    """
    everyone = list(side_a_course_handicaps) + list(side_b_course_handicaps)
    if not everyone:
        return {"side_a": [], "side_b": []}

    lowest = min(everyone)
    logger.debug("fourball allowances off lowest handicap %s", lowest)
    return {
        "side_a": [_round_half_up((h - lowest) * allowance) for h in side_a_course_handicaps],
        "side_b": [_round_half_up((h - lowest) * allowance) for h in side_b_course_handicaps],
    }
