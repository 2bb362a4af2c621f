"""
Press ledger: side wagers that spin off the main match.

A press is scored like a match of its own over the holes from its start
hole to the end of the round, and it can never outlive the main match.
"""
import dataclasses
import logging
import uuid

import match_engine as me
from engine_errors import PressNotEligible
from match_models import TOTAL_HOLES, Press, PressStatus, Side, opponent_of

logger = logging.getLogger(__name__)

# Side must be at least this many holes down in the main match to press
PRESS_THRESHOLD = 2


def _holes_up(side, score):
    return score if side == Side.SIDE_A else -score


def _holes_down(side, score):
    return _holes_up(opponent_of(side), score)


def _leader_or_halved(score):
    if score > 0:
        return Side.SIDE_A
    if score < 0:
        return Side.SIDE_B
    return Side.HALVED


# ============================================================
# Opening
# ============================================================

def open_press(
    side,
    at_hole,
    hole_results,
    existing_presses=(),
    total_holes=TOTAL_HOLES,
    value=1,
    press_id=None,
) -> Press:
    """
    Open a press after hole `at_hole` has been completed.

    The press starts on the next hole. It is refused unless the side is
    PRESS_THRESHOLD or more down in the main match through `at_hole`, and
    never on the final hole or once the main match is decided.
    """
    side = Side(side)
    if side not in (Side.SIDE_A, Side.SIDE_B):
        raise ValueError(f"Only a playing side can press, got {side!r}")

    if isinstance(at_hole, bool) or not isinstance(at_hole, int) or not 1 <= at_hole <= total_holes:
        raise PressNotEligible(f"Cannot press at hole {at_hole!r}")

    start_hole = at_hole + 1
    if total_holes - at_hole <= 1:
        raise PressNotEligible("No press can be opened for the final hole")

    main = me.tally_holes(hole_results, through_hole=at_hole, total_holes=total_holes)
    if main["closed_at_hole"] is not None:
        raise PressNotEligible("The main match is already decided")

    down = _holes_down(side, main["score"])
    if down < PRESS_THRESHOLD:
        raise PressNotEligible(
            f"{side.value} is {down} down after hole {at_hole}; "
            f"a press needs {PRESS_THRESHOLD} down"
        )

    for press in existing_presses:
        if (
            press.initiated_by == side
            and press.start_hole == start_hole
            and press.status == PressStatus.ACTIVE
        ):
            raise PressNotEligible(f"{side.value} already pressed from hole {start_hole}")

    logger.debug("press opened by %s from hole %s", side.value, start_hole)
    return Press(
        id=press_id or str(uuid.uuid4()),
        start_hole=start_hole,
        initiated_by=side,
        value=value,
    )


# ============================================================
# Recompute
# ============================================================

def _recompute_one(press, hole_results, main_closed_at, total_holes):
    if main_closed_at is not None and press.start_hole > main_closed_at:
        # main match ended before this press played a hole
        return dataclasses.replace(
            press,
            status=PressStatus.CLOSED,
            running_score=0,
            result=Side.HALVED,
            closed_at_hole=main_closed_at,
        )

    tally = me.tally_holes(
        hole_results,
        first_hole=press.start_hole,
        through_hole=main_closed_at,
        total_holes=total_holes,
    )
    score = tally["score"]

    if tally["closed_at_hole"] is not None:
        closed_at = tally["closed_at_hole"]
    elif tally["holes_remaining"] == 0:
        closed_at = tally["last_hole"]
    elif main_closed_at is not None:
        closed_at = main_closed_at
    else:
        return dataclasses.replace(
            press,
            status=PressStatus.ACTIVE,
            running_score=score,
            result=None,
            closed_at_hole=None,
        )

    return dataclasses.replace(
        press,
        status=PressStatus.CLOSED,
        running_score=score,
        result=_leader_or_halved(score),
        closed_at_hole=closed_at,
    )


def recompute_presses(presses, hole_results, total_holes=TOTAL_HOLES):
    """
    Rebuild every press from the hole results.

    Pure: called after each scoring action (including undo, which can
    reopen a closed press) and returns new Press values in the same order.
    """
    main = me.tally_holes(hole_results, total_holes=total_holes)
    main_closed_at = main["closed_at_hole"]

    updated = []
    for press in presses:
        new_press = _recompute_one(press, hole_results, main_closed_at, total_holes)
        if new_press.status == PressStatus.CLOSED and press.status != PressStatus.CLOSED:
            logger.debug(
                "press %s closed at hole %s: %s",
                press.id, new_press.closed_at_hole, new_press.result.value,
            )
        updated.append(new_press)
    return updated


# ============================================================
# Exposure
# ============================================================

def press_exposure(presses):
    """
    Net value won per side across decided presses, plus what is still live.

    Halved presses move nothing. No money changes hands here.
    """
    side_a = 0
    side_b = 0
    open_count = 0
    open_value = 0

    for press in presses:
        if press.status == PressStatus.ACTIVE:
            open_count += 1
            open_value += press.value
        elif press.result == Side.SIDE_A:
            side_a += press.value
            side_b -= press.value
        elif press.result == Side.SIDE_B:
            side_b += press.value
            side_a -= press.value

    return {
        "side_a": side_a,
        "side_b": side_b,
        "open_presses": open_count,
        "open_value": open_value,
    }
