import logging

import handicap_engine as he
from match_models import HoleResult, SessionType, Side

logger = logging.getLogger(__name__)


# ============================================================
# Single score (singles / foursomes)
# ============================================================

def resolve_hole(gross_a, gross_b, strokes_a=0, strokes_b=0) -> Side:
    """Lower net wins the hole; equal nets halve it."""
    if gross_a is None or gross_b is None:
        raise ValueError("Both gross scores are required to resolve a hole")

    net_a = he.net_score(gross_a, strokes_a)
    net_b = he.net_score(gross_b, strokes_b)
    if net_a < net_b:
        return Side.SIDE_A
    if net_b < net_a:
        return Side.SIDE_B
    return Side.HALVED


# ============================================================
# Best ball (fourball)
# ============================================================

def best_ball(gross_scores, strokes):
    """
    Lowest net score on a side and the position of the player who made it.

    Picked-up balls (None) are skipped. Ties keep the first player listed.
    Returns (None, None) when nobody on the side holed out.
    """
    best_net = None
    best_idx = None
    for idx, gross in enumerate(gross_scores):
        if gross is None:
            continue
        received = strokes[idx] if idx < len(strokes) else 0
        net = he.net_score(gross, received)
        if best_net is None or net < best_net:
            best_net = net
            best_idx = idx
    return best_net, best_idx


def resolve_best_ball(gross_a, gross_b, strokes_a, strokes_b):
    """
    Fourball hole: each side's best net ball, then the single-score rule.

    A side with no ball holed out loses the hole to a side that has one.
    """
    net_a, idx_a = best_ball(gross_a, strokes_a)
    net_b, idx_b = best_ball(gross_b, strokes_b)

    if net_a is None and net_b is None:
        winner = Side.NONE
    elif net_a is None:
        winner = Side.SIDE_B
    elif net_b is None:
        winner = Side.SIDE_A
    else:
        # nets already include strokes
        winner = resolve_hole(net_a, net_b)

    return {
        "winner": winner,
        "side_a_net": net_a,
        "side_b_net": net_b,
        "side_a_best_index": idx_a,
        "side_b_best_index": idx_b,
    }


# ============================================================
# Match-aware scoring
# ============================================================

def score_hole(
    match,
    tee_set,
    hole_number,
    side_a_gross=None,
    side_b_gross=None,
    side_a_player_scores=None,
    side_b_player_scores=None,
):
    """
    Turn raw gross scores for one hole into a HoleResult.

    Singles and foursomes use the match-play differential between the two
    side allowances. Fourball uses each player's own allowance from
    match.player_allowances.
    """
    ranking = tee_set.hole_handicap_ranking

    if match.session_type == SessionType.FOURBALL:
        a_scores = list(side_a_player_scores or [])
        b_scores = list(side_b_player_scores or [])
        a_strokes = [
            he.strokes_on_hole_for(hole_number, match.player_allowances.get(pid, 0), ranking)
            for pid in match.side_a_player_ids
        ]
        b_strokes = [
            he.strokes_on_hole_for(hole_number, match.player_allowances.get(pid, 0), ranking)
            for pid in match.side_b_player_ids
        ]
        outcome = resolve_best_ball(a_scores, b_scores, a_strokes, b_strokes)
        logger.debug(
            "match %s hole %s best ball nets %s / %s",
            match.id, hole_number, outcome["side_a_net"], outcome["side_b_net"],
        )
        return HoleResult(
            match_id=match.id,
            hole_number=hole_number,
            winner=outcome["winner"],
            per_player_scores=(tuple(a_scores), tuple(b_scores)),
        )

    if match.session_type not in (SessionType.SINGLES, SessionType.FOURSOMES):
        raise ValueError(f"Unknown session type: {match.session_type!r}")

    strokes = he.strokes_on_hole(
        hole_number,
        match.side_a_handicap_allowance,
        match.side_b_handicap_allowance,
        ranking,
    )
    winner = resolve_hole(side_a_gross, side_b_gross, strokes["side_a"], strokes["side_b"])
    return HoleResult(
        match_id=match.id,
        hole_number=hole_number,
        winner=winner,
        side_a_gross=side_a_gross,
        side_b_gross=side_b_gross,
    )
