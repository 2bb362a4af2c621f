"""
Smart pairing: propose session line-ups and score how fair they are.

The fairness score is out of 100 and is built from four parts:

  - handicap balance    40  (4 points lost per stroke of team gap)
  - repeat opponents    30  (10 lost per earlier meeting)
  - repeat partners     15  (5 lost per earlier partnership)
  - constraints         15  (all lost on any violation)

Earlier meetings count less the further back they were, by RECENCY_DECAY
per session.
"""
import itertools
import logging

from match_models import (
    DEFAULT_HANDICAP,
    PairingHistoryEntry,
    PairingSuggestion,
    SessionType,
)

logger = logging.getLogger(__name__)

# ============================================================
# Constants
# ============================================================

HANDICAP_POINTS = 40.0
HANDICAP_POINTS_PER_STROKE = 4.0
OPPONENT_POINTS = 30.0
OPPONENT_POINTS_PER_REPEAT = 10.0
PARTNER_POINTS = 15.0
PARTNER_POINTS_PER_REPEAT = 5.0
CONSTRAINT_POINTS = 15.0

RECENCY_DECAY = 0.75

OPPONENTS = "opponents"
PARTNERS = "partners"

DEFAULT_PAIRING_CONFIG = {
    "avoid_repeat_matchups": True,
    "avoid_repeat_partnerships": True,
    "respect_constraints": True,
    "max_handicap_gap": 10.0,
}


# ============================================================
# History
# ============================================================

def extract_pairing_history(matches, sessions):
    """Opponent and partner entries for every match whose session is known."""
    by_id = {s.id: s for s in sessions}
    history = []

    for match in matches:
        session = by_id.get(match.session_id)
        if session is None:
            logger.debug("match %s has no known session; skipped", match.id)
            continue

        for a_id in match.side_a_player_ids:
            for b_id in match.side_b_player_ids:
                history.append(
                    PairingHistoryEntry(a_id, b_id, OPPONENTS, session.session_number, match.id)
                )

        if session.session_type != SessionType.SINGLES:
            for side in (match.side_a_player_ids, match.side_b_player_ids):
                for p1, p2 in itertools.combinations(side, 2):
                    history.append(
                        PairingHistoryEntry(p1, p2, PARTNERS, session.session_number, match.id)
                    )

    return history


def _same_pair(entry, p1, p2):
    return (entry.player1_id == p1 and entry.player2_id == p2) or (
        entry.player1_id == p2 and entry.player2_id == p1
    )


def count_matchups(player1_id, player2_id, history, relationship=None):
    return sum(
        1
        for h in history
        if _same_pair(h, player1_id, player2_id)
        and (relationship is None or h.relationship == relationship)
    )


def _latest_session(history):
    return max((h.session_number for h in history), default=0)


def weighted_matchups(player1_id, player2_id, history, relationship, latest_session=None):
    """Repeat count with older sessions discounted by RECENCY_DECAY each."""
    if latest_session is None:
        latest_session = _latest_session(history)
    total = 0.0
    for h in history:
        if h.relationship == relationship and _same_pair(h, player1_id, player2_id):
            total += RECENCY_DECAY ** max(0, latest_session - h.session_number)
    return total


# ============================================================
# Handicaps
# ============================================================

def _index(player):
    return player.handicap_index if player.handicap_index is not None else DEFAULT_HANDICAP


def team_handicap(players, session_type):
    if not players:
        return DEFAULT_HANDICAP
    handicaps = [_index(p) for p in players]
    if session_type == SessionType.SINGLES:
        return handicaps[0]
    if session_type == SessionType.FOURBALL:
        # best ball leans on the stronger player
        return min(handicaps)
    return sum(handicaps) / len(handicaps)


def handicap_gap(side_a_players, side_b_players, session_type):
    return abs(team_handicap(side_a_players, session_type) - team_handicap(side_b_players, session_type))


# ============================================================
# Constraints
# ============================================================

def check_constraints(side_a_ids, side_b_ids, constraints):
    violations = []
    everyone = set(side_a_ids) | set(side_b_ids)

    for c in constraints:
        p1_in = c.player1_id in everyone
        p2_in = c.player2_id in everyone
        reason = c.reason or "constraint"
        same_side = (c.player1_id in side_a_ids) == (c.player2_id in side_a_ids)

        if c.kind == "must_pair":
            if p1_in != p2_in:
                violations.append(f"Players must be paired together: {reason}")
            elif p1_in and p2_in and not same_side:
                violations.append(f"Players must be partners, not opponents: {reason}")
        elif c.kind == "must_not_pair":
            if p1_in and p2_in and same_side:
                violations.append(f"Players must not be partners: {reason}")
        elif c.kind == "must_not_oppose":
            if p1_in and p2_in and not same_side:
                violations.append(f"Players must not face each other: {reason}")
        else:
            raise ValueError(f"Unknown constraint kind: {c.kind!r}")

    return violations


# ============================================================
# Fairness scoring
# ============================================================

def _partner_pairs(players):
    return list(itertools.combinations([p.id for p in players], 2))


def fairness_breakdown(side_a_players, side_b_players, session_type, history, constraints=(), config=None):
    """
    Score one proposed match. Returns a dict with the total score, the
    points kept in each part, the raw repeat counts and any warnings.
    """
    cfg = dict(DEFAULT_PAIRING_CONFIG)
    cfg.update(config or {})
    latest = _latest_session(history)
    warnings = []

    gap = handicap_gap(side_a_players, side_b_players, session_type)
    handicap_pts = max(0.0, HANDICAP_POINTS - gap * HANDICAP_POINTS_PER_STROKE)
    if gap > cfg["max_handicap_gap"]:
        warnings.append(f"Large handicap gap: {gap:.1f} strokes")

    repeat_matchups = 0
    opponent_pts = OPPONENT_POINTS
    if cfg["avoid_repeat_matchups"]:
        weighted = 0.0
        for a in side_a_players:
            for b in side_b_players:
                repeat_matchups += count_matchups(a.id, b.id, history, OPPONENTS)
                weighted += weighted_matchups(a.id, b.id, history, OPPONENTS, latest)
        opponent_pts = max(0.0, OPPONENT_POINTS - weighted * OPPONENT_POINTS_PER_REPEAT)
        if repeat_matchups:
            plural = "s" if repeat_matchups > 1 else ""
            warnings.append(f"Repeat matchup ({repeat_matchups} previous meeting{plural})")

    repeat_partnerships = 0
    partner_pts = PARTNER_POINTS
    if cfg["avoid_repeat_partnerships"] and session_type != SessionType.SINGLES:
        weighted = 0.0
        for side in (side_a_players, side_b_players):
            for p1, p2 in _partner_pairs(side):
                repeat_partnerships += count_matchups(p1, p2, history, PARTNERS)
                weighted += weighted_matchups(p1, p2, history, PARTNERS, latest)
        partner_pts = max(0.0, PARTNER_POINTS - weighted * PARTNER_POINTS_PER_REPEAT)
        if repeat_partnerships:
            warnings.append("Repeat partnership")

    violations = []
    constraint_pts = CONSTRAINT_POINTS
    if cfg["respect_constraints"]:
        violations = check_constraints(
            [p.id for p in side_a_players],
            [p.id for p in side_b_players],
            constraints,
        )
        if violations:
            constraint_pts = 0.0
        warnings.extend(violations)

    score = handicap_pts + opponent_pts + partner_pts + constraint_pts
    return {
        "score": round(max(0.0, min(100.0, score)), 1),
        "handicap": handicap_pts,
        "opponents": opponent_pts,
        "partners": partner_pts,
        "constraints": constraint_pts,
        "handicap_gap": gap,
        "repeat_matchups": repeat_matchups,
        "repeat_partnerships": repeat_partnerships,
        "violations": violations,
        "warnings": warnings,
    }


def _reasoning(side_a_players, side_b_players, session_type, history):
    reasons = []

    first_meeting = all(
        count_matchups(a.id, b.id, history, OPPONENTS) == 0
        for a in side_a_players
        for b in side_b_players
    )
    if first_meeting:
        reasons.append("First-time matchup")

    if session_type != SessionType.SINGLES:
        fresh = all(
            count_matchups(p1, p2, history, PARTNERS) == 0
            for side in (side_a_players, side_b_players)
            for p1, p2 in _partner_pairs(side)
        )
        if fresh:
            reasons.append("Fresh partnerships")

    diff = handicap_gap(side_a_players, side_b_players, session_type)
    if diff < 2:
        reasons.append("Well-matched handicaps")
    elif diff < 5:
        reasons.append("Competitive handicap gap")

    return reasons


# ============================================================
# Suggestions
# ============================================================

def players_per_side(session_type):
    return 1 if session_type == SessionType.SINGLES else 2


def suggest_pairings(
    side_a_players,
    side_b_players,
    history,
    match_count,
    session_type=SessionType.SINGLES,
    constraints=(),
    config=None,
):
    """
    Greedy line-up: fill each match slot in turn with the fairest pairing
    of players not yet used. Stops early when either side runs out.
    """
    session_type = SessionType(session_type)
    size = players_per_side(session_type)
    used_a = set()
    used_b = set()
    suggestions = []

    for slot in range(max(0, match_count)):
        avail_a = [p for p in side_a_players if p.id not in used_a]
        avail_b = [p for p in side_b_players if p.id not in used_b]
        if len(avail_a) < size or len(avail_b) < size:
            break

        best = None
        for team_a in itertools.combinations(avail_a, size):
            for team_b in itertools.combinations(avail_b, size):
                result = fairness_breakdown(
                    list(team_a), list(team_b), session_type, history, constraints, config
                )
                if best is None or result["score"] > best[2]["score"]:
                    best = (list(team_a), list(team_b), result)

        team_a, team_b, result = best
        suggestions.append(
            PairingSuggestion(
                match_slot=slot + 1,
                side_a_player_ids=[p.id for p in team_a],
                side_b_player_ids=[p.id for p in team_b],
                fairness_score=result["score"],
                handicap_gap=result["handicap_gap"],
                reasoning=_reasoning(team_a, team_b, session_type, history),
                warnings=result["warnings"],
            )
        )
        used_a.update(p.id for p in team_a)
        used_b.update(p.id for p in team_b)

    return suggestions


# ============================================================
# Session analysis
# ============================================================

def _improvement_tips(fairness, repeat_count):
    tips = []
    if fairness < 70:
        tips.append("Consider using auto-fill for better balance")
    if repeat_count > 2:
        tips.append("Multiple repeat matchups - try shuffling pairings")
    if not tips:
        tips.append("Pairings look well-balanced")
    return tips


def analyze_session_pairings(
    matches,
    side_a_players,
    side_b_players,
    history,
    session_type=None,
    constraints=(),
    config=None,
):
    """
    Read-only report on pairings already committed for a session.

    Uses the same fairness metric as suggest_pairings, averaged over the
    session's matches.
    """
    a_by_id = {p.id: p for p in side_a_players}
    b_by_id = {p.id: p for p in side_b_players}

    total_fairness = 0.0
    total_handicap_pts = 0.0
    repeat_matchups = 0
    repeat_partnerships = 0
    violations = []
    stroke_diff = 0.0

    for match in matches:
        kind = SessionType(session_type or match.session_type)
        team_a = [a_by_id[pid] for pid in match.side_a_player_ids if pid in a_by_id]
        team_b = [b_by_id[pid] for pid in match.side_b_player_ids if pid in b_by_id]

        result = fairness_breakdown(team_a, team_b, kind, history, constraints, config)
        total_fairness += result["score"]
        total_handicap_pts += result["handicap"]

        for a_id in match.side_a_player_ids:
            for b_id in match.side_b_player_ids:
                repeat_matchups += count_matchups(a_id, b_id, history, OPPONENTS)
        if kind != SessionType.SINGLES:
            for side in (match.side_a_player_ids, match.side_b_player_ids):
                for p1, p2 in itertools.combinations(side, 2):
                    repeat_partnerships += count_matchups(p1, p2, history, PARTNERS)

        # positive = side A gets the strokes
        stroke_diff += team_handicap(team_a, kind) - team_handicap(team_b, kind)
        for v in result["violations"]:
            if v not in violations:
                violations.append(v)

    count = len(matches)
    fairness = total_fairness / count if count else 0.0
    handicap_balance = (total_handicap_pts / count) * (100.0 / HANDICAP_POINTS) if count else 0.0

    if stroke_diff > 0.5:
        advantage_side = "side_a"
    elif stroke_diff < -0.5:
        advantage_side = "side_b"
    else:
        advantage_side = "even"

    return {
        "overall_fairness_score": round(fairness),
        "handicap_balance": round(handicap_balance),
        "repeat_matchup_count": repeat_matchups,
        "repeat_partnership_count": repeat_partnerships,
        "constraint_violations": violations,
        "suggestions": _improvement_tips(fairness, repeat_matchups) if count else [],
        "stroke_advantage": {"side": advantage_side, "strokes": abs(stroke_diff)},
    }
