"""
Team selection for a trip.

Interactive drafts (snake or auction) move through DraftState values one
pick at a time. Random and handicap-balanced allocation skip the turn
order and hand back a finished assignment in one call.
"""
import dataclasses
import logging
import math
import random

from engine_errors import DraftAlreadyComplete, InsufficientBudget, PlayerNotAvailable
from match_models import (
    DEFAULT_AUCTION_BUDGET,
    DEFAULT_HANDICAP,
    MISSING_HANDICAP,
    DraftConfig,
    DraftMode,
    DraftPick,
    DraftState,
    DraftStatus,
)

logger = logging.getLogger(__name__)

MIN_DRAFT_TEAMS = 2
MIN_DRAFT_PLAYERS = 4


# ============================================================
# Utility functions
# ============================================================

def _handicap(player, default=DEFAULT_HANDICAP):
    return player.handicap_index if player.handicap_index is not None else default


def _auto_pick_key(player):
    # lowest index first; no index on file ranks last
    return (_handicap(player, MISSING_HANDICAP), str(player.id))


def calculate_team_handicap_total(players):
    return sum(_handicap(p) for p in players)


# ============================================================
# Setup
# ============================================================

def create_draft_config(mode, draft_order, player_count, budget_per_team=DEFAULT_AUCTION_BUDGET):
    mode = DraftMode(mode)
    order = tuple(draft_order)
    if not order:
        raise ValueError("Draft order needs at least one team")
    if len(set(order)) != len(order):
        raise ValueError("Draft order lists a team more than once")
    if mode == DraftMode.AUCTION and budget_per_team <= 0:
        raise ValueError("Auction budget must be positive")

    return DraftConfig(
        mode=mode,
        draft_order=order,
        budget_per_team=budget_per_team,
        round_count=math.ceil(player_count / len(order)) if player_count > 0 else 0,
    )


def initialize_draft(config, players):
    return DraftState(
        config=config,
        picks=(),
        available_players=tuple(players),
        current_pick_index=0,
        status=DraftStatus.NOT_STARTED,
        total_players=len(players),
    )


def validate_draft_ready(config, players):
    """Problems that should stop a draft from starting (empty = ready)."""
    errors = []
    if len(config.draft_order) < MIN_DRAFT_TEAMS:
        errors.append(f"Need at least {MIN_DRAFT_TEAMS} teams for draft")
    if len(players) < MIN_DRAFT_PLAYERS:
        errors.append(f"Need at least {MIN_DRAFT_PLAYERS} players for draft")

    ids = [p.id for p in players]
    if len(set(ids)) != len(ids):
        errors.append("Player pool lists a player more than once")

    if config.mode == DraftMode.AUCTION and not config.budget_per_team:
        errors.append("Auction budget not set")
    return errors


# ============================================================
# Turn order
# ============================================================

def team_for_pick(config, pick_index):
    """
    Team on the clock for a zero-based pick index.

    Snake drafts flip the order every other round (A,B,B,A,...); auction
    nominations rotate through the order unchanged.
    """
    n = len(config.draft_order)
    round_idx, pos = divmod(pick_index, n)
    if config.mode == DraftMode.SNAKE and round_idx % 2 == 1:
        return config.draft_order[n - 1 - pos]
    return config.draft_order[pos]


def current_team(state):
    if state.status == DraftStatus.COMPLETE:
        return None
    return team_for_pick(state.config, state.current_pick_index)


def remaining_budget(state, team_id):
    spent = sum(p.price or 0 for p in state.picks if p.team_id == team_id)
    return state.config.budget_per_team - spent


# ============================================================
# Picks
# ============================================================

def make_draft_pick(state, player_id, price=None):
    """Record the pick for whichever team is on the clock; returns the new state."""
    if state.status == DraftStatus.COMPLETE:
        raise DraftAlreadyComplete("Draft is already complete")

    player = next((p for p in state.available_players if p.id == player_id), None)
    if player is None:
        raise PlayerNotAvailable(player_id)

    config = state.config
    team_id = team_for_pick(config, state.current_pick_index)

    if config.mode == DraftMode.AUCTION:
        if price is None:
            raise ValueError("Auction picks need a price")
        if price < 0:
            raise ValueError(f"Price cannot be negative: {price}")
        left = remaining_budget(state, team_id)
        if price > left:
            raise InsufficientBudget(team_id, price, left)
    else:
        price = None

    n = len(config.draft_order)
    pick = DraftPick(
        player_id=player_id,
        team_id=team_id,
        price=price,
        round_number=state.current_pick_index // n + 1,
        pick_number=state.current_pick_index + 1,
    )

    picks = state.picks + (pick,)
    available = tuple(p for p in state.available_players if p.id != player_id)

    if len(picks) >= state.total_players or not available:
        status = DraftStatus.COMPLETE
        logger.debug("draft complete after %s picks", len(picks))
    else:
        status = DraftStatus.IN_PROGRESS

    return dataclasses.replace(
        state,
        picks=picks,
        available_players=available,
        current_pick_index=state.current_pick_index + 1,
        status=status,
    )


def auto_pick_player(state):
    """
    Best available player by a fixed ranking: lowest handicap index, then
    player id. Returns None when the pool is empty.
    """
    if not state.available_players:
        return None
    return min(state.available_players, key=_auto_pick_key).id


# ============================================================
# Results
# ============================================================

def draft_assignment(state):
    """player id -> team id for every pick made so far."""
    return {pick.player_id: pick.team_id for pick in state.picks}


def team_rosters(state):
    rosters = {team_id: [] for team_id in state.config.draft_order}
    for pick in state.picks:
        rosters[pick.team_id].append(pick.player_id)
    return rosters


def draft_summary(state, players):
    """
    Board-level view of a draft: counts, handicap totals and pick history.

    `players` is the full pool so picked players can be named.
    """
    by_id = {p.id: p for p in players}
    rosters = team_rosters(state)

    teams = []
    for team_id in state.config.draft_order:
        roster = [by_id[pid] for pid in rosters[team_id] if pid in by_id]
        entry = {
            "team_id": team_id,
            "count": len(rosters[team_id]),
            "handicap_total": calculate_team_handicap_total(roster),
        }
        if state.config.mode == DraftMode.AUCTION:
            entry["remaining_budget"] = remaining_budget(state, team_id)
        teams.append(entry)

    history = []
    for pick in state.picks:
        player = by_id.get(pick.player_id)
        history.append(
            {
                "round": pick.round_number,
                "pick": pick.pick_number,
                "team": pick.team_id,
                "player": player.name if player else "Unknown",
                "price": pick.price,
            }
        )

    return {
        "status": state.status.value,
        "total_picks": len(state.picks),
        "remaining_players": len(state.available_players),
        "on_the_clock": current_team(state),
        "teams": teams,
        "pick_history": history,
    }


# ============================================================
# One-shot allocation
# ============================================================

def _allocation(rosters, players_by_id):
    assignment = {}
    for team_id, roster in rosters.items():
        for pid in roster:
            assignment[pid] = team_id
    return {
        "assignment": assignment,
        "rosters": rosters,
        "handicap_totals": {
            team_id: calculate_team_handicap_total([players_by_id[pid] for pid in roster])
            for team_id, roster in rosters.items()
        },
    }


def randomize_teams(players, team_ids, seed=None):
    """Uniform shuffle, then split into team-sized runs (sizes differ by at most one)."""
    team_ids = list(team_ids)
    if not team_ids:
        raise ValueError("Need at least one team")

    shuffled = list(players)
    random.Random(seed).shuffle(shuffled)

    base, extra = divmod(len(shuffled), len(team_ids))
    rosters = {}
    start = 0
    for i, team_id in enumerate(team_ids):
        size = base + (1 if i < extra else 0)
        rosters[team_id] = [p.id for p in shuffled[start:start + size]]
        start += size

    return _allocation(rosters, {p.id: p for p in players})


def balance_teams_by_handicap(players, team_ids):
    """
    Greedy balance: highest handicap first, each to the team with the lower
    running total. A team that already has its share of players is skipped
    so rosters stay even.

    Even rosters win over the lower-total rule: once the low team is full,
    the next player goes elsewhere, so the handicap gap can end up wider
    than plain greedy would leave it. [20, 1, 1, 1] splits 21 vs 2 rather
    than 20 vs 3.
    """
    team_ids = list(team_ids)
    if not team_ids:
        raise ValueError("Need at least one team")

    base, extra = divmod(len(players), len(team_ids))
    rosters = {team_id: [] for team_id in team_ids}
    totals = {team_id: 0.0 for team_id in team_ids}

    ordered = sorted(players, key=lambda p: (-_handicap(p), str(p.id)))
    for player in ordered:
        oversized = sum(1 for t in team_ids if len(rosters[t]) > base)
        open_teams = [
            t for t in team_ids
            if len(rosters[t]) < base or (len(rosters[t]) == base and oversized < extra)
        ]
        target = min(
            open_teams,
            key=lambda t: (totals[t], len(rosters[t]), team_ids.index(t)),
        )
        rosters[target].append(player.id)
        totals[target] += _handicap(player)

    return _allocation(rosters, {p.id: p for p in players})
