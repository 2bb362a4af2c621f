from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

# ============================================================
# Constants
# ============================================================

TOTAL_HOLES = 18
DEFAULT_AUCTION_BUDGET = 100
MISSING_HANDICAP = 54.0  # max WHS index; ranks players with no index last
DEFAULT_HANDICAP = 18.0  # stand-in for team totals and pairing balance


# ============================================================
# Closed value sets
# ============================================================

class Side(str, Enum):
    SIDE_A = "side_a"
    SIDE_B = "side_b"
    HALVED = "halved"
    NONE = "none"


class MatchStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class SessionType(str, Enum):
    SINGLES = "singles"
    FOURBALL = "fourball"
    FOURSOMES = "foursomes"


class PressStatus(str, Enum):
    ACTIVE = "active"
    CLOSED = "closed"


class DraftMode(str, Enum):
    SNAKE = "snake"
    AUCTION = "auction"


class DraftStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


def opponent_of(side):
    if side == Side.SIDE_A:
        return Side.SIDE_B
    if side == Side.SIDE_B:
        return Side.SIDE_A
    raise ValueError(f"{side!r} is not a playing side")


# ============================================================
# Course / match records (owned by the storage layer)
# ============================================================

@dataclass(frozen=True)
class TeeSet:
    id: str
    name: str
    hole_handicap_ranking: tuple  # 1 = hardest hole
    hole_par: tuple


@dataclass(frozen=True)
class HoleResult:
    match_id: str
    hole_number: int
    winner: Side
    side_a_gross: Optional[int] = None
    side_b_gross: Optional[int] = None
    # best ball: (side A grosses, side B grosses) aligned with the match's
    # player id lists; None marks a picked-up ball
    per_player_scores: Optional[tuple] = None


@dataclass
class Match:
    id: str
    session_id: str
    side_a_player_ids: list
    side_b_player_ids: list
    side_a_handicap_allowance: int = 0
    side_b_handicap_allowance: int = 0
    tee_set_id: Optional[str] = None
    status: MatchStatus = MatchStatus.SCHEDULED
    match_order: int = 1
    session_type: SessionType = SessionType.SINGLES
    # fourball: individual allowance per player id
    player_allowances: dict = field(default_factory=dict)


@dataclass(frozen=True)
class MatchState:
    current_score: int          # + favors side A
    holes_played: int
    holes_remaining: int
    is_dormie: bool
    is_closed_out: bool
    winning_side: Optional[Side]  # set once the match is decided
    display_score: str
    status: MatchStatus
    side_a_holes_won: int = 0
    side_b_holes_won: int = 0
    leader: Optional[Side] = None
    closed_at_hole: Optional[int] = None


@dataclass
class Player:
    id: str
    name: str
    handicap_index: Optional[float] = None


@dataclass(frozen=True)
class Session:
    id: str
    session_type: SessionType
    session_number: int


# ============================================================
# Side wagers
# ============================================================

@dataclass(frozen=True)
class Press:
    id: str
    start_hole: int
    initiated_by: Side
    status: PressStatus = PressStatus.ACTIVE
    running_score: int = 0
    result: Optional[Side] = None
    closed_at_hole: Optional[int] = None
    value: int = 1


# ============================================================
# Draft
# ============================================================

@dataclass(frozen=True)
class DraftConfig:
    mode: DraftMode
    draft_order: tuple  # team ids
    budget_per_team: int = DEFAULT_AUCTION_BUDGET
    round_count: int = 0


@dataclass(frozen=True)
class DraftPick:
    player_id: str
    team_id: str
    price: Optional[int] = None
    round_number: int = 1
    pick_number: int = 1


@dataclass(frozen=True)
class DraftState:
    config: DraftConfig
    picks: tuple = ()
    available_players: tuple = ()
    current_pick_index: int = 0
    status: DraftStatus = DraftStatus.NOT_STARTED
    total_players: int = 0


# ============================================================
# Pairings
# ============================================================

@dataclass(frozen=True)
class PairingHistoryEntry:
    player1_id: str
    player2_id: str
    relationship: str  # "partners" | "opponents"
    session_number: int = 1
    match_id: Optional[str] = None


@dataclass(frozen=True)
class PairingConstraint:
    player1_id: str
    player2_id: str
    kind: str  # "must_pair" | "must_not_pair" | "must_not_oppose"
    reason: str = ""


@dataclass
class PairingSuggestion:
    match_slot: int
    side_a_player_ids: list
    side_b_player_ids: list
    fairness_score: float
    handicap_gap: float
    reasoning: list = field(default_factory=list)
    warnings: list = field(default_factory=list)
