"""Errors raised by the match-play engine.

Every error is raised at the call that would otherwise produce an
inconsistent result. Nothing here is transient, so nothing is retried.
"""


class EngineError(Exception):
    """Base class for all engine refusals."""


class InvalidCourseData(EngineError):
    """Hole handicap ranking is not a permutation of 1..18."""

    def __init__(self, problems):
        self.problems = list(problems)
        super().__init__("; ".join(self.problems) or "Invalid course data")


class PressNotEligible(EngineError):
    pass


class InsufficientBudget(EngineError):
    def __init__(self, team_id, price, remaining):
        self.team_id = team_id
        self.price = price
        self.remaining = remaining
        super().__init__(
            f"Team {team_id} cannot pay {price}: only {remaining} left in budget"
        )


class DraftAlreadyComplete(EngineError):
    pass


class InconsistentHoleResult(EngineError):
    """Duplicate, out-of-range or otherwise unusable hole result."""


class PlayerNotAvailable(EngineError):
    def __init__(self, player_id):
        self.player_id = player_id
        super().__init__(f"Player {player_id} is not in the available pool")
