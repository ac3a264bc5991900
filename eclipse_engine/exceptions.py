"""Error types shared by the engines, services and routers.

Rule violations are expected in play and carry a display reason for the
player. Invariant violations mean the caller broke the engine contract;
the current operation must be aborted without persisting anything.
"""


class RuleViolation(ValueError):
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class InsufficientResources(RuleViolation):
    pass


class TrackExhausted(RuleViolation):
    """A population track, influence bucket or colony ship pool is at its bound."""


class InvalidTrade(RuleViolation):
    pass


class InvariantViolation(RuntimeError):
    def __init__(self, errors: list[str] | str):
        if isinstance(errors, str):
            errors = [errors]
        super().__init__("; ".join(errors))
        self.errors = list(errors)


class MatchConflictError(RuntimeError):
    """Concurrent writers kept winning the match version race."""
