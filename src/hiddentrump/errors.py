"""Engine error taxonomy."""
from __future__ import annotations


class IllegalIntent(ValueError):
    """
    A player intent that the rules do not allow right now (wrong turn, card not
    in hand, suit not followed, reveal not permitted...). Nothing was mutated.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class IntegrityViolation(RuntimeError):
    """Engine state is corrupted (lost or duplicated cards, trick exhaustion). Not recoverable."""


__all__ = ["IllegalIntent", "IntegrityViolation"]
