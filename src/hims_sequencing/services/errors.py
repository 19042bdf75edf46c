"""Exceptions raised by the sequence allocator and its stores."""

from __future__ import annotations


class SequenceError(RuntimeError):
    """Base exception raised for sequence allocation failures.

    No allocation error is fatal; a failed allocation leaves the stored
    sequence state unchanged.
    """


class InvalidConfigError(SequenceError):
    """Raised by ``configure`` when a sequence configuration is unusable."""


class UnknownSequenceError(SequenceError, LookupError):
    """Raised when a sequence name has no configuration at all."""


class PersistenceError(SequenceError):
    """Raised when sequence state or configuration cannot be read or written."""


class ConcurrentAllocationError(SequenceError):
    """Raised when other writers kept winning the check-and-set.

    Callers should retry the whole user-facing action.
    """

    def __init__(self, name: str, attempts: int) -> None:
        super().__init__(
            f"Sequence {name!r} changed concurrently on each of {attempts} attempts"
        )
        self.name = name
        self.attempts = attempts
