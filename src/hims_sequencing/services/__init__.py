"""Service layer for sequence allocation and its consumers."""

from .errors import (
    ConcurrentAllocationError,
    InvalidConfigError,
    PersistenceError,
    SequenceError,
    UnknownSequenceError,
)
from .sequence import SequenceAllocator

__all__ = [
    "ConcurrentAllocationError",
    "InvalidConfigError",
    "PersistenceError",
    "SequenceAllocator",
    "SequenceError",
    "UnknownSequenceError",
]
