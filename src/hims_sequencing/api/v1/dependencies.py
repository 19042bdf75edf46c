"""Shared API dependencies for sequence allocation and error translation."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from hims_sequencing.db.session import get_db
from hims_sequencing.services.errors import (
    ConcurrentAllocationError,
    InvalidConfigError,
    PersistenceError,
    SequenceError,
    UnknownSequenceError,
)
from hims_sequencing.services.sequence import SequenceAllocator
from hims_sequencing.services.sequence_store import SqlConfigStore, SqlSequenceStore

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]

_STATUS_BY_ERROR: dict[type[SequenceError], int] = {
    InvalidConfigError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    UnknownSequenceError: status.HTTP_404_NOT_FOUND,
    ConcurrentAllocationError: status.HTTP_409_CONFLICT,
    PersistenceError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def get_allocator(db: SessionDep) -> SequenceAllocator:
    """Build an allocator backed by the request's database session."""
    return SequenceAllocator(SqlSequenceStore(db), SqlConfigStore(db))


AllocatorDep = Annotated[SequenceAllocator, Depends(get_allocator)]


def to_http_error(exc: SequenceError) -> HTTPException:
    """Translate an allocator error into the HTTP error returned to the client.

    Args:
        exc: Error raised by the allocator or its stores

    Returns:
        HTTPException carrying the matching status code and the error message
    """
    for error_type, status_code in _STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
