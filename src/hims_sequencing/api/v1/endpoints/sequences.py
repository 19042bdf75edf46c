# src/hims_sequencing/api/v1/endpoints/sequences.py
"""Sequence configuration and allocation endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from hims_sequencing.schemas.sequence import (
    IdentifierResponse,
    SequenceConfigPayload,
    SequenceConfigResponse,
)
from hims_sequencing.services.errors import SequenceError

from ..dependencies import AllocatorDep, to_http_error

router = APIRouter(prefix="/sequences", tags=["sequences"])


@router.get("/{name}/config", response_model=SequenceConfigResponse)
async def get_sequence_config(name: str, allocator: AllocatorDep) -> SequenceConfigResponse:
    """Return the active configuration of a sequence."""
    try:
        config = allocator.get_config(name)
    except SequenceError as exc:
        raise to_http_error(exc) from exc
    return SequenceConfigResponse.from_config(name, config)


@router.put("/{name}/config", response_model=SequenceConfigResponse)
async def configure_sequence(
    name: str,
    payload: SequenceConfigPayload,
    allocator: AllocatorDep,
) -> SequenceConfigResponse:
    """Replace the configuration of a sequence.

    Identifiers already embedded in records keep their old format.
    """
    try:
        config = allocator.configure(name, payload.to_config())
    except SequenceError as exc:
        raise to_http_error(exc) from exc
    return SequenceConfigResponse.from_config(name, config)


@router.get("/{name}/next", response_model=IdentifierResponse)
async def peek_next_identifier(name: str, allocator: AllocatorDep) -> IdentifierResponse:
    """Preview the next identifier without allocating it."""
    try:
        identifier = allocator.peek_next(name)
    except SequenceError as exc:
        raise to_http_error(exc) from exc
    return IdentifierResponse.from_identifier(name, identifier, committed=False)


@router.post("/{name}/commit", response_model=IdentifierResponse)
async def commit_identifier(name: str, allocator: AllocatorDep) -> IdentifierResponse:
    """Allocate the next identifier of a sequence."""
    try:
        identifier = allocator.commit(name)
    except SequenceError as exc:
        raise to_http_error(exc) from exc
    return IdentifierResponse.from_identifier(name, identifier, committed=True)
