# src/hims_sequencing/api/v1/endpoints/patients.py
"""Patient registration, check-in and visit queue endpoints."""

from __future__ import annotations

import datetime

from fastapi import APIRouter, HTTPException, Query, status

from hims_sequencing.models import Patient, VisitToken
from hims_sequencing.schemas.patient import (
    PatientCreate,
    PatientResponse,
    RegistrationResponse,
    VisitTokenResponse,
)
from hims_sequencing.services import registration
from hims_sequencing.services.errors import SequenceError

from ..dependencies import AllocatorDep, SessionDep, to_http_error

router = APIRouter(prefix="/patients", tags=["patients"])
tokens_router = APIRouter(prefix="/tokens", tags=["tokens"])


def _get_patient_or_404(db: SessionDep, patient_id: int) -> Patient:
    patient = registration.get_patient(db, patient_id)
    if patient is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Patient not found",
        )
    return patient


@router.post("/", response_model=RegistrationResponse, status_code=status.HTTP_201_CREATED)
async def register_patient(
    payload: PatientCreate,
    db: SessionDep,
    allocator: AllocatorDep,
) -> RegistrationResponse:
    """Register a patient and issue its MR number and first visit token."""
    try:
        patient, token = registration.register_patient(db, allocator, payload)
    except SequenceError as exc:
        raise to_http_error(exc) from exc
    return RegistrationResponse(
        patient=PatientResponse.model_validate(patient),
        token=VisitTokenResponse.model_validate(token),
    )


@router.get("/", response_model=list[PatientResponse])
async def list_patients(
    db: SessionDep,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=500),
) -> list[Patient]:
    """List registered patients in registration order."""
    return list(registration.get_patients(db, skip=skip, limit=limit))


@router.get("/{patient_id}", response_model=PatientResponse)
async def get_patient(patient_id: int, db: SessionDep) -> Patient:
    """Get a specific patient by ID."""
    return _get_patient_or_404(db, patient_id)


@router.post(
    "/{patient_id}/check-in",
    response_model=VisitTokenResponse,
    status_code=status.HTTP_201_CREATED,
)
async def check_in_patient(
    patient_id: int,
    db: SessionDep,
    allocator: AllocatorDep,
) -> VisitToken:
    """Issue a new visit token to a registered patient."""
    patient = _get_patient_or_404(db, patient_id)
    try:
        return registration.check_in_patient(db, allocator, patient)
    except SequenceError as exc:
        raise to_http_error(exc) from exc


@tokens_router.get("/queue", response_model=list[VisitTokenResponse])
async def get_queue(
    db: SessionDep,
    allocator: AllocatorDep,
    on: datetime.date | None = None,
) -> list[VisitToken]:
    """List the tokens issued on a day (today by default) in queue order."""
    return list(registration.list_queue(db, allocator, on=on))
