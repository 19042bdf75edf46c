"""Patient registration and visit check-in.

Both flows take their identifiers from the sequence allocator and embed the
display string into the new record. An identifier whose record then fails to
persist is not reused.
"""
from __future__ import annotations

import datetime
import logging
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hims_sequencing.core.sequence import FormattedIdentifier
from hims_sequencing.models import Patient, VisitToken
from hims_sequencing.schemas.patient import PatientCreate

from .errors import PersistenceError
from .sequence import MR_NUMBER_SEQUENCE, TOKEN_SEQUENCE, SequenceAllocator

__all__ = [
    "register_patient",
    "check_in_patient",
    "get_patient",
    "get_patients",
    "list_queue",
]

logger = logging.getLogger(__name__)


def _local_today(allocator: SequenceAllocator) -> datetime.date:
    return allocator.clock().astimezone(allocator.tz).date()


def _new_token(
    patient: Patient,
    identifier: FormattedIdentifier,
    issued_at: datetime.datetime,
) -> VisitToken:
    return VisitToken(
        patient=patient,
        token_number=identifier.display,
        token_raw=identifier.raw,
        issued_at=issued_at,
    )


def _save(db: Session, *instances: object) -> None:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to persist registration data: %s", exc)
        raise PersistenceError("Could not save patient record") from exc
    for instance in instances:
        db.refresh(instance)


def register_patient(
    db: Session,
    allocator: SequenceAllocator,
    payload: PatientCreate,
) -> tuple[Patient, VisitToken]:
    """Register a patient with a new MR number and its first visit token."""
    # Both allocations commit through the session, so nothing may be pending yet.
    mr_number = allocator.commit(MR_NUMBER_SEQUENCE)
    token_number = allocator.commit(TOKEN_SEQUENCE)
    now = allocator.clock()
    today = _local_today(allocator)
    patient = Patient(
        mr_number=mr_number.display,
        registration_date=today,
        last_visit=today,
        **payload.model_dump(),
    )
    token = _new_token(patient, token_number, now)
    db.add_all([patient, token])
    _save(db, patient, token)
    logger.info("Registered patient %s with token %s", patient.mr_number, token.token_number)
    return patient, token


def check_in_patient(db: Session, allocator: SequenceAllocator, patient: Patient) -> VisitToken:
    """Issue a visit token to an already registered patient."""
    token_number = allocator.commit(TOKEN_SEQUENCE)
    token = _new_token(patient, token_number, allocator.clock())
    db.add(token)
    patient.last_visit = _local_today(allocator)
    _save(db, patient, token)
    logger.info("Checked in patient %s with token %s", patient.mr_number, token.token_number)
    return token


def get_patient(db: Session, patient_id: int) -> Patient | None:
    """Return a single patient by primary key."""
    return db.get(Patient, patient_id)


def get_patients(db: Session, skip: int = 0, limit: int = 100) -> Sequence[Patient]:
    """Return patients ordered by registration, with offset pagination."""
    stmt = select(Patient).order_by(Patient.id).offset(skip).limit(limit)
    return db.scalars(stmt).all()


def list_queue(
    db: Session,
    allocator: SequenceAllocator,
    on: datetime.date | None = None,
) -> Sequence[VisitToken]:
    """Return the tokens issued on ``on`` (local calendar day), in queue order."""
    day = on or _local_today(allocator)
    start = datetime.datetime.combine(day, datetime.time.min, tzinfo=allocator.tz)
    end = datetime.datetime.combine(
        day + datetime.timedelta(days=1), datetime.time.min, tzinfo=allocator.tz
    )
    stmt = (
        select(VisitToken)
        .where(
            VisitToken.issued_at >= start.astimezone(datetime.UTC),
            VisitToken.issued_at < end.astimezone(datetime.UTC),
        )
        .order_by(VisitToken.token_raw, VisitToken.id)
    )
    return db.scalars(stmt).all()
