"""Patient registration and visit token schemas."""
from __future__ import annotations

import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

PatientType = Literal["OPD", "IPD"]
AgeUnit = Literal["Years", "Months", "Days"]


class PatientCreate(BaseModel):
    """Registration form submitted for a new patient."""

    name: str = Field(..., min_length=1, description="Name is required")
    age: int = Field(..., gt=0, description="Valid age is required")
    age_unit: AgeUnit = "Years"
    gender: str = Field(..., min_length=1)
    contact: str = Field(..., min_length=1, description="Contact number is required")
    address: str = Field(..., min_length=1)
    blood_group: str = Field(..., min_length=1)
    patient_type: list[PatientType] = Field(..., min_length=1)
    email: str | None = None
    cnic: str | None = None
    date_of_birth: datetime.date | None = None
    emergency_contact: str | None = None
    guardian_name: str | None = None
    guardian_relation: str | None = None
    guardian_contact: str | None = None
    insurance_provider: str | None = None
    insurance_id: str | None = None
    allergies: str | None = None
    chronic_diseases: str | None = None
    notes: str | None = None

    @field_validator("name", "gender", "contact", "address", "blood_group")
    @classmethod
    def _strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("patient_type")
    @classmethod
    def _dedupe_types(cls, value: list[PatientType]) -> list[PatientType]:
        return list(dict.fromkeys(value))


class VisitTokenResponse(BaseModel):
    """Queue ticket returned to the front end for printing."""

    id: int
    patient_id: int
    token_number: str
    token_raw: int
    issued_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)


class PatientResponse(BaseModel):
    """Registered patient as returned by the API."""

    id: int
    mr_number: str
    name: str
    age: int
    age_unit: str
    gender: str
    contact: str
    address: str
    blood_group: str
    patient_type: list[str]
    email: str | None
    cnic: str | None
    date_of_birth: datetime.date | None
    registration_date: datetime.date
    last_visit: datetime.date

    model_config = ConfigDict(from_attributes=True)


class RegistrationResponse(BaseModel):
    """Outcome of a registration: the patient and its first visit token."""

    patient: PatientResponse
    token: VisitTokenResponse
