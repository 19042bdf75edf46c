# src/hims_sequencing/models/__init__.py
"""SQLAlchemy models for the HIMS sequencing service."""

from .patient import Patient, VisitToken
from .sequence import SequenceConfigRecord, SequenceStateRecord

__all__ = [
    "Patient", "VisitToken",
    "SequenceConfigRecord", "SequenceStateRecord",
]
