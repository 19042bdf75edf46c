# src/hims_sequencing/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .patients import router as patients_router
from .patients import tokens_router
from .sequences import router as sequences_router
from .system import router as system_router

__all__ = [
    "sequences_router",
    "patients_router",
    "tokens_router",
    "system_router",
]
