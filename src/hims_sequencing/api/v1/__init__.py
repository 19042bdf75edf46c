# src/hims_sequencing/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    patients_router,
    sequences_router,
    system_router,
    tokens_router,
)

__all__ = [
    "sequences_router",
    "patients_router",
    "tokens_router",
    "system_router",
]
