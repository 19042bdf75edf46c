"""System endpoints for the HIMS sequencing API."""

from __future__ import annotations

import time

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from hims_sequencing.core.settings import settings

from ..dependencies import SessionDep

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/health")
async def get_system_health(db: SessionDep) -> dict[str, object]:
    """Health check covering database connectivity.

    Args:
        db: Database session

    Returns:
        Dictionary with overall status, component health and version info
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError as e:
        db_status = f"unhealthy: {str(e)}"

    return {
        "status": "healthy" if db_status == "healthy" else "unhealthy",
        "timestamp": int(time.time()),
        "components": {
            "database": db_status,
        },
        "version": settings.app_version,
        "sequence_timezone": settings.sequence_timezone,
    }
