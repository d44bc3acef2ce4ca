"""Health and readiness endpoints."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from taskforge.api.deps import DBSession
from taskforge.models.task import utc_now

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict[str, str]:
    """Liveness check; touches nothing but the process."""
    return {"status": "ok", "timestamp": utc_now().isoformat()}


@router.get("/health/ready")
def readiness_check(session: DBSession) -> JSONResponse:
    """Readiness check; confirms the database answers."""
    try:
        session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning(f"Readiness check failed: {e}")
        return JSONResponse(status_code=503, content={"status": "unavailable"})
    return JSONResponse(status_code=200, content={"status": "ready"})
