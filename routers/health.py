# routers/health.py

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from core.config import settings
from core.logging_config import logger
from database import get_session

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


# -----------------------------------------------------
# GET /health/db
# Round-trips a trivial query through the session
# No auth required
# -----------------------------------------------------
@router.get("/db", summary="Database health check")
def health_db(session: Session = Depends(get_session)):
    """
    Safe for external health monitors (no auth required).
    Always answers 200; `status` says whether the store responded.
    """
    try:
        session.exec(text("SELECT 1"))
        return {
            "service": "database",
            "status": "ok",
        }

    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return {
            "service": "database",
            "status": "error",
            "error": type(e).__name__,
        }


# -----------------------------------------------------
# GET /health/app
# -----------------------------------------------------
@router.get("/app", summary="App health check")
def health_app():
    """
    Lightweight health check for uptime monitors.
    """
    return {
        "service": settings.PROJECT_NAME,
        "status": "ok",
    }
