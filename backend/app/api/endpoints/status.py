"""
Status API endpoints.
Liveness plus a cheap check of the document store and thumbnail directory.
"""
import logging
import os
from datetime import datetime, timezone
from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.core.config import settings
from app.db.database import get_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["status"])


class StatusItem(BaseModel):
    """Single status indicator."""
    state: Literal["ok", "error"]
    detail: str


class HealthSummary(BaseModel):
    status: Literal["ok", "degraded"]
    version: str
    checked_at: str
    database: StatusItem
    thumbnails: StatusItem


def _check_database(session: Session) -> StatusItem:
    try:
        session.execute(text("SELECT 1"))
        return StatusItem(state="ok", detail="Document store reachable")
    except SQLAlchemyError as exc:
        logger.warning("Health check: document store unreachable", extra={"error": str(exc)})
        return StatusItem(state="error", detail="Document store unreachable")


def _check_thumbnails() -> StatusItem:
    path = settings.thumbnails_dir
    if path.is_dir() and os.access(path, os.W_OK):
        return StatusItem(state="ok", detail="Thumbnail directory writable")
    return StatusItem(state="error", detail="Thumbnail directory missing or read-only")


@router.get("/health", response_model=HealthSummary)
def health(session: Session = Depends(get_session)):
    database = _check_database(session)
    thumbnails = _check_thumbnails()
    overall = "ok" if database.state == "ok" and thumbnails.state == "ok" else "degraded"
    return HealthSummary(
        status=overall,
        version=settings.APP_VERSION,
        checked_at=datetime.now(timezone.utc).isoformat(),
        database=database,
        thumbnails=thumbnails,
    )
