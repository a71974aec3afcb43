import logging

from sqlmodel import SQLModel

from app.core.config import settings
from app.db.engine import engine
# Import models so they are registered with SQLModel.metadata
from app.models.user import User  # noqa: F401
from app.models.project import Project  # noqa: F401
from app.models.comment import Comment  # noqa: F401

logger = logging.getLogger(__name__)


def init_db():
    # Ensure directory structure exists
    settings.ensure_dirs()
    SQLModel.metadata.create_all(engine)
    logger.info("Document store ready", extra={"url": engine.url.render_as_string(hide_password=True)})
