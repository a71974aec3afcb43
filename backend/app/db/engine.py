from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool
from sqlmodel import create_engine

from app.core.config import settings

# Ensure the data directories exist before initializing the engine so the
# default SQLite file can be created.
settings.ensure_dirs()


def enable_sqlite_pragmas(target: Engine) -> None:
    """Turn on foreign keys (comment cascade) and WAL for SQLite engines."""
    if target.dialect.name != "sqlite":
        return

    @event.listens_for(target, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        if target.url.database not in (None, "", ":memory:"):
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.close()


def build_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        # check_same_thread=False lets FastAPI's threadpool share the file;
        # NullPool closes connections immediately instead of hoarding them.
        created = create_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False, "timeout": 5.0},
            poolclass=NullPool,
        )
    else:
        created = create_engine(url, echo=False, pool_pre_ping=True)
    enable_sqlite_pragmas(created)
    return created


engine = build_engine(settings.database_url)
