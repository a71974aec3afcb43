import os
import sys
import tempfile
from datetime import datetime
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT_DIR))

# Keep the default data directory out of the user's home during tests
os.environ.setdefault("CANVAS_SHELF_ROOT_DIR", tempfile.mkdtemp(prefix="canvas-shelf-tests-"))

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.api.api import api_router
from app.core.auth import Caller
from app.core.config import settings
from app.core.error_handlers import register_error_handlers
from app.db.database import get_session
from app.db.engine import enable_sqlite_pragmas
from app.models.comment import Comment  # noqa: F401  registers table metadata
from app.models.project import Project  # noqa: F401
from app.models.user import User  # noqa: F401
from app.services.thumbnails import get_thumbnail_store


class FakeThumbnailStore:
    """Records calls; optionally fails uploads or deletes."""

    def __init__(self):
        self.uploads = []
        self.deletes = []
        self.events = []
        self.fail_upload = False
        self.fail_delete = False

    def upload(self, project_id, payload):
        self.events.append(("upload", project_id))
        if self.fail_upload:
            raise OSError("blob provider unavailable")
        url = f"https://blobs.test/thumbnails/{project_id}-{len(self.uploads)}.png"
        self.uploads.append((project_id, payload, url))
        return url

    def delete(self, url):
        self.events.append(("delete", url))
        if self.fail_delete:
            raise OSError("blob provider unavailable")
        self.deletes.append(url)


def make_token(user_id: str, email: str | None = None, name: str | None = None, **claims) -> str:
    payload = {"sub": user_id, "email": email if email is not None else f"{user_id}@example.com"}
    if name:
        payload["name"] = name
    payload.update(claims)
    return jwt.encode(payload, settings.AUTH_JWT_SECRET, algorithm=settings.AUTH_JWT_ALGORITHMS[0])


def auth_headers(user_id: str, **kwargs) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id, **kwargs)}"}


def make_caller(user_id: str, name: str | None = None) -> Caller:
    return Caller(user_id=user_id, email=f"{user_id}@example.com", name=name)


@pytest.fixture(scope="session")
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_pragmas(engine)
    SQLModel.metadata.create_all(engine)
    yield engine


@pytest.fixture()
def session(engine):
    with Session(engine) as session:
        yield session
        session.rollback()
        for table in reversed(SQLModel.metadata.sorted_tables):
            session.execute(table.delete())
        session.commit()


@pytest.fixture()
def thumbnails():
    return FakeThumbnailStore()


@pytest.fixture()
def client(engine, session, thumbnails):
    app = FastAPI()
    app.include_router(api_router)
    register_error_handlers(app)

    def override_get_session():
        with Session(engine) as request_session:
            yield request_session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_thumbnail_store] = lambda: thumbnails
    return TestClient(app)


def parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))
