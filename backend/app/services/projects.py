"""
Project service.

Create/list/read/update/delete/publish for canvas projects. Every function
takes the caller explicitly; ownership and visibility are checked here so
the HTTP layer stays a thin mapping.
"""
import logging
from datetime import timedelta
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.core.auth import Caller
from app.core.errors import Forbidden, InvalidInput, NotFound, Unauthenticated, storage_errors
from app.models.base import utcnow
from app.models.project import (
    Project,
    ProjectCreate,
    ProjectMetadata,
    ProjectUpdate,
    ProjectWithSnapshot,
    PublishState,
)
from app.services.thumbnails import ThumbnailPayload, ThumbnailStore
from app.services.users import ensure_user

logger = logging.getLogger(__name__)


def _require_caller(caller: Optional[Caller]) -> Caller:
    if caller is None:
        raise Unauthenticated()
    return caller


def _touch(project: Project) -> None:
    """Advance updated_at, strictly, even when the clock has not ticked."""
    now = utcnow()
    if project.updated_at is not None and now <= project.updated_at:
        now = project.updated_at + timedelta(microseconds=1)
    project.updated_at = now


def _load(session: Session, project_id: str) -> Project:
    with storage_errors(session, "Failed to fetch project"):
        project = session.get(Project, project_id)
    if project is None:
        raise NotFound("Project not found")
    return project


def _load_owned(session: Session, caller: Caller, project_id: str) -> Project:
    project = _load(session, project_id)
    if project.user_id != caller.user_id:
        raise Forbidden()
    return project


def can_view(project: Project, caller: Optional[Caller]) -> bool:
    """Owners always see their projects; everyone else only published ones."""
    if project.published:
        return True
    return caller is not None and caller.user_id == project.user_id


def _upload_thumbnail(thumbnails: ThumbnailStore, project_id: str, payload: ThumbnailPayload) -> Optional[str]:
    try:
        return thumbnails.upload(project_id, payload)
    except Exception as exc:
        # A missing preview is acceptable; never fail the document write over it
        logger.warning("Failed to upload thumbnail", extra={"project_id": project_id, "error": str(exc)})
        return None


def delete_thumbnail(thumbnails: ThumbnailStore, url: str) -> bool:
    """Best-effort removal of a stored preview. Returns False on failure."""
    try:
        thumbnails.delete(url)
        return True
    except Exception as exc:
        logger.warning("Failed to delete thumbnail", extra={"url": url, "error": str(exc)})
        return False


def _replace_thumbnail(thumbnails: ThumbnailStore, project: Project, payload: ThumbnailPayload) -> Optional[str]:
    """Return the thumbnail URL the project should reference after replacement."""
    previous = project.thumbnail_url
    if previous and not delete_thumbnail(thumbnails, previous):
        return previous
    uploaded = _upload_thumbnail(thumbnails, project.id, payload)
    # previous is gone at this point, so never fall back to it
    return uploaded


def create_project(
    session: Session,
    caller: Optional[Caller],
    data: ProjectCreate,
    thumbnails: ThumbnailStore,
) -> ProjectMetadata:
    caller = _require_caller(caller)
    title = (data.title or "").strip()
    if not title or data.snapshot is None:
        raise InvalidInput("Missing required fields: title, snapshot")

    with storage_errors(session, "Failed to create project"):
        ensure_user(session, caller)
        now = utcnow()
        project = Project(
            title=title,
            snapshot=data.snapshot,
            user_id=caller.user_id,
            created_at=now,
            updated_at=now,
        )
        session.add(project)
        session.commit()
        session.refresh(project)

    created = ProjectMetadata.from_project(project)
    logger.info("Created project", extra={"project_id": project.id, "user_id": caller.user_id})

    if data.thumbnail_data_url:
        url = _upload_thumbnail(thumbnails, project.id, data.thumbnail_data_url)
        if url:
            created = _attach_thumbnail(session, thumbnails, project, url) or created
    return created


def _attach_thumbnail(
    session: Session,
    thumbnails: ThumbnailStore,
    project: Project,
    url: str,
) -> Optional[ProjectMetadata]:
    """Record a freshly uploaded preview. On failure the upload is removed and None returned."""
    try:
        project.thumbnail_url = url
        _touch(project)
        session.add(project)
        session.commit()
        session.refresh(project)
    except SQLAlchemyError as exc:
        # The project row is already committed; only the preview is lost
        logger.warning("Failed to save thumbnail reference", extra={"project_id": project.id, "error": str(exc)})
        session.rollback()
        delete_thumbnail(thumbnails, url)
        return None
    return ProjectMetadata.from_project(project)


def list_projects(
    session: Session,
    caller: Optional[Caller],
    search: Optional[str] = None,
) -> List[ProjectMetadata]:
    """List the caller's projects, most recently updated first."""
    caller = _require_caller(caller)
    query = select(Project).where(Project.user_id == caller.user_id)
    if search:
        query = query.where(Project.title.icontains(search, autoescape=True))

    with storage_errors(session, "Failed to fetch projects"):
        projects = session.exec(query.order_by(Project.updated_at.desc())).all()
    return [ProjectMetadata.from_project(p) for p in projects]


def get_project(session: Session, caller: Optional[Caller], project_id: str) -> ProjectWithSnapshot:
    """Fetch a project with its snapshot. Anonymous callers may read published projects."""
    project = _load(session, project_id)
    if not can_view(project, caller):
        raise Forbidden()
    return ProjectWithSnapshot.from_project(project)


def update_project(
    session: Session,
    caller: Optional[Caller],
    project_id: str,
    data: ProjectUpdate,
    thumbnails: ThumbnailStore,
) -> ProjectWithSnapshot:
    """Apply a partial update. updated_at advances even if nothing else changed."""
    caller = _require_caller(caller)
    project = _load_owned(session, caller, project_id)

    if data.title is not None:
        project.title = data.title.strip() or project.title
    if data.snapshot is not None:
        project.snapshot = data.snapshot
    if data.published is not None:
        project.published = data.published

    if data.thumbnail_data_url:
        project.thumbnail_url = _replace_thumbnail(thumbnails, project, data.thumbnail_data_url)

    with storage_errors(session, "Failed to update project"):
        _touch(project)
        session.add(project)
        session.commit()
        session.refresh(project)
    return ProjectWithSnapshot.from_project(project)


def delete_project(
    session: Session,
    caller: Optional[Caller],
    project_id: str,
    thumbnails: ThumbnailStore,
) -> dict:
    """Delete a project and its preview. Comments go with it via ON DELETE CASCADE."""
    caller = _require_caller(caller)
    project = _load_owned(session, caller, project_id)

    if project.thumbnail_url:
        delete_thumbnail(thumbnails, project.thumbnail_url)

    with storage_errors(session, "Failed to delete project"):
        session.delete(project)
        session.commit()

    logger.info("Deleted project", extra={"project_id": project_id, "user_id": caller.user_id})
    return {"success": True}


def toggle_publish(session: Session, caller: Optional[Caller], project_id: str) -> PublishState:
    caller = _require_caller(caller)
    project = _load_owned(session, caller, project_id)

    with storage_errors(session, "Failed to toggle publish status"):
        project.published = not project.published
        _touch(project)
        session.add(project)
        session.commit()
        session.refresh(project)
    return PublishState(id=project.id, published=project.published)
