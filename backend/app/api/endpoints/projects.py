"""
Projects API endpoints.
Create, list, load, save, delete and publish canvas projects.
"""
from fastapi import APIRouter, Depends
from sqlmodel import Session
from typing import List, Optional

from app.core.auth import Caller, get_caller
from app.db.database import get_session
from app.models.project import (
    ProjectCreate,
    ProjectMetadata,
    ProjectUpdate,
    ProjectWithSnapshot,
    PublishState,
)
from app.services import projects as project_service
from app.services.thumbnails import ThumbnailStore, get_thumbnail_store


router = APIRouter()


@router.post("", response_model=ProjectMetadata, status_code=201)
def create_project(
    data: ProjectCreate,
    session: Session = Depends(get_session),
    caller: Optional[Caller] = Depends(get_caller),
    thumbnails: ThumbnailStore = Depends(get_thumbnail_store),
):
    """
    Create a project from the editor's first save.

    An optional ``thumbnailDataUrl`` is uploaded after the row exists; if
    that fails the project is still created, without a thumbnail.
    """
    return project_service.create_project(session, caller, data, thumbnails)


@router.get("", response_model=List[ProjectMetadata])
def list_projects(
    search: Optional[str] = None,
    session: Session = Depends(get_session),
    caller: Optional[Caller] = Depends(get_caller),
):
    """List the caller's projects (no snapshots), newest activity first."""
    return project_service.list_projects(session, caller, search)


@router.get("/{project_id}", response_model=ProjectWithSnapshot)
def get_project(
    project_id: str,
    session: Session = Depends(get_session),
    caller: Optional[Caller] = Depends(get_caller),
):
    """Get a project with its snapshot. Published projects are readable by anyone."""
    return project_service.get_project(session, caller, project_id)


@router.patch("/{project_id}", response_model=ProjectWithSnapshot)
def update_project(
    project_id: str,
    data: ProjectUpdate,
    session: Session = Depends(get_session),
    caller: Optional[Caller] = Depends(get_caller),
    thumbnails: ThumbnailStore = Depends(get_thumbnail_store),
):
    """Autosave / manual save. Omitted fields are left unchanged."""
    return project_service.update_project(session, caller, project_id, data, thumbnails)


@router.delete("/{project_id}")
def delete_project(
    project_id: str,
    session: Session = Depends(get_session),
    caller: Optional[Caller] = Depends(get_caller),
    thumbnails: ThumbnailStore = Depends(get_thumbnail_store),
):
    """Delete a project, its thumbnail and its comments."""
    return project_service.delete_project(session, caller, project_id, thumbnails)


@router.post("/{project_id}/publish", response_model=PublishState)
def toggle_publish(
    project_id: str,
    session: Session = Depends(get_session),
    caller: Optional[Caller] = Depends(get_caller),
):
    """Flip the project's published flag."""
    return project_service.toggle_publish(session, caller, project_id)
