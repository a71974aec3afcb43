import uuid
from typing import Optional, Dict, Any
from datetime import datetime
from sqlmodel import Field, SQLModel, JSON

from app.models.base import CamelModel, UTCDateTime, utcnow


def new_id() -> str:
    return uuid.uuid4().hex


class Project(SQLModel, table=True):
    """Canvas project: owner, title and the serialized document snapshot."""
    id: str = Field(default_factory=new_id, primary_key=True)
    title: str
    # Full serialized canvas state; opaque to this service
    snapshot: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    thumbnail_url: Optional[str] = None
    published: bool = Field(default=False, index=True)
    user_id: str = Field(foreign_key="user.id", index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime, index=True)


class ProjectCreate(CamelModel):
    """Schema for creating a project. Required fields are checked by the service."""
    title: Optional[str] = None
    snapshot: Optional[Dict[str, Any]] = None
    thumbnail_data_url: Optional[str] = None


class ProjectUpdate(CamelModel):
    """Partial update; omitted fields are left unchanged."""
    title: Optional[str] = None
    snapshot: Optional[Dict[str, Any]] = None
    published: Optional[bool] = None
    thumbnail_data_url: Optional[str] = None


class ProjectMetadata(CamelModel):
    """Project without its snapshot, for list views."""
    id: str
    title: str
    thumbnail_url: Optional[str] = None
    published: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_project(cls, project: Project) -> "ProjectMetadata":
        return cls(
            id=project.id,
            title=project.title,
            thumbnail_url=project.thumbnail_url,
            published=project.published,
            created_at=project.created_at,
            updated_at=project.updated_at,
        )


class ProjectWithSnapshot(ProjectMetadata):
    """Complete project, as loaded into the editor or viewer."""
    snapshot: Dict[str, Any]

    @classmethod
    def from_project(cls, project: Project) -> "ProjectWithSnapshot":
        return cls(
            id=project.id,
            title=project.title,
            snapshot=project.snapshot,
            thumbnail_url=project.thumbnail_url,
            published=project.published,
            created_at=project.created_at,
            updated_at=project.updated_at,
        )


class PublishState(CamelModel):
    id: str
    published: bool
