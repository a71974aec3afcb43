from datetime import datetime
from sqlmodel import Field, SQLModel

from app.models.base import CamelModel, UTCDateTime, utcnow
from app.models.project import new_id
from app.models.user import UserSummary


class Comment(SQLModel, table=True):
    """Comment on a published project. Removed only when its project is deleted."""
    id: str = Field(default_factory=new_id, primary_key=True)
    content: str
    project_id: str = Field(foreign_key="project.id", ondelete="CASCADE", index=True)
    user_id: str = Field(foreign_key="user.id", index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime, index=True)


class CommentCreate(CamelModel):
    project_id: str | None = None
    content: str | None = None


class CommentWithUser(CamelModel):
    id: str
    content: str
    created_at: datetime
    user: UserSummary
