from typing import Optional
from datetime import datetime
from sqlmodel import Field, SQLModel

from app.models.base import CamelModel, UTCDateTime, utcnow


class User(SQLModel, table=True):
    """Identity-provider user mirrored locally on first write."""
    id: str = Field(primary_key=True)  # identity provider subject
    # NULL when the provider has no address on file; unique otherwise
    email: Optional[str] = Field(default=None, unique=True, index=True)
    name: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


class UserSummary(CamelModel):
    """Author attribution attached to comments."""
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
