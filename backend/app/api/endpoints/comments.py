"""Comments API endpoints."""
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.auth import Caller, get_caller
from app.db.database import get_session
from app.models.comment import CommentCreate, CommentWithUser
from app.services import comments as comment_service

router = APIRouter()


@router.post("", response_model=CommentWithUser, status_code=201)
def create_comment(
    data: CommentCreate,
    session: Session = Depends(get_session),
    caller: Optional[Caller] = Depends(get_caller),
):
    """Add a comment to a published project."""
    return comment_service.create_comment(session, caller, data)


@router.get("/{project_id}", response_model=List[CommentWithUser])
def list_comments(project_id: str, session: Session = Depends(get_session)):
    """All comments on a published project, oldest first."""
    return comment_service.list_comments(session, project_id)
