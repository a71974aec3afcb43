"""Comment service: comments on published projects only."""
import logging
from typing import List, Optional

from sqlmodel import Session, select

from app.core.auth import Caller
from app.core.errors import Forbidden, InvalidInput, NotFound, Unauthenticated, storage_errors
from app.models.comment import Comment, CommentCreate, CommentWithUser
from app.models.project import Project
from app.models.user import User
from app.services.users import ensure_user, summarize

logger = logging.getLogger(__name__)


def _load_published(session: Session, project_id: str, forbidden_message: str) -> Project:
    with storage_errors(session, "Failed to fetch project"):
        project = session.get(Project, project_id)
    if project is None:
        raise NotFound("Project not found")
    if not project.published:
        raise Forbidden(forbidden_message)
    return project


def create_comment(session: Session, caller: Optional[Caller], data: CommentCreate) -> CommentWithUser:
    if caller is None:
        raise Unauthenticated()
    content = (data.content or "").strip()
    if not data.project_id or not content:
        raise InvalidInput("Missing required fields: projectId, content")

    # Published is checked at creation time only; later unpublishing keeps the rows
    _load_published(session, data.project_id, "Cannot comment on unpublished project")

    with storage_errors(session, "Failed to create comment"):
        author = ensure_user(session, caller)
        comment = Comment(content=content, project_id=data.project_id, user_id=caller.user_id)
        session.add(comment)
        session.commit()
        session.refresh(comment)
        session.refresh(author)

    logger.info("Created comment", extra={"comment_id": comment.id, "project_id": data.project_id})
    return CommentWithUser(
        id=comment.id,
        content=comment.content,
        created_at=comment.created_at,
        user=summarize(author),
    )


def list_comments(session: Session, project_id: str) -> List[CommentWithUser]:
    """Comments of a published project, oldest first."""
    _load_published(session, project_id, "Project is not published")

    query = (
        select(Comment, User)
        .join(User, Comment.user_id == User.id)
        .where(Comment.project_id == project_id)
        .order_by(Comment.created_at.asc(), Comment.id.asc())
    )
    with storage_errors(session, "Failed to fetch comments"):
        rows = session.exec(query).all()

    return [
        CommentWithUser(
            id=comment.id,
            content=comment.content,
            created_at=comment.created_at,
            user=summarize(user),
        )
        for comment, user in rows
    ]
