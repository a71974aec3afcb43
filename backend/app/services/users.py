"""Local mirror of identity-provider users."""
from sqlmodel import Session

from app.core.auth import Caller
from app.models.user import User, UserSummary


def ensure_user(session: Session, caller: Caller) -> User:
    """
    Insert or refresh the caller's User row.

    Idempotent; called at the start of any write that needs an owner or
    author reference. Does not commit.
    """
    email = caller.email or None
    user = session.get(User, caller.user_id)
    if user is None:
        user = User(id=caller.user_id, email=email, name=caller.name)
    else:
        user.email = email
        user.name = caller.name
    session.add(user)
    session.flush()
    return user


def summarize(user: User) -> UserSummary:
    return UserSummary(id=user.id, name=user.name, email=user.email)
