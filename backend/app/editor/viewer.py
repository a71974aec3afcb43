"""Public viewer: load a shared project and its comments."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from app.editor.api_client import ApiError, CanvasShelfClient

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Project not found. This project doesn't exist or has been deleted."
NOT_PUBLISHED_MESSAGE = "Project not published. This project is private and hasn't been published yet."
GENERIC_MESSAGE = "Failed to load project. An error occurred while loading this project."


def message_for_status(status_code: int) -> str:
    if status_code == 404:
        return NOT_FOUND_MESSAGE
    if status_code == 403:
        return NOT_PUBLISHED_MESSAGE
    return GENERIC_MESSAGE


@dataclass
class ViewResult:
    project: Optional[Dict[str, Any]] = None
    comments: List[Dict[str, Any]] = field(default_factory=list)
    status_code: int = 200
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def load_for_viewing(client: CanvasShelfClient, project_id: str) -> ViewResult:
    """Fetch a project for display, with a tailored message when it can't be shown."""
    try:
        project = client.get_project(project_id)
    except ApiError as exc:
        return ViewResult(status_code=exc.status_code, error=message_for_status(exc.status_code))
    except httpx.HTTPError as exc:
        logger.warning("Failed to load project", extra={"project_id": project_id, "error": str(exc)})
        return ViewResult(status_code=500, error=GENERIC_MESSAGE)

    comments: List[Dict[str, Any]] = []
    try:
        comments = client.list_comments(project_id)
    except (ApiError, httpx.HTTPError) as exc:
        # Owners viewing their unpublished project get it without comments
        logger.info("Comments unavailable", extra={"project_id": project_id, "error": str(exc)})
    return ViewResult(project=project, comments=comments)


def post_comment(client: CanvasShelfClient, result: ViewResult, content: str) -> Dict[str, Any]:
    """Post a comment and append it to the loaded view."""
    if result.project is None:
        raise ValueError("No project loaded")
    comment = client.create_comment(result.project["id"], content.strip())
    result.comments.append(comment)
    return comment
