"""Dashboard helpers: the signed-in user's project list and quick actions."""
import logging
from typing import Any, Dict, List, Optional

from app.editor.api_client import CanvasShelfClient

logger = logging.getLogger(__name__)


def load_dashboard(client: CanvasShelfClient, search: Optional[str] = None) -> List[Dict[str, Any]]:
    """Projects for the dashboard grid, most recently updated first."""
    search = (search or "").strip() or None
    return client.list_projects(search)


def empty_state_message(search: Optional[str]) -> str:
    return "No projects found" if (search or "").strip() else "No projects yet. Create one!"


def delete_from_dashboard(client: CanvasShelfClient, projects: List[Dict[str, Any]], project_id: str) -> List[Dict[str, Any]]:
    client.delete_project(project_id)
    logger.info("Deleted project from dashboard", extra={"project_id": project_id})
    return [p for p in projects if p["id"] != project_id]


def toggle_from_dashboard(client: CanvasShelfClient, projects: List[Dict[str, Any]], project_id: str) -> List[Dict[str, Any]]:
    published = client.toggle_publish(project_id)
    return [{**p, "published": published} if p["id"] == project_id else p for p in projects]
