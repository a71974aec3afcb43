"""
Editing session for a single project.

Holds the working copy of the title and snapshot, tracks unsaved changes,
and drives autosave, manual save (optionally with a fresh thumbnail) and
publish toggling through the API client.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, Optional

from app.editor.api_client import CanvasShelfClient
from app.editor.autosave import AutosaveScheduler
from app.services.thumbnails import encode_data_url

logger = logging.getLogger(__name__)

# Renders the current snapshot to PNG bytes (supplied by the canvas SDK)
ThumbnailRenderer = Callable[[Dict[str, Any]], bytes]


class EditorSession:
    def __init__(
        self,
        client: CanvasShelfClient,
        project: Dict[str, Any],
        render_thumbnail: Optional[ThumbnailRenderer] = None,
        autosave_delay: Optional[float] = None,
    ):
        self.client = client
        self.project = project
        self.title: str = project["title"]
        self.snapshot: Dict[str, Any] = project.get("snapshot") or {}
        self.render_thumbnail = render_thumbnail
        self.saving = False
        self._revision = 0
        self._saved_revision = 0
        self.autosave = AutosaveScheduler(self._save_working_copy, delay=autosave_delay)

    @classmethod
    async def open(
        cls,
        client: CanvasShelfClient,
        project_id: str,
        render_thumbnail: Optional[ThumbnailRenderer] = None,
        autosave_delay: Optional[float] = None,
    ) -> "EditorSession":
        project = await asyncio.to_thread(client.get_project, project_id)
        return cls(client, project, render_thumbnail, autosave_delay)

    @classmethod
    async def create(
        cls,
        client: CanvasShelfClient,
        title: str,
        snapshot: Dict[str, Any],
        render_thumbnail: Optional[ThumbnailRenderer] = None,
        autosave_delay: Optional[float] = None,
    ) -> "EditorSession":
        """First explicit save of a new document; the project exists from here on."""
        thumbnail = _render(render_thumbnail, snapshot)
        created = await asyncio.to_thread(client.create_project, title, snapshot, thumbnail)
        project = {**created, "snapshot": snapshot}
        return cls(client, project, render_thumbnail, autosave_delay)

    @property
    def project_id(self) -> str:
        return self.project["id"]

    @property
    def has_unsaved_changes(self) -> bool:
        return self._revision != self._saved_revision

    @property
    def last_error(self) -> Optional[Exception]:
        return self.autosave.last_error

    def apply_change(self, snapshot: Optional[Dict[str, Any]] = None, title: Optional[str] = None) -> None:
        """Record an edit from the canvas or title field and reschedule autosave."""
        if snapshot is not None:
            self.snapshot = snapshot
        if title is not None:
            self.title = title
        self._revision += 1
        self.autosave.notify_change()

    async def save(self, with_thumbnail: bool = False) -> bool:
        """Manual save, bypassing the debounce. Returns True on success."""
        return await self.autosave.flush(lambda: self._save_working_copy(with_thumbnail))

    async def toggle_publish(self) -> bool:
        published = await asyncio.to_thread(self.client.toggle_publish, self.project_id)
        self.project = {**self.project, "published": published}
        return published

    async def close(self) -> None:
        """End the session; a pending autosave is dropped, not fired."""
        await self.autosave.close()

    async def _save_working_copy(self, with_thumbnail: bool = False) -> None:
        revision = self._revision
        thumbnail = _render(self.render_thumbnail, self.snapshot) if with_thumbnail else None
        self.saving = True
        try:
            updated = await asyncio.to_thread(
                self.client.update_project,
                self.project_id,
                title=self.title,
                snapshot=self.snapshot,
                thumbnail_data_url=thumbnail,
            )
        finally:
            self.saving = False
        self.project = updated
        # Edits made while the request was in flight stay unsaved
        self._saved_revision = revision


def _render(render_thumbnail: Optional[ThumbnailRenderer], snapshot: Dict[str, Any]) -> Optional[str]:
    if render_thumbnail is None:
        return None
    try:
        return encode_data_url(render_thumbnail(snapshot))
    except Exception as exc:
        # Saving without a preview is fine
        logger.warning("Failed to render thumbnail", extra={"error": str(exc)})
        return None
