import asyncio
import logging
from typing import Awaitable, Callable, Optional

import httpx

from app.core.config import settings
from app.editor.api_client import ApiError

logger = logging.getLogger(__name__)

SaveFn = Callable[[], Awaitable[None]]


class AutosaveScheduler:
    """
    Debounced save trigger for one editing session.

    Each change cancels the pending save and schedules a new one ``delay``
    seconds later, so at most one save is pending. Saves never overlap: one
    started while another is in flight waits for it. ``flush`` saves now;
    ``close`` drops any pending save without running it.
    """

    def __init__(self, save: SaveFn, delay: Optional[float] = None):
        self.save = save
        self.delay = settings.AUTOSAVE_DELAY_S if delay is None else delay
        self.last_error: Optional[Exception] = None
        self.closed = False
        self._task: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def notify_change(self) -> None:
        """Reschedule the delayed save. Must be called from the event loop."""
        if self.closed:
            return
        self._cancel_pending()
        self._task = asyncio.create_task(self._delayed_save())

    async def flush(self, save: Optional[SaveFn] = None) -> bool:
        """Cancel the pending save and save immediately. Returns True on success."""
        if self.closed:
            return False
        self._cancel_pending()
        return await self._run(save or self.save)

    async def close(self) -> None:
        self.closed = True
        task = self._task
        self._cancel_pending()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    def _cancel_pending(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _delayed_save(self) -> None:
        await asyncio.sleep(self.delay)
        # Detach before saving so a change made mid-save schedules a fresh task
        # instead of cancelling this one.
        self._task = None
        await self._run(self.save)

    async def _run(self, save: SaveFn) -> bool:
        # One save at a time; a later save waits and then sends the newer state
        async with self._lock:
            try:
                await save()
            except (ApiError, httpx.HTTPError) as exc:
                # Left for the next change or a manual save; no retry queue
                self.last_error = exc
                logger.warning("Autosave failed", extra={"error": str(exc)})
                return False
            except Exception as exc:
                self.last_error = exc
                logger.exception("Autosave failed unexpectedly")
                return False
            self.last_error = None
            return True
