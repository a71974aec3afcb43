"""Thumbnail storage for project previews.

Previews arrive as ``data:image/...;base64,`` URLs rendered by the editor
(or as raw bytes), are normalised to PNG and written under the thumbnails
directory, which the app serves at ``/thumbnails``.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import re
import uuid
from pathlib import Path
from typing import Optional, Protocol, Union
from urllib.parse import urlparse

from PIL import Image as PILImage, UnidentifiedImageError

from app.core.config import settings

logger = logging.getLogger(__name__)

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w/+.-]+)?(?P<b64>;base64)?,(?P<data>.*)$", re.DOTALL)
_SAFE_ID_RE = re.compile(r"[^A-Za-z0-9_-]")

ThumbnailPayload = Union[str, bytes]


class ThumbnailError(Exception):
    """Raised when a thumbnail payload cannot be decoded or stored."""


class ThumbnailStore(Protocol):
    def upload(self, project_id: str, payload: ThumbnailPayload) -> str:
        """Store a preview for ``project_id`` and return its public URL."""
        ...

    def delete(self, url: str) -> None:
        """Remove a previously uploaded preview."""
        ...


def decode_data_url(data_url: str) -> bytes:
    match = _DATA_URL_RE.match(data_url.strip())
    if not match:
        raise ThumbnailError("Thumbnail payload is not a data URL")
    if not match.group("b64"):
        raise ThumbnailError("Thumbnail data URL must be base64 encoded")
    try:
        return base64.b64decode(match.group("data"), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ThumbnailError("Thumbnail data URL is not valid base64") from exc


def encode_data_url(image_bytes: bytes, mime: str = "image/png") -> str:
    return f"data:{mime};base64,{base64.b64encode(image_bytes).decode('ascii')}"


def _normalise_png(image_bytes: bytes, max_px: int) -> bytes:
    try:
        with PILImage.open(io.BytesIO(image_bytes)) as img:
            img.load()
            if max_px > 0:
                img.thumbnail((max_px, max_px))
            if img.mode not in ("RGB", "RGBA"):
                img = img.convert("RGBA")
            buf = io.BytesIO()
            img.save(buf, format="PNG", optimize=True)
            return buf.getvalue()
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise ThumbnailError("Thumbnail payload is not a readable image") from exc


class LocalThumbnailStore:
    """Filesystem-backed thumbnail store."""

    def __init__(
        self,
        root_dir: Optional[Path] = None,
        base_url: Optional[str] = None,
        max_px: Optional[int] = None,
    ):
        # Defaults are resolved per call so settings changes take effect
        self._root_dir = root_dir
        self._base_url = base_url
        self._max_px = max_px

    @property
    def root_dir(self) -> Path:
        root = self._root_dir or settings.thumbnails_dir
        root.mkdir(parents=True, exist_ok=True)
        return root

    @property
    def base_url(self) -> str:
        return (self._base_url or settings.thumbnails_url).rstrip("/")

    @property
    def max_px(self) -> int:
        return self._max_px if self._max_px is not None else settings.THUMBNAIL_MAX_PX

    def upload(self, project_id: str, payload: ThumbnailPayload) -> str:
        raw = decode_data_url(payload) if isinstance(payload, str) else payload
        png = _normalise_png(raw, self.max_px)

        # Unique suffix so a replaced preview never reuses a cached URL
        safe_id = _SAFE_ID_RE.sub("", project_id) or "project"
        filename = f"{safe_id}-{uuid.uuid4().hex[:8]}.png"
        (self.root_dir / filename).write_bytes(png)

        url = f"{self.base_url}/{filename}"
        logger.debug("Stored thumbnail", extra={"project_id": project_id, "url": url, "bytes": len(png)})
        return url

    def _path_for_url(self, url: str) -> Optional[Path]:
        base_path = urlparse(self.base_url).path.rstrip("/")
        url_path = urlparse(url).path
        if not url_path.startswith(base_path + "/"):
            return None
        name = url_path[len(base_path) + 1:]
        if not name or "/" in name or name.startswith("."):
            return None
        return self.root_dir / name

    def delete(self, url: str) -> None:
        path = self._path_for_url(url)
        if path is None:
            logger.info("Ignoring thumbnail URL outside the store", extra={"url": url})
            return
        path.unlink(missing_ok=True)


_default_store = LocalThumbnailStore()


def get_thumbnail_store() -> ThumbnailStore:
    """Dependency returning the configured thumbnail store."""
    return _default_store
