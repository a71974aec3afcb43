"""HTTP client used by the editor, viewer and dashboard."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from app.core.config import settings


class ApiError(Exception):
    """Raised when the API answers with a non-2xx status."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class CanvasShelfClient:
    """Thin synchronous wrapper over the projects/comments API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: float = 10.0,
        http: Optional[httpx.Client] = None,
    ):
        headers = {"User-Agent": f"canvas-shelf-editor/{settings.APP_VERSION}"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        # An injected client (e.g. a test client) is used as-is apart from headers
        self._owns_http = http is None
        self.http = http or httpx.Client(base_url=base_url or settings.API_BASE_URL, timeout=timeout)
        self.headers = headers

    def close(self) -> None:
        if self._owns_http:
            self.http.close()

    def __enter__(self) -> "CanvasShelfClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        response = self.http.request(method, path, headers=self.headers, **kwargs)
        if response.is_success:
            return response.json()
        try:
            message = response.json().get("error") or response.reason_phrase
        except ValueError:
            message = response.reason_phrase
        raise ApiError(response.status_code, message)

    # Projects

    def create_project(
        self,
        title: str,
        snapshot: Dict[str, Any],
        thumbnail_data_url: Optional[str] = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"title": title, "snapshot": snapshot}
        if thumbnail_data_url:
            body["thumbnailDataUrl"] = thumbnail_data_url
        return self._request("POST", "/projects", json=body)

    def list_projects(self, search: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {"search": search} if search else None
        return self._request("GET", "/projects", params=params)

    def get_project(self, project_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/projects/{project_id}")

    def update_project(
        self,
        project_id: str,
        title: Optional[str] = None,
        snapshot: Optional[Dict[str, Any]] = None,
        published: Optional[bool] = None,
        thumbnail_data_url: Optional[str] = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        if title is not None:
            body["title"] = title
        if snapshot is not None:
            body["snapshot"] = snapshot
        if published is not None:
            body["published"] = published
        if thumbnail_data_url:
            body["thumbnailDataUrl"] = thumbnail_data_url
        return self._request("PATCH", f"/projects/{project_id}", json=body)

    def delete_project(self, project_id: str) -> Dict[str, Any]:
        return self._request("DELETE", f"/projects/{project_id}")

    def toggle_publish(self, project_id: str) -> bool:
        return self._request("POST", f"/projects/{project_id}/publish")["published"]

    # Comments

    def create_comment(self, project_id: str, content: str) -> Dict[str, Any]:
        return self._request("POST", "/comments", json={"projectId": project_id, "content": content})

    def list_comments(self, project_id: str) -> List[Dict[str, Any]]:
        return self._request("GET", f"/comments/{project_id}")
