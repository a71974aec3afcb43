import asyncio

import pytest

from app.editor import dashboard, viewer
from app.editor.api_client import ApiError, CanvasShelfClient
from app.editor.session import EditorSession
from conftest import make_token


@pytest.fixture()
def owner_api(client):
    return CanvasShelfClient(token=make_token("owner-1"), http=client)


@pytest.fixture()
def visitor_api(client):
    return CanvasShelfClient(token=make_token("visitor-2"), http=client)


@pytest.fixture()
def anonymous_api(client):
    return CanvasShelfClient(http=client)


def test_client_round_trip(owner_api):
    created = owner_api.create_project("Board", {"store": {}})
    assert created["published"] is False

    updated = owner_api.update_project(created["id"], snapshot={"store": {"a": 1}})
    assert updated["snapshot"] == {"store": {"a": 1}}
    assert owner_api.toggle_publish(created["id"]) is True

    with pytest.raises(ApiError) as excinfo:
        owner_api.get_project("missing")
    assert excinfo.value.status_code == 404
    assert excinfo.value.message == "Project not found"


def test_viewer_messages_distinguish_failures(owner_api, anonymous_api):
    created = owner_api.create_project("Private", {"store": {}})

    hidden = viewer.load_for_viewing(anonymous_api, created["id"])
    assert not hidden.ok
    assert hidden.status_code == 403
    assert hidden.error == viewer.NOT_PUBLISHED_MESSAGE

    missing = viewer.load_for_viewing(anonymous_api, "gone")
    assert missing.error == viewer.NOT_FOUND_MESSAGE

    assert viewer.message_for_status(500) == viewer.GENERIC_MESSAGE


def test_owner_views_unpublished_project_without_comments(owner_api):
    created = owner_api.create_project("Private", {"store": {}})
    result = viewer.load_for_viewing(owner_api, created["id"])
    assert result.ok
    assert result.comments == []


def test_viewer_loads_and_posts_comments(owner_api, visitor_api):
    created = owner_api.create_project("Shared", {"store": {}})
    owner_api.toggle_publish(created["id"])
    owner_api.create_comment(created["id"], "first")

    result = viewer.load_for_viewing(visitor_api, created["id"])
    assert result.ok
    assert result.project["snapshot"] == {"store": {}}

    viewer.post_comment(visitor_api, result, "  second ")
    assert [c["content"] for c in result.comments] == ["first", "second"]


def test_dashboard_search_delete_and_toggle(owner_api):
    a = owner_api.create_project("Alpha", {})
    owner_api.create_project("Beta", {})

    assert [p["title"] for p in dashboard.load_dashboard(owner_api, " alp ")] == ["Alpha"]
    projects = dashboard.load_dashboard(owner_api)
    assert len(projects) == 2

    projects = dashboard.toggle_from_dashboard(owner_api, projects, a["id"])
    assert next(p for p in projects if p["id"] == a["id"])["published"] is True

    projects = dashboard.delete_from_dashboard(owner_api, projects, a["id"])
    assert [p["title"] for p in projects] == ["Beta"]
    assert dashboard.empty_state_message("x") == "No projects found"
    assert dashboard.empty_state_message("") == "No projects yet. Create one!"


class FakeApi:
    """In-memory stand-in for CanvasShelfClient used by editor sessions."""

    def __init__(self):
        self.updates = []
        self.fail = False
        self.published = False

    def create_project(self, title, snapshot, thumbnail_data_url=None):
        self.created = (title, snapshot, thumbnail_data_url)
        return {"id": "p1", "title": title, "published": False, "thumbnailUrl": None}

    def get_project(self, project_id):
        return {"id": project_id, "title": "Loaded", "snapshot": {"store": {}}, "published": False}

    def update_project(self, project_id, title=None, snapshot=None, published=None, thumbnail_data_url=None):
        if self.fail:
            raise ApiError(500, "Failed to update project")
        self.updates.append({"title": title, "snapshot": snapshot, "thumbnail": thumbnail_data_url})
        return {"id": project_id, "title": title, "snapshot": snapshot, "published": self.published}

    def toggle_publish(self, project_id):
        self.published = not self.published
        return self.published


def test_editor_session_autosaves_after_quiet_period():
    async def scenario():
        api = FakeApi()
        session = await EditorSession.open(api, "p1", autosave_delay=0.03)
        session.apply_change(snapshot={"store": {"a": 1}})
        session.apply_change(title="Renamed")
        assert session.has_unsaved_changes
        await asyncio.sleep(0.1)
        await session.close()
        return api, session

    api, session = asyncio.run(scenario())
    assert api.updates == [{"title": "Renamed", "snapshot": {"store": {"a": 1}}, "thumbnail": None}]
    assert not session.has_unsaved_changes


def test_editor_manual_save_with_thumbnail_and_close_cancels_timer():
    async def scenario():
        api = FakeApi()
        session = await EditorSession.create(
            api, "New", {"store": {}}, render_thumbnail=lambda snapshot: b"\x89PNG", autosave_delay=0.03
        )
        session.apply_change(snapshot={"store": {"b": 2}})
        assert await session.save(with_thumbnail=True) is True
        session.apply_change(snapshot={"store": {"c": 3}})
        await session.close()
        await asyncio.sleep(0.06)
        return api, session

    api, session = asyncio.run(scenario())
    assert api.created[2].startswith("data:image/png;base64,")
    assert len(api.updates) == 1
    assert api.updates[0]["thumbnail"].startswith("data:image/png;base64,")
    assert session.has_unsaved_changes


def test_editor_save_failure_keeps_changes_and_reports_error():
    async def scenario():
        api = FakeApi()
        api.fail = True
        session = await EditorSession.open(api, "p1", autosave_delay=0.01)
        session.apply_change(title="Will fail")
        saved = await session.save()
        published = await session.toggle_publish()
        await session.close()
        return saved, published, session

    saved, published, session = asyncio.run(scenario())
    assert saved is False
    assert session.has_unsaved_changes
    assert isinstance(session.last_error, ApiError)
    assert published is True
    assert session.project["published"] is True
