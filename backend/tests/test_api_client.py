"""
QuillMind Client — API Client & Sync Tests
============================================

What:  The typed client and the tree sync helpers against the real app,
       in-process over ASGITransport.

What we test:
    ✅ Login stores the token; typed models come back
    ✅ Error envelope → ApiError with status, code and message
    ✅ load_forest mirrors the server; open_file selects the file
    ✅ persist_file_content is optimistic and rolls back on refusal
    ✅ Expired stored tokens are discarded
"""

from datetime import timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport

from quillmind.client import (
    ApiError,
    QuillMindClient,
    create_file,
    create_project,
    delete_file,
    is_token_expired,
    load_forest,
    open_file,
    persist_file_content,
)
from quillmind.services.token_service import Principal, token_service
from quillmind.tree import TreeStore


@pytest_asyncio.fixture
async def api(db_schema):
    from quillmind.main import app

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with QuillMindClient(base_url="http://test", transport=transport) as client:
        yield client


async def _login(api, username="ada", password="pw-secret-1"):
    await api.register(username, f"{username}@example.com", password)
    return await api.login(f"{username}@example.com", password)


class TestApiClient:

    @pytest.mark.asyncio
    async def test_login_stores_token(self, api):
        result = await _login(api)

        assert api.is_authenticated
        assert api.token == result.access_token
        assert result.user.username == "ada"

    @pytest.mark.asyncio
    async def test_crud_round_trip(self, api):
        await _login(api)
        project = await api.create_project("Novel")
        file = await api.create_file(project.id, "ch1.md")

        saved = await api.update_file_content(file.id, "hello")
        listed = await api.list_files(project.id)

        assert saved.content == "hello"
        assert [f.name for f in listed] == ["ch1.md"]
        assert (await api.list_projects())[0].id == project.id
        assert (await api.delete_file(file.id)).message == "File deleted successfully."

    @pytest.mark.asyncio
    async def test_error_envelope_becomes_api_error(self, api):
        await _login(api)

        with pytest.raises(ApiError) as exc_info:
            await api.get_file(12345)

        error = exc_info.value
        assert error.status_code == 404
        assert error.code == "not_found"
        assert "12345" in error.message
        assert error.request_id

    @pytest.mark.asyncio
    async def test_unauthenticated_call_is_401(self, api):
        with pytest.raises(ApiError) as exc_info:
            await api.list_projects()

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_logout_forgets_token(self, api):
        await _login(api)
        api.logout()

        assert not api.is_authenticated


class TestTokenExpiry:

    def test_fresh_token_is_not_expired(self):
        assert not is_token_expired(token_service.issue(Principal(1, "ada")))

    def test_expired_token_is_expired(self):
        token = token_service.issue(Principal(1, "ada"), expires_delta=timedelta(seconds=-1))
        assert is_token_expired(token)

    def test_garbage_is_expired(self):
        assert is_token_expired("garbage")

    @pytest.mark.asyncio
    async def test_client_drops_expired_token(self):
        token = token_service.issue(Principal(1, "ada"), expires_delta=timedelta(seconds=-1))
        client = QuillMindClient(token=token)
        try:
            assert client.token is None
        finally:
            await client.aclose()


class TestSync:

    @pytest.mark.asyncio
    async def test_load_forest_mirrors_server(self, api):
        await _login(api)
        novel = await api.create_project("Novel")
        script = await api.create_project("Script")
        await api.create_file(novel.id, "b.md")
        await api.create_file(novel.id, "a.md")

        forest = await load_forest(api)

        assert [forest.nodes[k].name for k in forest.roots] == ["Script", "Novel"]
        assert [n.name for n in forest.children_of(f"project-{novel.id}")] == ["a.md", "b.md"]
        assert forest.children_of(f"project-{script.id}") == ()
        assert all(n.content is None for n in forest.children_of(f"project-{novel.id}"))

    @pytest.mark.asyncio
    async def test_open_file_fetches_and_selects(self, api):
        await _login(api)
        project = await api.create_project("Novel")
        file = await api.create_file(project.id, "ch1.md")
        await api.update_file_content(file.id, "Once upon a time")
        store = TreeStore()
        store.set_tree(await load_forest(api))

        node = await open_file(api, store, file.id)

        assert node.content == "Once upon a time"
        assert store.current_file.id == file.id

    @pytest.mark.asyncio
    async def test_persist_applies_edit(self, api):
        await _login(api)
        store = TreeStore()
        project = await create_project(api, store, "Novel")
        file = await create_file(api, store, project.id, "ch1.md")

        await persist_file_content(api, store, file.id, "Draft one")

        assert store.forest.file(file.id).content == "Draft one"
        assert (await api.get_file(file.id)).content == "Draft one"

    @pytest.mark.asyncio
    async def test_persist_rolls_back_when_refused(self, api):
        await _login(api)
        store = TreeStore()
        project = await create_project(api, store, "Novel")
        file = await create_file(api, store, project.id, "ch1.md")
        await persist_file_content(api, store, file.id, "Saved text")
        api.logout()

        with pytest.raises(ApiError):
            await persist_file_content(api, store, file.id, "Unsaved text")

        assert store.forest.file(file.id).content == "Saved text"

    @pytest.mark.asyncio
    async def test_delete_file_removes_node(self, api):
        await _login(api)
        store = TreeStore()
        project = await create_project(api, store, "Novel")
        file = await create_file(api, store, project.id, "ch1.md")

        await delete_file(api, store, file.id)

        assert store.forest.file(file.id) is None
        assert store.forest.project(project.id).children == ()
