"""
QuillMind Backend — File API Tests
====================================

What we test:
    ✅ The register → login → create → write → read scenario for two users
    ✅ New files start empty; listing is by name and omits content
    ✅ PUT replaces content wholesale, is idempotent, accepts ""
    ✅ Non-string content → 400
    ✅ Delete → 200 then 404; files of a deleted project are gone
    ✅ Ids too large for the database → 404, never a crash
"""

from datetime import datetime

import pytest
from pydantic import TypeAdapter

_datetime = TypeAdapter(datetime)


def _when(value: str) -> datetime:
    # SQLite hands timestamps back without a zone
    return _datetime.validate_python(value).replace(tzinfo=None)


async def _project_with_file(client, headers, project="Novel", file="ch1.md"):
    project_body = (await client.post("/api/projects", json={"name": project}, headers=headers)).json()
    file_response = await client.post(
        f"/api/projects/{project_body['id']}/files", json={"name": file}, headers=headers,
    )
    assert file_response.status_code == 201, file_response.text
    return project_body, file_response.json()


class TestOwnershipScenario:

    @pytest.mark.asyncio
    async def test_other_user_never_sees_content(self, test_client, auth_headers):
        ada = await auth_headers("ada")
        _, file = await _project_with_file(test_client, ada)

        put = await test_client.put(f"/api/files/{file['id']}", json={"content": "hello"}, headers=ada)
        assert put.status_code == 200
        got = await test_client.get(f"/api/files/{file['id']}", headers=ada)
        assert got.json()["content"] == "hello"

        bob = await auth_headers("bob")
        for method, kwargs in (
            ("GET", {}),
            ("PUT", {"json": {"content": "pwned"}}),
            ("DELETE", {}),
        ):
            response = await test_client.request(method, f"/api/files/{file['id']}", headers=bob, **kwargs)
            assert response.status_code in (403, 404)
            assert "hello" not in response.text

        still = await test_client.get(f"/api/files/{file['id']}", headers=ada)
        assert still.json()["content"] == "hello"

    @pytest.mark.asyncio
    async def test_other_user_cannot_add_or_list_files(self, test_client, auth_headers):
        ada = await auth_headers("ada")
        bob = await auth_headers("bob")
        project, _ = await _project_with_file(test_client, ada)

        created = await test_client.post(
            f"/api/projects/{project['id']}/files", json={"name": "intruder.md"}, headers=bob,
        )
        listed = await test_client.get(f"/api/projects/{project['id']}/files", headers=bob)

        assert created.status_code == 403
        assert listed.status_code == 403


class TestCreateAndList:

    @pytest.mark.asyncio
    async def test_new_file_defaults(self, test_client, auth_headers):
        headers = await auth_headers("ada")
        _, file = await _project_with_file(test_client, headers)

        assert file["content"] == ""
        assert file["file_type"] == "markdown"
        assert file["path"] == "ch1.md"

    @pytest.mark.asyncio
    async def test_explicit_type_and_path(self, test_client, auth_headers):
        headers = await auth_headers("ada")
        project = (await test_client.post("/api/projects", json={"name": "Script"}, headers=headers)).json()

        response = await test_client.post(
            f"/api/projects/{project['id']}/files",
            json={"name": "scene1.fountain", "file_type": "fountain", "path": "act1/scene1.fountain"},
            headers=headers,
        )

        assert response.json()["file_type"] == "fountain"
        assert response.json()["path"] == "act1/scene1.fountain"

    @pytest.mark.asyncio
    async def test_empty_file_name_is_400(self, test_client, auth_headers):
        headers = await auth_headers("ada")
        project = (await test_client.post("/api/projects", json={"name": "P"}, headers=headers)).json()

        response = await test_client.post(
            f"/api/projects/{project['id']}/files", json={"name": ""}, headers=headers,
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_list_is_by_name_without_content(self, test_client, auth_headers):
        headers = await auth_headers("ada")
        project = (await test_client.post("/api/projects", json={"name": "P"}, headers=headers)).json()
        for name in ("c.md", "a.md", "b.md"):
            await test_client.post(f"/api/projects/{project['id']}/files", json={"name": name}, headers=headers)

        response = await test_client.get(f"/api/projects/{project['id']}/files", headers=headers)

        assert [f["name"] for f in response.json()] == ["a.md", "b.md", "c.md"]
        assert all("content" not in f for f in response.json())

    @pytest.mark.asyncio
    async def test_files_in_unknown_project_is_404(self, test_client, auth_headers):
        headers = await auth_headers("ada")

        response = await test_client.post("/api/projects/4242/files", json={"name": "x.md"}, headers=headers)

        assert response.status_code == 404


class TestUpdateContent:

    @pytest.mark.asyncio
    async def test_last_write_wins_and_is_idempotent(self, test_client, auth_headers):
        headers = await auth_headers("ada")
        _, file = await _project_with_file(test_client, headers)
        url = f"/api/files/{file['id']}"

        await test_client.put(url, json={"content": "draft"}, headers=headers)
        await test_client.put(url, json={"content": "final"}, headers=headers)
        second = await test_client.put(url, json={"content": "final"}, headers=headers)

        assert second.json()["content"] == "final"
        assert (await test_client.get(url, headers=headers)).json()["content"] == "final"

    @pytest.mark.asyncio
    async def test_empty_string_is_valid_content(self, test_client, auth_headers):
        headers = await auth_headers("ada")
        _, file = await _project_with_file(test_client, headers)
        url = f"/api/files/{file['id']}"

        await test_client.put(url, json={"content": "something"}, headers=headers)
        response = await test_client.put(url, json={"content": ""}, headers=headers)

        assert response.status_code == 200
        assert (await test_client.get(url, headers=headers)).json()["content"] == ""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{}, {"content": None}, {"content": 42}])
    async def test_non_string_content_is_400(self, test_client, auth_headers, body):
        headers = await auth_headers("ada")
        _, file = await _project_with_file(test_client, headers)

        response = await test_client.put(f"/api/files/{file['id']}", json=body, headers=headers)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_update_refreshes_timestamp(self, test_client, auth_headers):
        headers = await auth_headers("ada")
        _, file = await _project_with_file(test_client, headers)

        updated = await test_client.put(f"/api/files/{file['id']}", json={"content": "x"}, headers=headers)

        before = _when(file["updated_at"])
        after = _when(updated.json()["updated_at"])
        assert after >= before


class TestDelete:

    @pytest.mark.asyncio
    async def test_delete_then_404(self, test_client, auth_headers):
        headers = await auth_headers("ada")
        _, file = await _project_with_file(test_client, headers)
        url = f"/api/files/{file['id']}"

        first = await test_client.delete(url, headers=headers)
        second = await test_client.delete(url, headers=headers)

        assert first.status_code == 200
        assert second.status_code == 404
        assert (await test_client.get(url, headers=headers)).status_code == 404

    @pytest.mark.asyncio
    async def test_files_of_deleted_project_are_gone(self, test_client, auth_headers):
        headers = await auth_headers("ada")
        project, file = await _project_with_file(test_client, headers)

        await test_client.delete(f"/api/projects/{project['id']}", headers=headers)

        assert (await test_client.get(f"/api/projects/{project['id']}/files", headers=headers)).status_code == 404
        assert (await test_client.get(f"/api/files/{file['id']}", headers=headers)).status_code == 404


class TestOutOfRangeIds:

    @pytest.mark.asyncio
    async def test_huge_ids_are_404(self, test_client, auth_headers):
        headers = await auth_headers("ada")
        huge = 2**70

        responses = [
            await test_client.get(f"/api/files/{huge}", headers=headers),
            await test_client.put(f"/api/files/{huge}", json={"content": "x"}, headers=headers),
            await test_client.delete(f"/api/files/{huge}", headers=headers),
            await test_client.get(f"/api/projects/{huge}/files", headers=headers),
            await test_client.post(f"/api/projects/{huge}/files", json={"name": "a.md"}, headers=headers),
            await test_client.delete(f"/api/projects/{huge}", headers=headers),
        ]

        assert [r.status_code for r in responses] == [404] * 6
        assert {r.json()["code"] for r in responses} == {"not_found"}
