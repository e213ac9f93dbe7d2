"""
QuillMind Backend — Project API Tests
=======================================

What we test:
    ✅ Create → 201, list newest first, only the caller's projects
    ✅ Empty name → 400
    ✅ Deleting a project removes its files in the same transaction
    ✅ A failed project delete leaves the project and its files in place
    ✅ Another user's project: 403, unknown id: 404, same message
"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.dml import Delete

from quillmind.models.file import File
from quillmind.models.project import Project


class TestCreateAndList:

    @pytest.mark.asyncio
    async def test_create_project(self, test_client, auth_headers):
        headers = await auth_headers("ada")

        response = await test_client.post("/api/projects", json={"name": "Novel"}, headers=headers)

        assert response.status_code == 201
        body = response.json()
        assert body["name"] == "Novel"
        assert isinstance(body["id"], int)

    @pytest.mark.asyncio
    async def test_blank_name_is_400(self, test_client, auth_headers):
        headers = await auth_headers("ada")

        response = await test_client.post("/api/projects", json={"name": "  "}, headers=headers)

        assert response.status_code == 400
        assert response.json()["details"] == {"field": "name"}

    @pytest.mark.asyncio
    async def test_list_is_newest_first_and_scoped_to_owner(self, test_client, auth_headers):
        ada = await auth_headers("ada")
        bob = await auth_headers("bob")
        for name in ("First", "Second", "Third"):
            await test_client.post("/api/projects", json={"name": name}, headers=ada)
        await test_client.post("/api/projects", json={"name": "Bob's"}, headers=bob)

        response = await test_client.get("/api/projects", headers=ada)

        assert response.status_code == 200
        assert [p["name"] for p in response.json()] == ["Third", "Second", "First"]

    @pytest.mark.asyncio
    async def test_new_user_has_no_projects(self, test_client, auth_headers):
        headers = await auth_headers("ada")

        response = await test_client.get("/api/projects", headers=headers)

        assert response.json() == []


class TestDelete:

    @pytest.mark.asyncio
    async def test_delete_cascades_to_files(self, test_client, auth_headers, db_session):
        headers = await auth_headers("ada")
        project = (await test_client.post("/api/projects", json={"name": "Doomed"}, headers=headers)).json()
        for name in ("a.md", "b.md"):
            await test_client.post(f"/api/projects/{project['id']}/files", json={"name": name}, headers=headers)

        response = await test_client.delete(f"/api/projects/{project['id']}", headers=headers)

        assert response.status_code == 200
        assert response.json() == {"message": "Project deleted successfully."}
        projects = await db_session.scalar(select(func.count()).select_from(Project))
        files = await db_session.scalar(select(func.count()).select_from(File))
        assert projects == 0
        assert files == 0

    @pytest.mark.asyncio
    async def test_delete_other_users_project_is_403(self, test_client, auth_headers):
        ada = await auth_headers("ada")
        bob = await auth_headers("bob")
        project = (await test_client.post("/api/projects", json={"name": "Mine"}, headers=ada)).json()

        forbidden = await test_client.delete(f"/api/projects/{project['id']}", headers=bob)
        missing = await test_client.delete("/api/projects/9999", headers=bob)

        assert forbidden.status_code == 403
        assert missing.status_code == 404
        assert forbidden.json()["message"].startswith("Project ")
        assert missing.json()["message"].startswith("Project ")
        assert (await test_client.get("/api/projects", headers=ada)).json()[0]["id"] == project["id"]

    @pytest.mark.asyncio
    async def test_delete_twice_is_404(self, test_client, auth_headers):
        headers = await auth_headers("ada")
        project = (await test_client.post("/api/projects", json={"name": "Once"}, headers=headers)).json()

        await test_client.delete(f"/api/projects/{project['id']}", headers=headers)
        response = await test_client.delete(f"/api/projects/{project['id']}", headers=headers)

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_failed_delete_keeps_project_and_files(
        self, test_client, auth_headers, db_session, monkeypatch
    ):
        headers = await auth_headers("ada")
        project = (await test_client.post("/api/projects", json={"name": "Kept"}, headers=headers)).json()
        await test_client.post(f"/api/projects/{project['id']}/files", json={"name": "a.md"}, headers=headers)

        real_execute = AsyncSession.execute

        async def execute(self, statement, *args, **kwargs):
            # The file rows are deleted first; fail on the project row after them
            if isinstance(statement, Delete) and statement.table.name == "projects":
                raise OperationalError("DELETE FROM projects", {}, Exception("database is locked"))
            return await real_execute(self, statement, *args, **kwargs)

        monkeypatch.setattr(AsyncSession, "execute", execute)
        response = await test_client.delete(f"/api/projects/{project['id']}", headers=headers)

        assert response.status_code == 500
        assert response.json()["code"] == "internal_error"
        assert "locked" not in response.json()["message"]
        projects = await db_session.scalar(select(func.count()).select_from(Project))
        files = await db_session.scalar(
            select(func.count()).select_from(File).where(File.project_id == project["id"])
        )
        assert projects == 1
        assert files == 1
