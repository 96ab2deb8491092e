"""Integration tests for the account-facing project endpoints."""

from __future__ import annotations

import uuid

import pytest
from httpx import AsyncClient

PROJECTS = "/api/v1/projects"
PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


async def upload(client: AsyncClient, headers: dict, filename: str = "cat.png", content_type: str = "image/png"):
    return await client.post(PROJECTS, headers=headers, files={"file": (filename, PNG, content_type)})


@pytest.fixture
async def account(account_factory):
    return await account_factory(plan="free")


@pytest.fixture
def headers(account, account_headers):
    return account_headers(account)


@pytest.mark.integration
class TestUpload:
    async def test_upload_creates_pending_project(self, client, headers, asset_store):
        response = await upload(client, headers)

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "pending"
        assert body["progress"] == 0
        assert body["kind"] == "image"
        assert body["original_file_name"] == "cat.png"
        assert body["size_bytes"] == len(PNG)
        assert body["error_detail"] is None

    async def test_fourth_upload_is_quota_exceeded(self, client, headers):
        for _ in range(3):
            assert (await upload(client, headers)).status_code == 201

        response = await upload(client, headers)

        assert response.status_code == 403
        assert response.headers["content-type"] == "application/problem+json"
        problem = response.json()
        assert problem["type"] == "quota-exceeded"
        assert problem["reason"] == "daily-limit"
        assert problem["instance"] == PROJECTS

    async def test_unsupported_type(self, client, headers):
        response = await upload(client, headers, "notes.pdf", "application/pdf")

        assert response.status_code == 400
        assert response.json()["type"] == "unsupported-media-type"

    async def test_missing_file(self, client, headers):
        response = await client.post(PROJECTS, headers=headers)

        assert response.status_code == 400
        assert response.json()["type"] == "missing-file"

    async def test_unknown_account(self, client):
        response = await upload(client, {"X-Account-ID": str(uuid.uuid4())})

        assert response.status_code == 404
        assert response.json()["type"] == "account-not-found"


@pytest.mark.integration
class TestIdentity:
    async def test_missing_header(self, client):
        response = await client.get(PROJECTS)

        assert response.status_code == 401
        assert response.json()["type"] == "missing-account-id"

    async def test_malformed_header(self, client):
        response = await client.get(PROJECTS, headers={"X-Account-ID": "not-a-uuid"})

        assert response.status_code == 401
        assert response.json()["type"] == "invalid-account-id"

    async def test_other_accounts_project_is_not_found(
        self, client, headers, account_factory, account_headers
    ):
        project_id = (await upload(client, headers)).json()["id"]
        stranger = account_headers(await account_factory(plan="premium"))

        for method, path in [
            ("GET", f"{PROJECTS}/{project_id}"),
            ("GET", f"{PROJECTS}/{project_id}/status"),
            ("GET", f"{PROJECTS}/{project_id}/download"),
            ("POST", f"{PROJECTS}/{project_id}/cancel"),
            ("DELETE", f"{PROJECTS}/{project_id}"),
        ]:
            response = await client.request(method, path, headers=stranger)
            assert response.status_code == 404, path

        assert (await client.get(f"{PROJECTS}/{project_id}", headers=headers)).status_code == 200


@pytest.mark.integration
class TestOwnerEndpoints:
    async def test_list_newest_first(self, client, headers):
        first = (await upload(client, headers, "a.png")).json()["id"]
        second = (await upload(client, headers, "b.png")).json()["id"]

        response = await client.get(PROJECTS, headers=headers, params={"limit": 1})

        assert response.status_code == 200
        page = response.json()
        assert page["total"] == 2
        assert page["pages"] == 2
        assert [p["id"] for p in page["items"]] in ([second], [first])

    async def test_list_rejects_unknown_status(self, client, headers):
        response = await client.get(PROJECTS, headers=headers, params={"status": "exploded"})

        assert response.status_code == 422
        assert response.json()["type"] == "validation-error"

    async def test_status_poll(self, client, headers):
        project_id = (await upload(client, headers)).json()["id"]

        response = await client.get(f"{PROJECTS}/{project_id}/status", headers=headers)

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "pending"
        assert 0 < body["time_remaining_seconds"] <= 24 * 3600

    async def test_cancel_then_cancel_again(self, client, headers):
        project_id = (await upload(client, headers)).json()["id"]

        cancelled = await client.post(f"{PROJECTS}/{project_id}/cancel", headers=headers)
        again = await client.post(f"{PROJECTS}/{project_id}/cancel", headers=headers)

        assert cancelled.status_code == 200
        assert cancelled.json()["status"] == "cancelled"
        assert again.status_code == 409
        assert again.json()["type"] == "invalid-transition"

    async def test_delete(self, client, headers, asset_store):
        project_id = (await upload(client, headers)).json()["id"]

        response = await client.delete(f"{PROJECTS}/{project_id}", headers=headers)

        assert response.status_code == 204
        assert (await client.get(f"{PROJECTS}/{project_id}", headers=headers)).status_code == 404
        assert not [p for p in asset_store.backend.root.rglob("*") if p.is_file()]

    async def test_download_before_completion(self, client, headers):
        project_id = (await upload(client, headers)).json()["id"]

        response = await client.get(f"{PROJECTS}/{project_id}/download", headers=headers)

        assert response.status_code == 400
        assert response.json()["type"] == "project-not-completed"

    async def test_dashboard_and_usage(self, client, headers):
        await upload(client, headers)
        await upload(client, headers, "clip.mp4", "video/mp4")

        dashboard = (await client.get(f"{PROJECTS}/dashboard", headers=headers)).json()
        usage = (await client.get("/api/v1/accounts/me/usage", headers=headers)).json()

        assert dashboard["stats"]["total"] == 2
        assert dashboard["stats"]["pending"] == 2
        assert len(dashboard["recent_projects"]) == 2
        assert dashboard["usage"]["uploads_today"] == 2
        assert usage["plan"] == "free"
        assert usage["remaining_today"] == 1
        assert usage["priority"] == "low"
