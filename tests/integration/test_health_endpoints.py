"""Integration tests for health and metrics endpoints."""
from __future__ import annotations

import pytest
from httpx import AsyncClient


@pytest.mark.integration
async def test_health_endpoint_structure(client: AsyncClient):
    """Liveness needs no dependencies."""
    response = await client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert "service" in data
    assert "version" in data


@pytest.mark.integration
async def test_readiness_reports_checks(client: AsyncClient):
    response = await client.get("/api/v1/health/ready")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["checks"] == {"database": True, "storage": True}
    assert isinstance(data["jobs"], list)


@pytest.mark.integration
async def test_readiness_degrades_when_storage_is_down(client: AsyncClient, asset_store, monkeypatch):
    async def unhealthy() -> bool:
        return False

    monkeypatch.setattr(asset_store, "health_check", unhealthy)

    response = await client.get("/api/v1/health/ready")

    assert response.status_code == 503
    assert response.json()["checks"]["storage"] is False


@pytest.mark.integration
async def test_plans_are_public(client: AsyncClient):
    response = await client.get("/api/v1/plans")

    assert response.status_code == 200
    tiers = {plan["tier"]: plan for plan in response.json()}
    assert set(tiers) == {"free", "intermediate", "premium"}
    assert tiers["free"]["daily_limit"] == 3
    assert tiers["intermediate"]["monthly_limit"] == 30
    assert tiers["premium"]["priority"] == "high"


@pytest.mark.integration
async def test_metrics_endpoint(client: AsyncClient):
    await client.get("/api/v1/health")

    response = await client.get("/metrics")

    assert response.status_code == 200
    assert "text/plain" in response.headers["content-type"]
    assert "cleancut_uploads_admitted_total" in response.text
