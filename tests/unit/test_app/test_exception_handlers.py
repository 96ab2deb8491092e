"""Tests for application exception handlers."""

from __future__ import annotations

import json

from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel
import pytest
from starlette.requests import Request

from cleancut_service.app.exception_handlers import (
    PROBLEM_JSON,
    app_exception_handler,
    configure_exception_handlers,
    generic_exception_handler,
)
from cleancut_service.core.exceptions import (
    AppException,
    InternalServerException,
    QuotaExceededException,
)


def _build_request(path: str = "/test") -> Request:
    """Create a minimal ASGI request for handler tests."""
    scope = {
        "type": "http",
        "method": "GET",
        "path": path,
        "headers": [],
        "query_string": b"",
        "client": ("test", 1234),
        "server": ("test", 80),
    }
    return Request(scope, lambda: None)


@pytest.mark.asyncio
async def test_app_exception_handler_renders_problem_details() -> None:
    exc = QuotaExceededException(detail="Daily limit reached", reason="daily-limit")

    response = await app_exception_handler(_build_request("/api/v1/projects"), exc)

    assert response.status_code == 403
    assert response.media_type == PROBLEM_JSON
    body = json.loads(response.body)
    assert body == {
        "type": "quota-exceeded",
        "title": "Forbidden",
        "status": 403,
        "detail": "Daily limit reached",
        "instance": "/api/v1/projects",
        "reason": "daily-limit",
    }


@pytest.mark.asyncio
async def test_app_exception_handler_keeps_explicit_instance() -> None:
    exc = AppException(status_code=400, detail="bad", instance="/custom")

    response = await app_exception_handler(_build_request(), exc)

    assert json.loads(response.body)["instance"] == "/custom"


@pytest.mark.asyncio
async def test_generic_handler_hides_exception_text() -> None:
    response = await generic_exception_handler(
        _build_request(), RuntimeError("password=hunter2")
    )

    assert response.status_code == 500
    body = json.loads(response.body)
    assert body["type"] == "internal-error"
    assert body["title"] == "Internal Server Error"
    assert body["instance"] == "/test"
    assert "hunter2" not in response.body.decode()


class _Payload(BaseModel):
    progress: int


def _app() -> FastAPI:
    app = FastAPI()
    configure_exception_handlers(app)

    @app.post("/echo")
    async def echo(payload: _Payload) -> dict:
        return payload.model_dump()

    @app.get("/boom")
    async def boom() -> None:
        raise InternalServerException()

    return app


def test_validation_errors_are_field_level() -> None:
    client = TestClient(_app())

    response = client.post("/echo", json={"progress": "lots"})

    assert response.status_code == 422
    assert response.headers["content-type"] == PROBLEM_JSON
    body = response.json()
    assert body["type"] == "validation-error"
    assert body["errors"][0]["field"] == "body.progress"
    assert body["errors"][0]["value"] == "lots"


def test_internal_exception_maps_to_500() -> None:
    client = TestClient(_app())

    response = client.get("/boom")

    assert response.status_code == 500
    assert response.json()["detail"] == "An internal error occurred"
