"""RFC 7807 Problem Details schema for error responses."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ProblemDetails(BaseModel):
    """RFC 7807 Problem Details for HTTP APIs.

    See: https://datatracker.ietf.org/doc/html/rfc7807

    Example:
        return JSONResponse(
            status_code=403,
            content=ProblemDetails(
                type="quota-exceeded",
                title="Forbidden",
                status=403,
                detail="Daily upload limit reached (3 uploads per day). Upgrade to continue.",
                instance="/api/v1/projects",
            ).model_dump(exclude_none=True),
            media_type="application/problem+json",
        )
    """

    type: str = Field(
        default="about:blank",
        min_length=1,
        max_length=200,
        description="Stable problem type code",
    )
    title: str = Field(min_length=1, max_length=200, description="Short summary of the problem")
    status: int = Field(ge=100, le=599, description="HTTP status code")
    detail: str | None = Field(
        default=None,
        max_length=2000,
        description="Human-readable explanation specific to this occurrence",
    )
    instance: str | None = Field(
        default=None,
        max_length=500,
        description="Request path of the specific occurrence",
    )

    model_config = ConfigDict(
        extra="allow",
        json_schema_extra={
            "example": {
                "type": "quota-exceeded",
                "title": "Forbidden",
                "status": 403,
                "detail": "Daily upload limit reached (3 uploads per day). Upgrade to continue.",
                "instance": "/api/v1/projects",
                "reason": "daily-limit",
            }
        },
    )


class ValidationProblemDetails(ProblemDetails):
    """Problem Details carrying per-field validation errors."""

    errors: list[dict[str, Any]] = Field(default_factory=list, description="Field errors")
