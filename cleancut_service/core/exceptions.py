"""Custom exception classes for the application."""

from __future__ import annotations

from typing import Any


class AppException(Exception):
    """Base application exception.

    All custom exceptions should inherit from this class.
    Follows RFC 7807 Problem Details for HTTP APIs.

    Attributes:
        status_code: HTTP status code for the error.
        detail: Human-readable error message.
        type: Error type identifier (used in RFC 7807 problem details).
        title: Short, human-readable summary of the problem type.
        instance: URI reference that identifies the specific occurrence of the problem.
        extra: Additional context-specific information about the error.

    Example:
            raise AppException(
            status_code=404,
            detail="Resource not found",
            type="resource-not-found",
            title="Resource Not Found",
            instance="/api/v1/projects/abc123",
            extra={"resource_id": "abc123", "resource_type": "project"}
        )
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        type: str = "about:blank",
        title: str | None = None,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize application exception.

        Args:
            status_code: HTTP status code.
            detail: Human-readable error message.
            type: Error type identifier.
            title: Short summary of the problem type.
            instance: URI reference identifying this specific occurrence.
            extra: Additional context about the error.
        """
        self.status_code = status_code
        self.detail = detail
        self.type = type
        self.title = title or self._default_title(status_code)
        self.instance = instance
        self.extra = extra or {}
        super().__init__(detail)

    @staticmethod
    def _default_title(status_code: int) -> str:
        """Get default title for HTTP status code.

        Args:
            status_code: HTTP status code.

        Returns:
            Human-readable title for the status code.
        """
        titles = {
            400: "Bad Request",
            401: "Unauthorized",
            403: "Forbidden",
            404: "Not Found",
            409: "Conflict",
            422: "Unprocessable Entity",
            429: "Too Many Requests",
            500: "Internal Server Error",
            503: "Service Unavailable",
        }
        return titles.get(status_code, "Error")


class NotFoundException(AppException):
    """Exception raised when a resource is not found.

    Also used when a resource exists but belongs to another account, so the
    caller cannot tell the two cases apart.

    Example:
            raise NotFoundException(
            detail="Project not found",
            type="project-not-found",
        )
    """

    def __init__(
        self,
        detail: str,
        type: str = "not-found",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=404,
            detail=detail,
            type=type,
            title="Not Found",
            instance=instance,
            extra=extra,
        )


class ValidationException(AppException):
    """Exception raised for validation errors.

    Example:
            raise ValidationException(
            detail="Progress must be between 0 and 100",
            type="validation-error",
            extra={"field": "progress", "value": 140}
        )
    """

    def __init__(
        self,
        detail: str,
        type: str = "validation-error",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=422,
            detail=detail,
            type=type,
            title="Validation Error",
            instance=instance,
            extra=extra,
        )


class BadRequestException(AppException):
    """Exception raised for malformed requests.

    Example:
            raise BadRequestException(
            detail="No file uploaded",
            type="missing-file",
        )
    """

    def __init__(
        self,
        detail: str,
        type: str = "bad-request",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=400,
            detail=detail,
            type=type,
            title="Bad Request",
            instance=instance,
            extra=extra,
        )


class UnauthorizedException(AppException):
    """Exception raised for authentication failures.

    Example:
            raise UnauthorizedException(
            detail="Invalid worker credentials",
            type="invalid-worker-key",
        )
    """

    def __init__(
        self,
        detail: str,
        type: str = "unauthorized",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=401,
            detail=detail,
            type=type,
            title="Unauthorized",
            instance=instance,
            extra=extra,
        )


class ForbiddenException(AppException):
    """Exception raised for authorization failures."""

    def __init__(
        self,
        detail: str,
        type: str = "forbidden",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=403,
            detail=detail,
            type=type,
            title="Forbidden",
            instance=instance,
            extra=extra,
        )


class QuotaExceededException(ForbiddenException):
    """Raised when an account's plan does not permit another upload.

    The ``reason`` is a stable machine-readable code (``daily-limit``,
    ``monthly-limit``, ``plan-expired``, ``invalid-plan``) carried in ``extra``.

    Example:
        raise QuotaExceededException(
            detail="Daily upload limit reached (3 uploads per day). Upgrade to continue.",
            reason="daily-limit",
        )
    """

    def __init__(
        self,
        detail: str,
        reason: str,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.reason = reason
        super().__init__(
            detail=detail,
            type="quota-exceeded",
            instance=instance,
            extra={"reason": reason, **(extra or {})},
        )


class ConflictException(AppException):
    """Exception raised for resource conflicts."""

    def __init__(
        self,
        detail: str,
        type: str = "conflict",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=409,
            detail=detail,
            type=type,
            title="Conflict",
            instance=instance,
            extra=extra,
        )


class InvalidTransitionException(ConflictException):
    """Raised when a project state change is not permitted from its current state.

    Example:
            raise InvalidTransitionException(
            current="completed",
            target="cancelled",
        )
    """

    def __init__(
        self,
        current: str,
        target: str,
        detail: str | None = None,
        instance: str | None = None,
    ) -> None:
        self.current = current
        self.target = target
        super().__init__(
            detail=detail or f"Cannot move project from '{current}' to '{target}'",
            type="invalid-transition",
            instance=instance,
            extra={"current_status": current, "target_status": target},
        )


class ServiceUnavailableException(AppException):
    """Exception raised when a backing service (storage, database) is unavailable."""

    def __init__(
        self,
        detail: str,
        type: str = "service-unavailable",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=503,
            detail=detail,
            type=type,
            title="Service Unavailable",
            instance=instance,
            extra=extra,
        )


class InternalServerException(AppException):
    """Exception raised for internal server errors.

    The detail should never carry the text of the underlying exception.
    """

    def __init__(
        self,
        detail: str = "An internal error occurred",
        type: str = "internal-error",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=500,
            detail=detail,
            type=type,
            title="Internal Server Error",
            instance=instance,
            extra=extra,
        )


__all__ = [
    "AppException",
    "BadRequestException",
    "ConflictException",
    "ForbiddenException",
    "InternalServerException",
    "InvalidTransitionException",
    "NotFoundException",
    "QuotaExceededException",
    "ServiceUnavailableException",
    "UnauthorizedException",
    "ValidationException",
]
