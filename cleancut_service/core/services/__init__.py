"""Service layer base classes."""

from cleancut_service.core.services.base import BaseService

__all__ = ["BaseService"]
