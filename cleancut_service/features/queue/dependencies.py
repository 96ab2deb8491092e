"""Worker authentication and queue service dependencies."""

from __future__ import annotations

import hmac
import logging
from typing import Annotated

from fastapi import Depends, Header

from cleancut_service.core.exceptions import UnauthorizedException
from cleancut_service.core.settings import get_job_settings
from cleancut_service.features.projects.lifecycle import ProjectLifecycle

from .service import QueueService

logger = logging.getLogger(__name__)


async def require_worker(
    x_worker_key: Annotated[str | None, Header(alias="X-Worker-Key")] = None,
) -> None:
    """Only the processing worker may drive the queue.

    Raises:
        UnauthorizedException: If the worker key is missing or wrong
    """
    expected = get_job_settings().worker_api_key.get_secret_value()
    if not x_worker_key or not hmac.compare_digest(x_worker_key.encode(), expected.encode()):
        logger.warning("Rejected worker request with invalid key")
        raise UnauthorizedException(detail="Invalid worker credentials", type="invalid-worker-key")


async def callback_token(
    x_callback_token: Annotated[str | None, Header(alias="X-Callback-Token")] = None,
) -> str:
    if not x_callback_token:
        raise UnauthorizedException(
            detail="Missing callback token",
            type="invalid-callback-token",
        )
    return x_callback_token


def get_queue_service() -> QueueService:
    return QueueService(ProjectLifecycle())


QueueServiceDep = Annotated[QueueService, Depends(get_queue_service)]
CallbackTokenDep = Annotated[str, Depends(callback_token)]
