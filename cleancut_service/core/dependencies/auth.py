"""Caller identity dependency.

Authentication happens upstream; the identity collaborator forwards the
authenticated account id in the ``X-Account-ID`` header and this service
trusts it as given.
"""

from __future__ import annotations

import logging
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header

from cleancut_service.core.exceptions import UnauthorizedException

logger = logging.getLogger(__name__)

ACCOUNT_HEADER = "X-Account-ID"


async def get_account_id(
    x_account_id: Annotated[str | None, Header(alias=ACCOUNT_HEADER)] = None,
) -> UUID:
    """Resolve the calling account.

    Raises:
        UnauthorizedException: If the header is missing or not a UUID
    """
    if not x_account_id:
        raise UnauthorizedException(
            detail="Missing account identity",
            type="missing-account-id",
        )
    try:
        return UUID(x_account_id)
    except ValueError:
        logger.warning("Malformed account identity header", extra={"value": x_account_id[:64]})
        raise UnauthorizedException(
            detail="Invalid account identity",
            type="invalid-account-id",
        ) from None


AccountIdDep = Annotated[UUID, Depends(get_account_id)]
