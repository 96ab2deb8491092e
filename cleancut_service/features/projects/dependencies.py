"""Project service dependencies."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from cleancut_service.core.dependencies import AssetStoreDep

from .service import ProjectService


def get_project_service(asset_store: AssetStoreDep) -> ProjectService:
    return ProjectService(asset_store=asset_store)


ProjectServiceDep = Annotated[ProjectService, Depends(get_project_service)]
