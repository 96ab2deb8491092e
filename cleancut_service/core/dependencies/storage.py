"""Asset store dependency.

Routes take the store through ``AssetStoreDep`` so tests can swap in a store
rooted at a temporary directory via ``app.dependency_overrides``.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from cleancut_service.infra.storage import AssetStore, get_asset_store

AssetStoreDep = Annotated[AssetStore, Depends(get_asset_store)]
