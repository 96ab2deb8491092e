"""Modular Pydantic Settings v2 configuration.

Settings are split by domain (app/db/logging/storage/jobs/plans), each with its
own environment prefix, and read through LRU-cached loaders:

    from cleancut_service.core.settings import get_job_settings

    retention = get_job_settings().retention

Configuration precedence (highest to lowest):
    1. init kwargs (testing/overrides)
    2. Environment variables (production)
    3. .env file (development only)
"""

from __future__ import annotations

from .app import AppSettings
from .database import DatabaseSettings
from .jobs import JobSettings
from .loader import (
    clear_all_caches,
    get_app_settings,
    get_db_settings,
    get_job_settings,
    get_logging_settings,
    get_plan_settings,
    get_storage_settings,
)
from .logs import LoggingSettings
from .plans import PlanSettings
from .storage import StorageSettings

__all__ = [
    "AppSettings",
    "DatabaseSettings",
    "JobSettings",
    "LoggingSettings",
    "PlanSettings",
    "StorageSettings",
    "clear_all_caches",
    "get_app_settings",
    "get_db_settings",
    "get_job_settings",
    "get_logging_settings",
    "get_plan_settings",
    "get_storage_settings",
]
