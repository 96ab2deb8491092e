"""Base service class for business logic."""

from __future__ import annotations

import logging

from cleancut_service.infra.logging import get_lazy_logger


class BaseService:
    """Base class for all service classes.

    Loggers:
        - self.logger: Standard logger for INFO/WARNING/ERROR (always evaluated)
        - self._lazy: Lazy logger for DEBUG (zero overhead when DEBUG disabled)

    Example:
        class SweeperService(BaseService):
            async def sweep_expired(self, session: AsyncSession) -> SweepSummary:
                self.logger.info("Sweep started")
                self._lazy.debug(lambda: f"Batch: {describe(batch)}")
    """

    def __init__(self) -> None:
        class_name = self.__class__.__name__
        self.logger = logging.getLogger(class_name)
        self._lazy = get_lazy_logger(class_name)
