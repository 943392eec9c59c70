"""Persistence collaborator interface for spot geometry."""

import logging
from abc import ABC, abstractmethod
from typing import Any

from ..state.models import SpotScope

logger = logging.getLogger(__name__)


class SpotStore(ABC):
    """
    Table-style store holding one row per spot, keyed by (area, camera).

    Implementations raise StoreError for every failure.
    """

    @abstractmethod
    async def fetch(self, scope: SpotScope) -> list[dict[str, Any]]:
        """Return all rows for a scope."""

    @abstractmethod
    async def delete_where(self, scope: SpotScope) -> None:
        """Delete all rows for a scope."""

    @abstractmethod
    async def insert_many(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Insert rows and return them as stored."""

    async def replace_all(
        self,
        scope: SpotScope,
        rows: list[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        """
        Replace every row of a scope with the given rows.

        This default runs delete then insert as two separate calls and is
        NOT atomic: if the insert fails the scope is left empty until the
        next successful save. Stores that support transactions should
        override it.
        """
        await self.delete_where(scope)
        logger.debug(
            f"Deleted spots for area {scope.area_id}, camera {scope.camera_id}"
        )

        if not rows:
            return []

        return await self.insert_many(rows)

    async def close(self) -> None:
        """Release any underlying connection."""
