from loguru import logger

from .adapter import StorageAdapter, require_id
from .stores import DashboardStore
from ..context import Context
from ..errors import ValidationError
from ..models import Cell, Dashboard
from ..storage import StorageSession

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


def validate_cells(cells) -> list[Cell]:
    if not isinstance(cells, list):
        raise ValidationError("cells must be a list")
    for index, cell in enumerate(cells):
        if not isinstance(cell, Cell):
            raise ValidationError(f"cell {index} is not a Cell")
        for name in ("x", "y", "w", "h"):
            value = getattr(cell, name)
            if (
                not isinstance(value, int)
                or isinstance(value, bool)
                or not INT32_MIN <= value <= INT32_MAX
            ):
                raise ValidationError(f"cell {index}: {name} must be a 32-bit integer")
        if not isinstance(cell.queries, list) or not all(
            isinstance(q, str) for q in cell.queries
        ):
            raise ValidationError(f"cell {index}: queries must be a list of strings")
    return cells


class DashboardAdapter(StorageAdapter, DashboardStore):
    async def add(self, ctx: Context, dashboard: Dashboard) -> Dashboard:
        cells = validate_cells(dashboard.cells)
        return await self.transaction(ctx, self._add, cells)

    async def _add(self, session: StorageSession, cells: list[Cell]):
        created = await session.create(Dashboard(cells=cells))
        logger.debug(f"Added dashboard {created.id} with {len(cells)} cells")
        # hand back a detached copy
        return await self.fetch(session, Dashboard, created.id)

    async def delete(self, ctx: Context, dashboard: Dashboard):
        id = require_id(dashboard, "dashboard")
        await self.transaction(ctx, self._delete, id)

    async def _delete(self, session: StorageSession, id: int):
        await self.fetch(session, Dashboard, id)
        await session.delete(Dashboard, filters={"id": id})
        logger.debug(f"Deleted dashboard {id}")

    async def get(self, ctx: Context, id: int) -> Dashboard:
        return await self.transaction(ctx, self.fetch, Dashboard, id)

    async def update(self, ctx: Context, dashboard: Dashboard) -> Dashboard:
        id = require_id(dashboard, "dashboard")
        cells = validate_cells(dashboard.cells)
        return await self.transaction(ctx, self._update, id, cells)

    async def _update(self, session: StorageSession, id: int, cells: list[Cell]):
        await self.fetch(session, Dashboard, id)
        updated = await session.update(
            Dashboard, filters={"id": id}, updates={"cells": cells}
        )
        logger.debug(f"Updated dashboard {id}: {len(cells)} cells")
        return updated
