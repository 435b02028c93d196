from typing import Any, Awaitable, Callable

from loguru import logger

from ..context import Context
from ..errors import Cancelled, NotFoundError, ValidationError
from ..storage import Storage, StorageSession


def require_id(entity: Any, kind: str) -> int:
    id = getattr(entity, "id", None)
    if not isinstance(id, int) or isinstance(id, bool):
        raise ValidationError(f"{kind} id is required")
    return id


class StorageAdapter:
    """Base of the store implementations: every operation is one transaction on `storage`."""

    def __init__(self, storage: Storage):
        self._storage = storage

    async def transaction(
        self,
        ctx: Context,
        operation: Callable[..., Awaitable[Any]],
        *args,
    ):
        async def run():
            async with self._storage.begin() as session:
                return await operation(session, *args)

        try:
            return await ctx.run(run())
        except Cancelled as e:
            logger.info(f"{type(self).__name__}.{operation.__name__.lstrip('_')}: {e}")
            raise

    async def fetch(self, session: StorageSession, model, id: int):
        found = await session.get(model, filters={"id": id})
        if found is None:
            logger.warning(f"{model.__name__} {id} not found")
            raise NotFoundError(f"{model.__name__.lower()} {id}")
        return found
