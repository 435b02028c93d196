from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from loguru import logger

from .adapter import StorageAdapter, require_id
from .stores import ExplorationStore
from ..context import Context
from ..errors import ValidationError
from ..models import Exploration, ExplorationID, UserID
from ..storage import Storage, StorageSession


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _check_user_id(user_id) -> UserID:
    if not isinstance(user_id, int) or isinstance(user_id, bool) or user_id <= 0:
        raise ValidationError(f"invalid user id {user_id!r}")
    return UserID(user_id)


class ExplorationAdapter(StorageAdapter, ExplorationStore):
    def __init__(self, storage: Storage, clock: Optional[Callable[[], datetime]] = None):
        super().__init__(storage)
        self._clock = clock or utcnow

    def validate(self, exploration: Exploration):
        if not isinstance(exploration, Exploration):
            raise ValidationError("expected an Exploration")
        _check_user_id(exploration.user_id)
        if not isinstance(exploration.name, str):
            raise ValidationError("exploration name must be a string")
        if not isinstance(exploration.data, str):
            raise ValidationError("exploration data must be a string")

    async def query(self, ctx: Context, user_id: UserID) -> list[Exploration]:
        user_id = _check_user_id(user_id)
        return await self.transaction(ctx, self._query, user_id)

    async def _query(self, session: StorageSession, user_id: UserID):
        explorations = await session.list(Exploration, filters={"user_id": user_id})
        return sorted(explorations, key=lambda e: (e.created_at, e.id))

    async def add(self, ctx: Context, exploration: Exploration) -> Exploration:
        self.validate(exploration)
        return await self.transaction(ctx, self._add, exploration)

    async def _add(self, session: StorageSession, exploration: Exploration):
        # id and both timestamps belong to the store; caller values are ignored
        now = self._clock()
        created = await session.create(
            Exploration(
                name=exploration.name,
                user_id=exploration.user_id,
                data=exploration.data,
                created_at=now,
                updated_at=now,
            )
        )
        logger.debug(
            f"Added exploration {created.id} for user {created.user_id}"
        )
        return created

    async def delete(self, ctx: Context, exploration: Exploration):
        id = require_id(exploration, "exploration")
        await self.transaction(ctx, self._delete, id)

    async def _delete(self, session: StorageSession, id: int):
        await self.fetch(session, Exploration, id)
        await session.delete(Exploration, filters={"id": id})
        logger.debug(f"Deleted exploration {id}")

    async def get(self, ctx: Context, id: ExplorationID) -> Exploration:
        return await self.transaction(ctx, self.fetch, Exploration, id)

    async def update(self, ctx: Context, exploration: Exploration) -> Exploration:
        id = require_id(exploration, "exploration")
        self.validate(exploration)
        return await self.transaction(ctx, self._update, id, exploration)

    async def _update(self, session: StorageSession, id: int, exploration: Exploration):
        existing = await self.fetch(session, Exploration, id)
        # updated_at must move forward even when the clock did not
        updated_at = max(self._clock(), existing.updated_at + timedelta(microseconds=1))
        updated = await session.update(
            Exploration,
            filters={"id": id},
            updates={
                "name": exploration.name,
                "data": exploration.data,
                "updated_at": updated_at,
            },
        )
        logger.debug(f"Updated exploration {id}")
        return updated
