import asyncio
import copy
from contextlib import asynccontextmanager
from typing import List, Optional, Type, TypeVar, Union

from .storage import Storage, StorageSession
from ..errors import BackendError, DuplicateError, ValidationError
from ..models import Model

T = TypeVar("T", bound=Model)


class MemoryState:
    """Tables of detached records keyed by id, plus the last id handed out per table."""

    def __init__(self):
        self.tables: dict[str, dict[int, dict]] = {}
        self.sequences: dict[str, int] = {}

    def snapshot(self) -> "MemoryState":
        state = MemoryState()
        state.tables = copy.deepcopy(self.tables)
        state.sequences = dict(self.sequences)
        return state


class MemorySession(StorageSession):
    """
    Session over a `MemoryStorage`.

    Outside `begin()` every call is applied directly (each call is atomic on the
    event loop). Inside `begin()` the session works on a private snapshot that
    replaces the shared state on commit; the storage lock serializes transactions.
    """

    def __init__(self, storage: "MemoryStorage"):
        self._storage = storage
        self._working: Optional[MemoryState] = None

    @asynccontextmanager
    async def _state(self):
        if self._working is not None:
            yield self._working
            return
        async with self._storage.lock:
            yield self._storage.state

    def _table(self, state: MemoryState, model: Type[Model]) -> dict[int, dict]:
        try:
            return state.tables[model.table_name()]
        except KeyError:
            raise BackendError(f"table not found, {model.table_name()}") from None

    @staticmethod
    def _matches(record_id: int, record: dict, filters: Optional[dict]) -> bool:
        if not filters:
            return True
        for key, value in filters.items():
            current = record_id if key == "id" else record.get(key)
            if current != value:
                return False
        return True

    def _check(self, model: Type[Model], table: dict, record: dict, record_id=None):
        schema = model.get_schema(exclude=["id"])
        for column, info in schema.items():
            value = record.get(column)
            nullable = isinstance(info["type"], list) and "NoneType" in info["type"]
            if value is None and info["type"] != "json" and not nullable:
                raise ValidationError(
                    f"missing required field, {model.table_name()}.{column}"
                )
            if not info["unique"]:
                continue
            for other_id, other in table.items():
                if other_id != record_id and other.get(column) == value:
                    raise DuplicateError(
                        f"UNIQUE constraint failed: {model.table_name()}.{column}"
                    )

    async def create(self, model: T) -> T:
        table_model = Storage.get_model_class(model)
        record = model.to_record()
        async with self._state() as state:
            table = self._table(state, table_model)
            self._check(table_model, table, record)
            name = table_model.table_name()
            # ids are never reused, even after deletes
            state.sequences[name] = state.sequences.get(name, 0) + 1
            table[state.sequences[name]] = record
            model.id = state.sequences[name]
        return model

    async def get(
        self, model: Union[T, Type[T]], filters: Optional[dict] = None
    ) -> Optional[T]:
        if not filters:
            raise ValueError("Filters must be provided for memory adapter")
        found = await self.list(model, filters=filters, limit=1)
        return found[0] if found else None

    async def list(
        self,
        model: Union[T, Type[T]],
        filters: Optional[dict] = None,
        limit: Optional[int] = None,
    ) -> list[T]:
        table_model = Storage.get_model_class(model)
        results = []
        async with self._state() as state:
            table = self._table(state, table_model)
            for record_id in sorted(table):
                if limit is not None and len(results) >= limit:
                    break
                record = table[record_id]
                if self._matches(record_id, record, filters):
                    results.append(
                        table_model.from_record(record_id, copy.deepcopy(record))
                    )
        return results

    async def update(
        self, model: Union[T, Type[T]], filters: dict, updates: dict
    ) -> Optional[T]:
        if not filters:
            raise ValueError("filters are empty")
        table_model = Storage.get_model_class(model)
        schema = table_model.get_schema(exclude=["id"])
        updates = {k: copy.deepcopy(v) for k, v in updates.items() if k in schema}
        if not updates:
            return None

        async with self._state() as state:
            table = self._table(state, table_model)
            matched = [
                record_id
                for record_id in sorted(table)
                if self._matches(record_id, table[record_id], filters)
            ]
            # validate every row before touching any so a failed call changes nothing
            for record_id in matched:
                self._check(
                    table_model, table, {**table[record_id], **updates}, record_id
                )
            for record_id in matched:
                table[record_id] = {**table[record_id], **updates}
            if not matched:
                return None
            first = matched[0]
            return table_model.from_record(first, copy.deepcopy(table[first]))

    async def delete(self, model: Union[T, Type[T]], filters: dict) -> int:
        if not filters:
            raise ValueError("filters are empty")
        table_model = Storage.get_model_class(model)
        async with self._state() as state:
            table = self._table(state, table_model)
            matched = [
                record_id
                for record_id, record in table.items()
                if self._matches(record_id, record, filters)
            ]
            for record_id in matched:
                del table[record_id]
        return len(matched)

    async def init_schema(self, model: Type[Model]):
        async with self._state() as state:
            state.tables.setdefault(model.table_name(), {})

    async def init_index(self, table: str, indexes: List[str]):
        # lookups scan the table; nothing to build
        pass

    async def begin(self):
        await self._storage.lock.acquire()
        self._working = self._storage.state.snapshot()

    async def commit(self):
        if self._working is None:
            return
        self._storage.state = self._working
        self._release()

    async def rollback(self):
        if self._working is None:
            return
        self._release()

    def _release(self):
        self._working = None
        self._storage.lock.release()

    async def connect(self) -> "MemorySession":
        return self

    async def close(self):
        # a transaction left open is discarded
        await self.rollback()


class MemoryStorage(Storage):
    """Process local storage; records are exchanged by copy, never shared."""

    session_class: Type[MemorySession] = MemorySession

    def __init__(self):
        self.state = MemoryState()
        self.lock = asyncio.Lock()

    @asynccontextmanager
    async def session(self):
        session = self.session_class(self)
        await session.connect()
        try:
            yield session
        finally:
            await session.close()
