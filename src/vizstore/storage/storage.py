import asyncio
from abc import ABC, abstractmethod
from typing import TypeVar
from contextlib import asynccontextmanager, AbstractAsyncContextManager
from typing import AsyncGenerator, Any, List, Union, Type, Optional
from ..models import Model

T = TypeVar("T", bound=Model)


class StorageSession(ABC):
    """
    One connection to a backend. Every backend used by the stores implements
    this contract; writes outside `begin()` are committed immediately.
    """

    @abstractmethod
    async def create(self, model: T) -> T: ...
    @abstractmethod
    async def get(
        self, model: Union[T, Type[T]], filters: Optional[dict] = None
    ) -> Optional[T]: ...
    @abstractmethod
    async def list(
        self,
        model: Union[T, Type[T]],
        filters: Optional[dict] = None,
        limit: Optional[int] = None,
    ) -> list[T]: ...
    @abstractmethod
    async def update(
        self, model: Union[T, Type[T]], filters: dict, updates: dict
    ) -> Optional[T]: ...
    @abstractmethod
    async def delete(self, model: Union[T, Type[T]], filters: dict) -> int: ...

    @abstractmethod
    async def begin(self): ...
    @abstractmethod
    async def commit(self): ...
    @abstractmethod
    async def rollback(self): ...
    @abstractmethod
    async def connect(self) -> "StorageSession": ...
    @abstractmethod
    async def close(self): ...
    @abstractmethod
    async def init_schema(self, schema: Type[Model]): ...
    @abstractmethod
    async def init_index(self, table: str, indexes: List[str]): ...


# sessions are independent connections; `async with storage.session()` opens and closes one
class Storage(ABC):
    # not using asynccontextmanager here so the abstract method type hints properly
    @abstractmethod
    def session(self) -> AbstractAsyncContextManager[StorageSession]:
        pass

    @asynccontextmanager
    async def begin(self) -> AsyncGenerator[StorageSession, Any]:
        """Session inside a transaction: committed on success, rolled back on any error or cancellation."""
        async with self.session() as session:
            await session.begin()
            try:
                yield session
            except BaseException:
                await session.rollback()
                raise
            try:
                await self._commit(session)
            except Exception:
                await session.rollback()
                raise

    @staticmethod
    async def _commit(session: StorageSession):
        # a commit already handed to the backend can't be taken back, so the call completes
        commit = asyncio.ensure_future(session.commit())
        try:
            await asyncio.shield(commit)
        except asyncio.CancelledError:
            await commit
            asyncio.current_task().uncancel()

    @staticmethod
    def get_model_class(model: object) -> Type[Model]:
        # Model instance (Model()) is provided
        if isinstance(model, Model):
            return model.__class__
        # Model class is given
        elif isinstance(model, type) and issubclass(model, Model):
            return model

        raise TypeError("Invalid model type")
