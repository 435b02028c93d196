import asyncio
from typing import Optional

from loguru import logger

from .config import StoreConfig
from .context import Context
from .models import Dashboard, Exploration, PermissionEntry, Role, User, UserRole
from .storage import MemoryStorage, SQLite, Storage
from .stores import (
    AuthStore,
    DashboardAdapter,
    DashboardStore,
    ExplorationAdapter,
    ExplorationStore,
    storage_auth_store,
)

_UNSET = object()


class Vizstore:
    """The auth, exploration and dashboard stores over one shared storage."""

    models = [PermissionEntry, User, Role, UserRole, Exploration, Dashboard]

    def __init__(self, storage: Storage, timeout: Optional[float] = None):
        self._storage = storage
        self._timeout = timeout
        self.auth: AuthStore = storage_auth_store(storage)
        self.explorations: ExplorationStore = ExplorationAdapter(storage)
        self.dashboards: DashboardStore = DashboardAdapter(storage)

    @classmethod
    def from_config(cls, config: Optional[StoreConfig] = None) -> "Vizstore":
        config = config or StoreConfig()
        if config.backend == "memory":
            storage = MemoryStorage()
        else:
            storage = SQLite(config.sqlite_path)
        logger.info(f"Using {config.backend} storage")
        return cls(storage, timeout=config.timeout)

    @property
    def storage(self) -> Storage:
        return self._storage

    def context(self, timeout=_UNSET) -> Context:
        """New request context, carrying the configured timeout unless one is given."""
        return Context(self._timeout if timeout is _UNSET else timeout)

    async def init_schema(self):
        async with self._storage.session() as session:
            async with asyncio.TaskGroup() as group:
                for model in self.models:
                    group.create_task(session.init_schema(model))
        logger.debug(f"Initialized {len(self.models)} tables")
