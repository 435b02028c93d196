from .context import Context
from .config import StoreConfig
from .errors import (
    ErrorKind,
    StoreError,
    ValidationError,
    DuplicateError,
    NotFoundError,
    BackendError,
    Cancelled,
)
from .models import (
    Permission,
    Permissions,
    User,
    Role,
    UserID,
    ExplorationID,
    Exploration,
    Cell,
    Dashboard,
)
from .storage import Storage, StorageSession, SQLite, MemoryStorage
from .stores import (
    AuthStore,
    PermissionCatalog,
    UserStore,
    RoleStore,
    ExplorationStore,
    DashboardStore,
)
from .vizstore import Vizstore

__all__ = [
    "Context",
    "StoreConfig",
    "ErrorKind",
    "StoreError",
    "ValidationError",
    "DuplicateError",
    "NotFoundError",
    "BackendError",
    "Cancelled",
    "Permission",
    "Permissions",
    "User",
    "Role",
    "UserID",
    "ExplorationID",
    "Exploration",
    "Cell",
    "Dashboard",
    "Storage",
    "StorageSession",
    "SQLite",
    "MemoryStorage",
    "AuthStore",
    "PermissionCatalog",
    "UserStore",
    "RoleStore",
    "ExplorationStore",
    "DashboardStore",
    "Vizstore",
]
