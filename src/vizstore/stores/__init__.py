from .stores import (
    AuthStore,
    DashboardStore,
    ExplorationStore,
    PermissionCatalog,
    RoleStore,
    UserStore,
)
from .adapter import StorageAdapter
from .auth import PermissionCatalogAdapter, RoleAdapter, UserAdapter, storage_auth_store
from .exploration import ExplorationAdapter
from .dashboard import DashboardAdapter

__all__ = [
    "AuthStore",
    "DashboardStore",
    "ExplorationStore",
    "PermissionCatalog",
    "RoleStore",
    "UserStore",
    "StorageAdapter",
    "PermissionCatalogAdapter",
    "RoleAdapter",
    "UserAdapter",
    "storage_auth_store",
    "ExplorationAdapter",
    "DashboardAdapter",
]
