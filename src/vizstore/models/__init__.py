from .model import Model, MissingDefault
from .permission import Permission, Permissions, PermissionEntry
from .role import Role
from .user import User
from .user_role import UserRole
from .exploration import Exploration, ExplorationID, UserID
from .dashboard import Cell, Dashboard

__all__ = [
    "Model",
    "MissingDefault",
    "Permission",
    "Permissions",
    "PermissionEntry",
    "Role",
    "User",
    "UserRole",
    "Exploration",
    "ExplorationID",
    "UserID",
    "Cell",
    "Dashboard",
]
