from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..context import Context
from ..models import (
    Dashboard,
    Exploration,
    ExplorationID,
    Permission,
    Permissions,
    Role,
    User,
    UserID,
)


class PermissionCatalog(ABC):
    """Global list of every permission the auth store supports."""

    @abstractmethod
    async def all(self, ctx: Context) -> Permissions:
        """Every registered permission, in registration order."""

    @abstractmethod
    async def add(self, ctx: Context, permission: Permission) -> Permission:
        """Register a new permission; duplicates are rejected."""


class UserStore(ABC):
    @abstractmethod
    async def add(self, ctx: Context, user: User) -> User:
        """Create a new user; the returned copy carries the assigned id."""

    @abstractmethod
    async def delete(self, ctx: Context, user: User):
        """Delete the user and its role links."""

    @abstractmethod
    async def get(self, ctx: Context, id: int) -> User:
        """Retrieve a user, with its roles, if `id` exists."""

    @abstractmethod
    async def update(self, ctx: Context, user: User) -> User:
        """Replace the user's name, permissions and roles."""


class RoleStore(ABC):
    @abstractmethod
    async def add(self, ctx: Context, role: Role) -> Role:
        """Create a new role to encapsulate a set of permissions."""

    @abstractmethod
    async def delete(self, ctx: Context, role: Role):
        """Delete the role and its user links."""

    @abstractmethod
    async def get(self, ctx: Context, id: int) -> Role:
        """Retrieve the role and the associated users if `id` exists."""

    @abstractmethod
    async def update(self, ctx: Context, role: Role) -> Role:
        """Replace the role's name, permissions and users."""


@dataclass
class AuthStore:
    """Storage and retrieval of authentication information; each part is pluggable on its own."""

    permissions: PermissionCatalog
    users: UserStore
    roles: RoleStore


class ExplorationStore(ABC):
    """Front-end serializations of data explorer sessions."""

    @abstractmethod
    async def query(self, ctx: Context, user_id: UserID) -> list[Exploration]:
        """All explorations owned by `user_id`, oldest first."""

    @abstractmethod
    async def add(self, ctx: Context, exploration: Exploration) -> Exploration:
        """Create a new exploration; id and timestamps are set by the store."""

    @abstractmethod
    async def delete(self, ctx: Context, exploration: Exploration):
        pass

    @abstractmethod
    async def get(self, ctx: Context, id: ExplorationID) -> Exploration:
        pass

    @abstractmethod
    async def update(self, ctx: Context, exploration: Exploration) -> Exploration:
        """Replace name and data; refreshes `updated_at`."""


class DashboardStore(ABC):
    """Dashboards and their cells."""

    @abstractmethod
    async def add(self, ctx: Context, dashboard: Dashboard) -> Dashboard:
        pass

    @abstractmethod
    async def delete(self, ctx: Context, dashboard: Dashboard):
        pass

    @abstractmethod
    async def get(self, ctx: Context, id: int) -> Dashboard:
        pass

    @abstractmethod
    async def update(self, ctx: Context, dashboard: Dashboard) -> Dashboard:
        """Replace the dashboard's cells wholesale."""
