from dataclasses import dataclass, field
from typing import ClassVar, List

from .model import Model
from .permission import Permission, Permissions
from .role import Role


@dataclass
class User(Model):
    """
    An authenticated user.

    `roles` is a view filled in on read from the user/role links. Its entries
    carry no users of their own.
    """

    schema_exclude: ClassVar[list[str]] = ["roles"]

    name: str = field(metadata={"index": True, "unique": True})
    permissions: List[Permission] = field(default_factory=list)
    roles: List[Role] = field(default_factory=list)

    def effective_permissions(self) -> Permissions:
        """Direct permissions followed by every role's, first occurrence wins."""
        seen = set()
        effective = []
        for permission in [
            *self.permissions,
            *(p for role in self.roles for p in role.permissions),
        ]:
            if permission not in seen:
                seen.add(permission)
                effective.append(permission)
        return effective
