from dataclasses import dataclass, field
from typing import ClassVar, List

from .model import Model
from .permission import Permission


@dataclass
class Role(Model):
    """
    Set of permissions that may be associated with users.

    `users` is a view filled in on read from the user/role links. Its entries
    carry no roles of their own.
    """

    schema_exclude: ClassVar[list[str]] = ["users"]

    name: str = field(metadata={"index": True, "unique": True})
    permissions: List[Permission] = field(default_factory=list)
    users: list = field(default_factory=list)
