from dataclasses import dataclass, field
from typing import NewType

from .model import Model

# Permission is a named capability granted to a `User` or `Role`; opaque to the stores.
Permission = NewType("Permission", str)
Permissions = list[Permission]


@dataclass
class PermissionEntry(Model):
    """One row of the global permission catalog, listed in registration order."""

    name: str = field(metadata={"index": True, "unique": True})
