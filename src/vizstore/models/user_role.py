from dataclasses import dataclass, field

from .model import Model


@dataclass
class UserRole(Model):
    """Link row between a user and a role; the only stored form of that relationship."""

    user_id: int = field(metadata={"index": True})
    role_id: int = field(metadata={"index": True})
