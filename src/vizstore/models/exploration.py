from dataclasses import dataclass, field
from datetime import datetime
from typing import NewType, Optional

from .model import Model

# UserID is the id of the user owning an exploration.
UserID = NewType("UserID", int)
# ExplorationID is the id of an exploration.
ExplorationID = NewType("ExplorationID", int)


@dataclass
class Exploration(Model):
    """Saved data explorer session; `data` is an opaque blob owned by the front-end."""

    name: str
    user_id: UserID = field(metadata={"index": True})
    data: str = ""
    # both set by the store, always timezone aware
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
