from enum import Enum
from typing import ClassVar


class ErrorKind(str, Enum):
    """
    Every store failure falls in one of these kinds. Callers branch on the kind
    (or the matching exception class), never on the message.
    """

    VALIDATION = "validation"
    DUPLICATE = "duplicate"
    NOT_FOUND = "not_found"
    CANCELLED = "cancelled"
    BACKEND = "backend"


class StoreError(Exception):
    kind: ClassVar[ErrorKind] = ErrorKind.BACKEND
    prefix: ClassVar[str] = "Store error"

    def __init__(self, msg: str = None, *args):
        message = f"{self.prefix}: {msg}" if msg else self.prefix
        super().__init__(message, *args)


class ValidationError(StoreError):
    kind = ErrorKind.VALIDATION
    prefix = "Invalid input"


class DuplicateError(StoreError):
    kind = ErrorKind.DUPLICATE
    prefix = "Duplicate entry"


class NotFoundError(StoreError):
    kind = ErrorKind.NOT_FOUND
    prefix = "Not found"


class BackendError(StoreError):
    kind = ErrorKind.BACKEND
    prefix = "Backend error"


# a plain error, so TaskGroups and gather report it like any other failure
class Cancelled(StoreError):
    kind = ErrorKind.CANCELLED
    prefix = "Operation cancelled"
