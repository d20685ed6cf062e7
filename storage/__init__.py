from .container import StorageContainer
from .contracts import EntryRepo
from .errors import StorageError
from .models import EntryRow

__all__ = [
    "StorageContainer",
    "EntryRepo",
    "EntryRow",
    "StorageError",
]
