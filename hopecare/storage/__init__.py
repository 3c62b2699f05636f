# Storage backends

from hopecare.storage.base import StorageBackend
from hopecare.storage.factory import FallbackDueToError, ProviderSelection, Selected, select_storage_backend
from hopecare.storage.results import DeleteResult, ListResult, UrlResult

# Bound once per process; restart to switch providers
selection: ProviderSelection = select_storage_backend()
storage: StorageBackend = selection.backend


def get_storage() -> StorageBackend:
    """FastAPI dependency returning the process-wide storage backend."""
    return storage


def get_selection() -> ProviderSelection:
    return selection


__all__ = [
    "storage",
    "selection",
    "get_storage",
    "get_selection",
    "StorageBackend",
    "ProviderSelection",
    "Selected",
    "FallbackDueToError",
    "select_storage_backend",
    "UrlResult",
    "DeleteResult",
    "ListResult",
]
