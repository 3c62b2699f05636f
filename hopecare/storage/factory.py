"""Select the storage backend for this process."""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from hopecare.config import use_supabase_storage
from hopecare.core.errors import handle_config_error
from hopecare.storage.base import StorageBackend
from hopecare.storage.firebase_storage import FirebaseStorage
from hopecare.storage.supabase_storage import SupabaseStorage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Selected:
    """The configured backend was built."""

    backend: StorageBackend

    @property
    def fell_back(self) -> bool:
        return False


@dataclass(frozen=True)
class FallbackDueToError:
    """Selection failed; the default Firebase backend was built instead."""

    backend: StorageBackend
    reason: BaseException

    @property
    def fell_back(self) -> bool:
        return True


ProviderSelection = Selected | FallbackDueToError


def select_storage_backend(
    read_flag: Callable[[], bool] = use_supabase_storage,
    firebase_factory: Callable[[], StorageBackend] = FirebaseStorage,
    supabase_factory: Callable[[], StorageBackend] = SupabaseStorage,
) -> ProviderSelection:
    """
    Build the storage backend named by USE_SUPABASE_STORAGE.
    Supabase when the flag is true, Firebase when false or unset. Any error while
    reading the flag or building Supabase falls back to Firebase; never raises.
    """
    try:
        if read_flag():
            backend = supabase_factory()
        else:
            backend = firebase_factory()
    except Exception as e:
        handle_config_error(e, context="storage.factory")
        backend = firebase_factory()
        logger.warning("Falling back to %s storage: %s", backend.provider_name, e)
        return FallbackDueToError(backend=backend, reason=e)
    logger.info("Using %s storage backend", backend.provider_name)
    return Selected(backend=backend)
