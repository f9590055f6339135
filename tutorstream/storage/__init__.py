"""Storage backends for protected resources."""

import logging

from tutorstream.config import Settings
from tutorstream.storage.base import StorageBackend
from tutorstream.storage.local import LocalStorage

logger = logging.getLogger(__name__)

__all__ = [
    "StorageBackend",
    "LocalStorage",
    "create_storage",
]


def create_storage(settings: Settings) -> StorageBackend:
    """Build the configured storage backend."""
    logger.info(f"Using local storage at: {settings.storage_path}")
    return LocalStorage(settings.storage_path)
