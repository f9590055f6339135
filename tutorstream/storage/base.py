"""Abstract storage interface for protected resources."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import AsyncIterator, BinaryIO


class StorageBackend(ABC):
    """Abstract base class for storage backends."""

    @abstractmethod
    async def save(self, path: str, file: BinaryIO) -> str:
        """
        Save a file to storage.

        Args:
            path: Relative path where file should be stored
            file: File-like object to save

        Returns:
            The full path/URL to the saved file
        """
        pass

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """Check if a file exists in storage."""
        pass

    @abstractmethod
    def get_stream(self, path: str) -> AsyncIterator[bytes]:
        """
        Stream a file's contents from storage.

        Args:
            path: Relative path to the file

        Yields:
            Chunks of file data
        """
        pass

    @abstractmethod
    def get_local_path(self, path: str) -> Path | None:
        """
        Get local filesystem path if available.

        Backends without a filesystem return None and are streamed
        through ``get_stream`` instead.
        """
        pass
