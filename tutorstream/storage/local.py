"""Local filesystem storage backend."""

from pathlib import Path
from typing import AsyncIterator, BinaryIO

import aiofiles

from tutorstream.errors import InvalidResource
from tutorstream.storage.base import StorageBackend

CHUNK_SIZE = 8192


class LocalStorage(StorageBackend):
    """Local filesystem storage implementation."""

    def __init__(self, base_path: Path):
        """
        Initialize local storage.

        Args:
            base_path: Base directory for all stored files
        """
        self.base_path = Path(base_path).resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _full_path(self, path: str) -> Path:
        """Get full filesystem path for a relative path, refusing escapes."""
        full_path = (self.base_path / path).resolve()
        if full_path == self.base_path or not full_path.is_relative_to(self.base_path):
            raise InvalidResource()
        return full_path

    async def save(self, path: str, file: BinaryIO) -> str:
        """Save a file to local storage."""
        full_path = self._full_path(path)
        full_path.parent.mkdir(parents=True, exist_ok=True)

        async with aiofiles.open(full_path, 'wb') as f:
            # Read in chunks for large files
            while chunk := file.read(CHUNK_SIZE):
                await f.write(chunk)

        return str(full_path)

    async def exists(self, path: str) -> bool:
        """Check if a file exists in local storage."""
        return self._full_path(path).is_file()

    async def get_stream(self, path: str) -> AsyncIterator[bytes]:
        """Stream file contents from local storage."""
        full_path = self._full_path(path)
        async with aiofiles.open(full_path, 'rb') as f:
            while chunk := await f.read(CHUNK_SIZE):
                yield chunk

    def get_local_path(self, path: str) -> Path | None:
        """Get local filesystem path."""
        return self._full_path(path)
