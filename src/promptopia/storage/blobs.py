"""
Local filesystem blob store.

Stores one byte payload per key as a file inside a single root directory.
Keys are plain file names; nested paths are not supported.
"""

from __future__ import annotations

import logging
from pathlib import Path

import aiofiles
import aiofiles.os

logger = logging.getLogger(__name__)


class BlobStoreError(Exception):
    """Raised when a blob cannot be read, written, listed, or removed."""

    def __init__(self, message: str, key: str | None = None):
        self.key = key
        super().__init__(message)


class BlobNotFoundError(BlobStoreError):
    """Raised when no blob exists under the requested key."""

    def __init__(self, key: str):
        super().__init__(f"Blob not found: {key}", key=key)


class LocalBlobStore:
    """Async key/value byte store backed by files in one directory."""

    def __init__(self, root: Path | str):
        self.root = Path(root).expanduser()

    def _path_for(self, key: str) -> Path:
        """Resolve a key to a file path inside the root directory.

        Raises:
            BlobNotFoundError: If the key could point outside the root
        """
        if not key or key in (".", "..") or "/" in key or "\\" in key or "\x00" in key:
            raise BlobNotFoundError(key)
        return self.root / key

    async def ensure_root(self) -> None:
        """Create the root directory (and parents) if missing."""
        try:
            await aiofiles.os.makedirs(self.root, exist_ok=True)
        except OSError as e:
            raise BlobStoreError(f"Failed to create directory {self.root}: {e}") from e

    async def get(self, key: str) -> bytes:
        path = self._path_for(key)
        try:
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        except FileNotFoundError as e:
            raise BlobNotFoundError(key) from e
        except OSError as e:
            raise BlobStoreError(f"Failed to read {path}: {e}", key=key) from e

    async def put(self, key: str, data: bytes) -> None:
        """Write a blob, replacing any previous payload under the key."""
        path = self._path_for(key)
        try:
            async with aiofiles.open(path, "wb") as f:
                await f.write(data)
        except OSError as e:
            raise BlobStoreError(f"Failed to write {path}: {e}", key=key) from e

    async def delete(self, key: str) -> None:
        path = self._path_for(key)
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError as e:
            raise BlobNotFoundError(key) from e
        except OSError as e:
            raise BlobStoreError(f"Failed to delete {path}: {e}", key=key) from e

    async def exists(self, key: str) -> bool:
        try:
            path = self._path_for(key)
        except BlobNotFoundError:
            return False
        return await aiofiles.os.path.isfile(path)

    async def list_keys(self, suffix: str = "") -> list[str]:
        """List keys in directory enumeration order, optionally filtered by suffix."""
        try:
            names = await aiofiles.os.listdir(self.root)
        except OSError as e:
            raise BlobStoreError(f"Failed to list {self.root}: {e}") from e
        return [name for name in names if name.endswith(suffix)]
