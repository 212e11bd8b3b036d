"""Local-disk object store for uploaded file content.

Objects are addressed by opaque locators of the form
"<owner id>/<uuid>-<sanitized name>". Disk I/O runs in the default
executor so request handlers never block the event loop.
"""

import asyncio
import os
import re
import uuid
from pathlib import Path
from typing import AsyncIterable, AsyncIterator, Optional

from common.constants import STREAM_PIECE_SIZE_BYTES
from common.logging_config import get_logger
from fileshare import config

logger = get_logger(__name__)

_UNSAFE_NAME_CHARS = re.compile(r'[^a-zA-Z0-9.]')
_MAX_STORED_NAME_LENGTH = 100


class ObjectTooLargeError(Exception):
    """
    Raised when a streamed object exceeds the caller's byte limit.
    """
    pass


def sanitize_name(name: str) -> str:
    """
    Replace every character outside [A-Za-z0-9.] with '_'.

    Args:
        name: Original file name

    Returns:
        Name safe to embed in a storage path
    """
    cleaned = _UNSAFE_NAME_CHARS.sub('_', name)[-_MAX_STORED_NAME_LENGTH:]
    return cleaned.lstrip('.') or 'file'


class LocalObjectStore:
    """
    Stores objects as plain files below a root directory.
    """

    def __init__(self, root: Optional[str] = None):
        """
        Args:
            root: Storage directory (defaults to FILESHARE_STORAGE_PATH)
        """
        self.root = Path(root if root is not None else config.STORAGE_PATH).resolve()

    def ensure_root(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def new_locator(self, owner_id: int, original_name: str) -> str:
        return f"{owner_id}/{uuid.uuid4()}-{sanitize_name(original_name)}"

    def _path_for(self, locator: str) -> Path:
        """
        Resolve a locator to a path inside the root.

        Raises:
            ValueError: If the locator escapes the storage root
        """
        path = (self.root / locator).resolve()
        if path == self.root or self.root not in path.parents:
            raise ValueError(f"Locator outside storage root: {locator!r}")
        return path

    async def _run(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    async def write_stream(
        self,
        locator: str,
        pieces: AsyncIterable[bytes],
        max_bytes: int,
    ) -> int:
        """
        Write streamed pieces to the object at locator.

        Data goes to a temporary file that is renamed into place only once
        the stream completes, so a failed write never leaves a visible object.

        Args:
            locator: Target locator (from new_locator)
            pieces: Async iterable of byte pieces
            max_bytes: Maximum total size accepted

        Returns:
            Number of bytes written

        Raises:
            ObjectTooLargeError: If the stream exceeds max_bytes
            OSError: If the disk write fails
        """
        path = self._path_for(locator)
        tmp_path = path.with_name(f".{path.name}.part")
        await self._run(lambda: path.parent.mkdir(parents=True, exist_ok=True))

        handle = await self._run(open, tmp_path, 'wb')
        written = 0
        try:
            async for piece in pieces:
                if not piece:
                    continue
                written += len(piece)
                if written > max_bytes:
                    raise ObjectTooLargeError(
                        f"Object exceeds limit of {max_bytes} bytes"
                    )
                await self._run(handle.write, piece)
            await self._run(handle.close)
            await self._run(os.replace, tmp_path, path)
        except BaseException:
            handle.close()
            await self._run(self._unlink_quietly, tmp_path)
            raise

        logger.debug(f"Stored object {locator} ({written} bytes)")
        return written

    @staticmethod
    def _unlink_quietly(path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass

    def exists(self, locator: str) -> bool:
        try:
            return self._path_for(locator).is_file()
        except ValueError:
            return False

    async def read_stream(
        self,
        locator: str,
        piece_size: int = STREAM_PIECE_SIZE_BYTES,
    ) -> AsyncIterator[bytes]:
        """
        Stream object content in pieces.

        Raises:
            FileNotFoundError: If the object does not exist
            OSError: If the read fails
        """
        path = self._path_for(locator)
        handle = await self._run(open, path, 'rb')
        try:
            while True:
                piece = await self._run(handle.read, piece_size)
                if not piece:
                    break
                yield piece
        finally:
            handle.close()

    async def delete(self, locator: str) -> bool:
        """
        Delete an object.

        Returns:
            True if the object was deleted, False if it didn't exist
        """
        path = self._path_for(locator)

        def _delete() -> bool:
            if path.exists():
                path.unlink()
                return True
            return False

        return await self._run(_delete)

    def check_writable(self) -> bool:
        """Return True if the storage root exists (creating it) and is writable."""
        try:
            self.ensure_root()
        except OSError:
            return False
        return os.access(self.root, os.W_OK)
