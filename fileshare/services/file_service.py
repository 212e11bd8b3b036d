"""File access service: uploads, owner-scoped reads and share links.

The caller's user id is passed explicitly into every owner-restricted
operation and reaches the database only through the owner-scoped
repository methods. A file that exists but belongs to someone else is
reported exactly like a file that does not exist.
"""

import asyncio
import sqlite3
from dataclasses import dataclass
from datetime import datetime
from functools import partial
from typing import AsyncIterable, AsyncIterator, List, Optional, Tuple

from common.constants import ALLOWED_FILE_TYPES, MAX_UPLOAD_BYTES
from common.logging_config import get_logger
from fileshare import config
from fileshare.exceptions import (
    FileNotFoundError,
    InternalError,
    InvalidTokenError,
    PayloadTooLargeError,
    StorageError,
    UnauthorizedError,
    UnsupportedTypeError,
    ValidationError,
)
from fileshare.object_store import LocalObjectStore, ObjectTooLargeError
from fileshare.repositories.file_repository import FileRecord, FileRepository
from fileshare.tokens import (
    AccessClaims,
    issue_share_token,
    verify_access_token,
    verify_share_token,
)
from fileshare.utils import (
    display_name,
    get_current_timestamp,
    get_extension,
    normalize_mime_type,
)

logger = get_logger(__name__)


def too_large_message() -> str:
    return f"File exceeds the maximum size of {MAX_UPLOAD_BYTES // (1024 * 1024)} MiB"


@dataclass(frozen=True)
class ShareLink:
    url: str
    token: str
    expires_at: datetime
    file_id: int


@dataclass(frozen=True)
class DeleteResult:
    file_id: int
    storage_cleaned: bool


class FileAccessService:
    def __init__(self, object_store: Optional[LocalObjectStore] = None):
        self.file_repo = FileRepository()
        self.object_store = object_store if object_store is not None else LocalObjectStore()

    async def _run_db(self, func, *args, **kwargs):
        """Run a blocking registry call in the default executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, *args, **kwargs))

    @staticmethod
    def authenticate_request(token: Optional[str]) -> AccessClaims:
        """
        Verify an access token.

        Every failure collapses into one UnauthorizedError so callers learn
        nothing about why a token was refused.
        """
        try:
            return verify_access_token(token)
        except InvalidTokenError as e:
            logger.warning(f"Access token rejected: {e}")
            raise UnauthorizedError("Invalid or expired access token")

    @staticmethod
    def check_file_type(filename: str, mime_type: Optional[str]) -> str:
        """
        Require the extension and the declared mime type to match one entry
        of the allow-list.

        Returns:
            Normalized mime type

        Raises:
            UnsupportedTypeError: If either part is missing, unknown or inconsistent
        """
        extension = get_extension(filename)
        normalized = normalize_mime_type(mime_type)
        allowed = ALLOWED_FILE_TYPES.get(extension)

        if allowed is None or normalized not in allowed:
            raise UnsupportedTypeError(
                f"File type not allowed: {extension or 'no extension'} "
                f"({normalized or 'unknown mime type'})"
            )
        return normalized

    async def upload_file(
        self,
        owner_id: int,
        pieces: AsyncIterable[bytes],
        original_name: Optional[str],
        mime_type: Optional[str],
        declared_size: Optional[int] = None,
    ) -> FileRecord:
        """
        Store uploaded content and register it.

        Content is written to the object store first; the registry row is
        inserted only after the write has completed, and the object is
        removed again if the insert fails.

        Args:
            owner_id: Authenticated user id
            pieces: Async iterable of content pieces
            original_name: Client-supplied filename
            mime_type: Client-declared content type
            declared_size: Size announced by the client, if known

        Raises:
            ValidationError: If no filename was supplied
            UnsupportedTypeError: If the file type is not allowed
            PayloadTooLargeError: If the content exceeds the size limit
            StorageError: If the content cannot be written
            InternalError: If the registry write fails
        """
        name = display_name(original_name)
        if not name:
            raise ValidationError("No file was provided")

        try:
            normalized_mime = self.check_file_type(name, mime_type)
        except UnsupportedTypeError as e:
            logger.warning(f"Upload rejected for user_id={owner_id}: {e}")
            raise

        if declared_size is not None and declared_size > MAX_UPLOAD_BYTES:
            logger.warning(f"Upload rejected for user_id={owner_id}: declared size {declared_size} over limit")
            raise PayloadTooLargeError(too_large_message())

        locator = self.object_store.new_locator(owner_id, name)

        try:
            size = await self.object_store.write_stream(locator, pieces, MAX_UPLOAD_BYTES)
        except ObjectTooLargeError:
            logger.warning(f"Upload rejected for user_id={owner_id}: content over limit")
            raise PayloadTooLargeError(too_large_message())
        except (OSError, ValueError) as e:
            logger.error(f"Storage write failed for {locator}: {e}", exc_info=True)
            raise StorageError("Could not store file content")

        try:
            record = await self._run_db(
                self.file_repo.create_file,
                owner_id=owner_id,
                locator=locator,
                original_name=name,
                size=size,
                mime_type=normalized_mime,
                created_at=get_current_timestamp(),
            )
        except sqlite3.Error as e:
            logger.error(f"Registry write failed for {locator}: {e}", exc_info=True)
            await self._discard_object(locator)
            raise InternalError("Could not register uploaded file")

        logger.info(f"Uploaded file {record.id} ({name}, {size} bytes) [user_id={owner_id}]")
        return record

    async def _discard_object(self, locator: str) -> bool:
        try:
            await self.object_store.delete(locator)
            return True
        except (OSError, ValueError) as e:
            logger.error(f"Failed to remove object {locator}: {e}")
            return False

    def list_files(self, owner_id: int) -> List[FileRecord]:
        try:
            return self.file_repo.list_by_owner(owner_id)
        except sqlite3.Error as e:
            logger.error(f"Listing files failed [user_id={owner_id}]: {e}", exc_info=True)
            raise InternalError("Could not list files")

    def _get_owned_file(self, owner_id: int, file_id: int) -> FileRecord:
        """
        The single ownership check used by every owner-restricted operation.

        Raises:
            FileNotFoundError: If the file does not exist or is not owned by owner_id
        """
        try:
            record = self.file_repo.get_owned(file_id, owner_id)
        except sqlite3.Error as e:
            logger.error(f"File lookup failed [file_id={file_id}]: {e}", exc_info=True)
            raise InternalError("Could not look up file")

        if record is None:
            logger.warning(f"File {file_id} not found for user_id={owner_id}")
            raise FileNotFoundError("File not found")
        return record

    def get_file(self, owner_id: int, file_id: int) -> FileRecord:
        return self._get_owned_file(owner_id, file_id)

    def _open_content(self, record: FileRecord) -> AsyncIterator[bytes]:
        """
        Prepare a content stream for a registered file.

        Raises:
            StorageError: If the object behind the locator is gone
        """
        if not self.object_store.exists(record.locator):
            logger.error(
                f"Registry/storage mismatch: file {record.id} points at missing object {record.locator}"
            )
            raise StorageError("Stored file content is unavailable")

        async def stream_content():
            streamed = 0
            try:
                async for piece in self.object_store.read_stream(record.locator):
                    streamed += len(piece)
                    yield piece
            except OSError as e:
                logger.error(
                    f"Error streaming file {record.id}: {e}. "
                    f"Streamed {streamed}/{record.size} bytes before failure."
                )
                raise StorageError("Stored file content is unavailable")
            logger.debug(f"Streamed file {record.id}: {streamed} bytes")

        return stream_content()

    def download_file(self, owner_id: int, file_id: int) -> Tuple[FileRecord, AsyncIterator[bytes]]:
        record = self._get_owned_file(owner_id, file_id)
        stream = self._open_content(record)
        logger.info(f"Download of file {file_id} [user_id={owner_id}]")
        return record, stream

    def share_file(self, owner_id: int, file_id: int, base_url: Optional[str] = None) -> ShareLink:
        """
        Issue a new share link, replacing any previous one.

        The flag and the token are written by one UPDATE, so earlier links
        stop working the moment this returns.

        Args:
            owner_id: Authenticated user id
            file_id: File to share
            base_url: Base for the link when no public base URL is configured
        """
        record = self._get_owned_file(owner_id, file_id)
        token, expires_at = issue_share_token(record.id)

        try:
            updated = self.file_repo.set_share_token(record.id, owner_id, token)
        except sqlite3.Error as e:
            logger.error(f"Share update failed [file_id={file_id}]: {e}", exc_info=True)
            raise InternalError("Could not share file")

        if not updated:
            raise FileNotFoundError("File not found")

        base = (config.PUBLIC_BASE_URL or base_url or "").rstrip("/")
        logger.info(f"Shared file {file_id} until {expires_at.isoformat()} [user_id={owner_id}]")
        return ShareLink(
            url=f"{base}/shared/{token}",
            token=token,
            expires_at=expires_at,
            file_id=record.id,
        )

    def unshare_file(self, owner_id: int, file_id: int) -> FileRecord:
        record = self._get_owned_file(owner_id, file_id)

        try:
            updated = self.file_repo.set_share_token(record.id, owner_id, None)
        except sqlite3.Error as e:
            logger.error(f"Unshare update failed [file_id={file_id}]: {e}", exc_info=True)
            raise InternalError("Could not stop sharing file")

        if not updated:
            raise FileNotFoundError("File not found")

        logger.info(f"Stopped sharing file {file_id} [user_id={owner_id}]")
        record.is_shared = False
        record.share_token = None
        return record

    def redeem_share(self, token: str) -> Tuple[FileRecord, AsyncIterator[bytes]]:
        """
        Resolve a share token to its file. No user identity is involved.

        The token must verify and must equal the token currently stored on
        a shared file; a token replaced by a later share no longer matches.

        Raises:
            InvalidTokenError: If the token is forged, expired or not a share token
            FileNotFoundError: If the file is gone, unshared or the token was rotated
        """
        try:
            claims = verify_share_token(token)
        except InvalidTokenError as e:
            logger.warning(f"Share token rejected: {e}")
            raise

        try:
            record = self.file_repo.get_shared(claims.file_id, token)
        except sqlite3.Error as e:
            logger.error(f"Shared file lookup failed [file_id={claims.file_id}]: {e}", exc_info=True)
            raise InternalError("Could not look up shared file")

        if record is None:
            logger.warning(f"Share link for file {claims.file_id} is no longer valid")
            raise FileNotFoundError("File not found or no longer shared")

        logger.info(f"Shared download of file {record.id}")
        return record, self._open_content(record)

    async def delete_file(self, owner_id: int, file_id: int) -> DeleteResult:
        """
        Remove the registry row, then the stored object.

        Object removal is best-effort: a failure is logged and reported in
        the result instead of undoing the row removal.
        """
        record = await self._run_db(self._get_owned_file, owner_id, file_id)

        try:
            deleted = await self._run_db(self.file_repo.delete_owned, record.id, owner_id)
        except sqlite3.Error as e:
            logger.error(f"Delete failed [file_id={file_id}]: {e}", exc_info=True)
            raise InternalError("Could not delete file")

        if not deleted:
            raise FileNotFoundError("File not found")

        try:
            removed = await self.object_store.delete(record.locator)
            if not removed:
                logger.warning(f"Object {record.locator} for file {file_id} was already missing")
            storage_cleaned = True
        except (OSError, ValueError) as e:
            logger.error(f"File {file_id} deleted but object {record.locator} could not be removed: {e}")
            storage_cleaned = False

        logger.info(f"Deleted file {file_id} [user_id={owner_id}] storage_cleaned={storage_cleaned}")
        return DeleteResult(file_id=record.id, storage_cleaned=storage_cleaned)
