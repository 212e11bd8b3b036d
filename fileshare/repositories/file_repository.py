"""File repository for database operations.

Every lookup or mutation a user can trigger carries the owner id in its
WHERE clause. The only unscoped read is get_shared(), which instead
requires the exact share token stored on the row.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from common.logging_config import get_logger
from fileshare.database import get_db_connection

logger = get_logger(__name__)

_FILE_COLUMNS = (
    "id, owner_id, locator, original_name, size, mime_type, "
    "is_shared, share_token, created_at"
)


@dataclass
class FileRecord:
    id: int
    owner_id: int
    locator: str
    original_name: str
    size: int
    mime_type: str
    is_shared: bool
    share_token: Optional[str]
    created_at: datetime


def _row_to_file(row) -> FileRecord:
    return FileRecord(
        id=row["id"],
        owner_id=row["owner_id"],
        locator=row["locator"],
        original_name=row["original_name"],
        size=row["size"],
        mime_type=row["mime_type"],
        is_shared=bool(row["is_shared"]),
        share_token=row["share_token"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )


class FileRepository:
    @staticmethod
    def create_file(
        owner_id: int,
        locator: str,
        original_name: str,
        size: int,
        mime_type: str,
        created_at: datetime,
    ) -> FileRecord:
        logger.debug(f"Registering file {original_name!r} [owner_id={owner_id}]")

        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO files (owner_id, locator, original_name, size, mime_type,
                                   is_shared, share_token, created_at)
                VALUES (?, ?, ?, ?, ?, 0, NULL, ?)
                """,
                (owner_id, locator, original_name, size, mime_type, created_at.isoformat())
            )
            conn.commit()
            file_id = cursor.lastrowid

        return FileRecord(
            id=file_id,
            owner_id=owner_id,
            locator=locator,
            original_name=original_name,
            size=size,
            mime_type=mime_type,
            is_shared=False,
            share_token=None,
            created_at=created_at,
        )

    @staticmethod
    def list_by_owner(owner_id: int) -> List[FileRecord]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT {_FILE_COLUMNS} FROM files WHERE owner_id = ? ORDER BY id",
                (owner_id,)
            )
            rows = cursor.fetchall()

        return [_row_to_file(row) for row in rows]

    @staticmethod
    def get_owned(file_id: int, owner_id: int) -> Optional[FileRecord]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT {_FILE_COLUMNS} FROM files WHERE id = ? AND owner_id = ?",
                (file_id, owner_id)
            )
            row = cursor.fetchone()

        if row is None:
            return None
        return _row_to_file(row)

    @staticmethod
    def get_shared(file_id: int, share_token: str) -> Optional[FileRecord]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""SELECT {_FILE_COLUMNS} FROM files
                    WHERE id = ? AND is_shared = 1 AND share_token = ?""",
                (file_id, share_token)
            )
            row = cursor.fetchone()

        if row is None:
            return None
        return _row_to_file(row)

    @staticmethod
    def set_share_token(file_id: int, owner_id: int, share_token: Optional[str]) -> bool:
        """
        Set or clear the share state in a single statement.

        A token turns sharing on and replaces any previous token; None turns
        sharing off.

        Returns:
            True if the owner's file was updated, False if no such file
        """
        is_shared = 1 if share_token is not None else 0

        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                UPDATE files SET is_shared = ?, share_token = ?
                WHERE id = ? AND owner_id = ?
                """,
                (is_shared, share_token, file_id, owner_id)
            )
            conn.commit()
            updated = cursor.rowcount == 1

        logger.debug(f"Share state update [file_id={file_id}] shared={bool(is_shared)} updated={updated}")
        return updated

    @staticmethod
    def delete_owned(file_id: int, owner_id: int) -> bool:
        """
        Returns:
            True if the owner's file row was deleted, False if no such file
        """
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "DELETE FROM files WHERE id = ? AND owner_id = ?",
                (file_id, owner_id)
            )
            conn.commit()
            deleted = cursor.rowcount == 1

        logger.debug(f"Delete file row [file_id={file_id}] deleted={deleted}")
        return deleted
