"""User repository for database operations."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from common.logging_config import get_logger
from fileshare.database import get_db_connection

logger = get_logger(__name__)


@dataclass
class User:
    id: int
    username: str
    email: str
    password_hash: str
    created_at: datetime


def _row_to_user(row) -> User:
    return User(
        id=row["id"],
        username=row["username"],
        email=row["email"],
        password_hash=row["password_hash"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )


class UserRepository:
    @staticmethod
    def create_user(
        username: str,
        email: str,
        password_hash: str,
        created_at: datetime,
    ) -> User:
        """
        Insert a user row.

        Raises:
            sqlite3.IntegrityError: If the username or email is already taken
        """
        logger.debug(f"Creating user: {username}")

        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO users (username, email, password_hash, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (username, email, password_hash, created_at.isoformat())
            )
            conn.commit()
            user_id = cursor.lastrowid

        logger.info(f"User created successfully: {username} [user_id={user_id}]")
        return User(
            id=user_id,
            username=username,
            email=email,
            password_hash=password_hash,
            created_at=created_at,
        )

    @staticmethod
    def get_by_username(username: str) -> Optional[User]:
        logger.debug(f"Fetching user by username: {username}")
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """SELECT id, username, email, password_hash, created_at
                   FROM users WHERE username = ?""",
                (username,)
            )
            row = cursor.fetchone()

        if row is None:
            logger.debug(f"User not found: {username}")
            return None
        return _row_to_user(row)

    @staticmethod
    def get_by_id(user_id: int) -> Optional[User]:
        logger.debug(f"Fetching user by id: {user_id}")
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """SELECT id, username, email, password_hash, created_at
                   FROM users WHERE id = ?""",
                (user_id,)
            )
            row = cursor.fetchone()

        if row is None:
            return None
        return _row_to_user(row)
