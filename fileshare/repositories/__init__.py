"""Repository layer for data access."""

from fileshare.repositories.user_repository import User, UserRepository
from fileshare.repositories.file_repository import FileRecord, FileRepository

__all__ = [
    "User",
    "UserRepository",
    "FileRecord",
    "FileRepository",
]
