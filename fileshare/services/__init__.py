"""Service layer for business logic."""

from fileshare.services.auth_service import AuthService
from fileshare.services.file_service import FileAccessService

__all__ = [
    "AuthService",
    "FileAccessService",
]
