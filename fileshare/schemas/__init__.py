"""Pydantic schemas for API requests and responses."""

from fileshare.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    UserResponse,
    AuthResponse
)
from fileshare.schemas.files import (
    FileMetadataResponse,
    UploadResponse,
    ListFilesResponse,
    ShareResponse,
    DeleteFileResponse
)
from fileshare.schemas.common import ErrorResponse, HealthResponse

__all__ = [
    "RegisterRequest",
    "LoginRequest",
    "UserResponse",
    "AuthResponse",
    "FileMetadataResponse",
    "UploadResponse",
    "ListFilesResponse",
    "ShareResponse",
    "DeleteFileResponse",
    "ErrorResponse",
    "HealthResponse"
]
