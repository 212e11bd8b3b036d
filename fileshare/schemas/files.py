"""Pydantic schemas for file operation endpoints."""

from typing import List
from pydantic import BaseModel


class FileMetadataResponse(BaseModel):
    """Response model for file metadata. The share token is never included."""
    id: int
    original_name: str
    size: int
    mime_type: str
    is_shared: bool
    created_at: str


class UploadResponse(BaseModel):
    """Response model for file upload."""
    message: str
    file: FileMetadataResponse


class ListFilesResponse(BaseModel):
    """Response model for file listing."""
    files: List[FileMetadataResponse]


class ShareResponse(BaseModel):
    """Response model for share link creation."""
    message: str
    share_url: str
    share_token: str
    expires_at: str


class DeleteFileResponse(BaseModel):
    """Response model for file deletion."""
    message: str
    file_id: int
    storage_cleaned: bool
