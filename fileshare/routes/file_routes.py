"""File operation API routes."""

from typing import AsyncIterator, Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from fastapi.responses import StreamingResponse

from common.constants import STREAM_PIECE_SIZE_BYTES
from fileshare.auth import get_current_user
from fileshare.exceptions import ValidationError
from fileshare.repositories.file_repository import FileRecord
from fileshare.schemas.files import (
    DeleteFileResponse,
    FileMetadataResponse,
    ListFilesResponse,
    ShareResponse,
    UploadResponse
)
from fileshare.services.file_service import FileAccessService
from fileshare.tokens import AccessClaims
from fileshare.utils import content_disposition

router = APIRouter(tags=["Files"])

# Handlers that only make registry calls are plain functions; FastAPI runs
# them in its threadpool, off the event loop.


def file_metadata(record: FileRecord) -> FileMetadataResponse:
    return FileMetadataResponse(
        id=record.id,
        original_name=record.original_name,
        size=record.size,
        mime_type=record.mime_type,
        is_shared=record.is_shared,
        created_at=record.created_at.isoformat(),
    )


def file_download_response(record: FileRecord, stream: AsyncIterator[bytes]) -> StreamingResponse:
    return StreamingResponse(
        stream,
        media_type=record.mime_type,
        headers={
            "Content-Disposition": content_disposition(record.original_name),
            "Content-Length": str(record.size),
        }
    )


async def _read_pieces(upload: UploadFile) -> AsyncIterator[bytes]:
    while True:
        piece = await upload.read(STREAM_PIECE_SIZE_BYTES)
        if not piece:
            break
        yield piece


@router.post("/upload", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_file(
    file: Optional[UploadFile] = File(None),
    current_user: AccessClaims = Depends(get_current_user)
):
    """
    Upload a file.

    Parameters:
        - file: File to upload (multipart/form-data)
        - Authorization header: Bearer <token> (required)

    Returns:
        - file: Metadata of the stored file

    Raises:
        - 400: No file provided
        - 401: Invalid or missing access token
        - 413: File larger than 10 MiB
        - 415: File type not allowed
        - 500: Storage or internal error
    """
    file_service = FileAccessService()

    if file is None:
        raise ValidationError("No file was provided")

    try:
        record = await file_service.upload_file(
            owner_id=current_user.user_id,
            pieces=_read_pieces(file),
            original_name=file.filename,
            mime_type=file.content_type,
            declared_size=getattr(file, "size", None),
        )
    finally:
        await file.close()

    return UploadResponse(message="File uploaded successfully", file=file_metadata(record))


@router.get("/files", response_model=ListFilesResponse)
def list_files(current_user: AccessClaims = Depends(get_current_user)):
    """
    List the caller's files in upload order.
    """
    file_service = FileAccessService()
    records = file_service.list_files(current_user.user_id)

    return ListFilesResponse(files=[file_metadata(record) for record in records])


@router.get("/files/{file_id}", response_model=FileMetadataResponse)
def get_file(file_id: int, current_user: AccessClaims = Depends(get_current_user)):
    """
    Get metadata of one of the caller's files.

    Raises:
        - 404: File not found (or not owned by the caller)
    """
    file_service = FileAccessService()
    return file_metadata(file_service.get_file(current_user.user_id, file_id))


@router.get("/files/{file_id}/download")
def download_file(file_id: int, current_user: AccessClaims = Depends(get_current_user)):
    """
    Download one of the caller's files.

    Returns:
        - StreamingResponse with the file content and its original filename

    Raises:
        - 401: Invalid or missing access token
        - 404: File not found (or not owned by the caller)
        - 500: Stored content unavailable
    """
    file_service = FileAccessService()
    record, stream = file_service.download_file(current_user.user_id, file_id)

    return file_download_response(record, stream)


@router.post("/files/{file_id}/share", response_model=ShareResponse)
def share_file(
    file_id: int,
    request: Request,
    current_user: AccessClaims = Depends(get_current_user)
):
    """
    Create a share link valid for 7 days.

    Any previous link for the same file stops working.

    Raises:
        - 401: Invalid or missing access token
        - 404: File not found (or not owned by the caller)
    """
    file_service = FileAccessService()
    link = file_service.share_file(current_user.user_id, file_id, base_url=str(request.base_url))

    return ShareResponse(
        message="File shared successfully",
        share_url=link.url,
        share_token=link.token,
        expires_at=link.expires_at.isoformat(),
    )


@router.delete("/files/{file_id}/share", response_model=FileMetadataResponse)
def unshare_file(file_id: int, current_user: AccessClaims = Depends(get_current_user)):
    """
    Stop sharing a file; every existing link stops working.

    Raises:
        - 404: File not found (or not owned by the caller)
    """
    file_service = FileAccessService()
    return file_metadata(file_service.unshare_file(current_user.user_id, file_id))


@router.delete("/files/{file_id}", response_model=DeleteFileResponse)
async def delete_file(file_id: int, current_user: AccessClaims = Depends(get_current_user)):
    """
    Delete one of the caller's files.

    Returns:
        - storage_cleaned: False if the stored content could not be removed

    Raises:
        - 404: File not found (or not owned by the caller)
    """
    file_service = FileAccessService()
    result = await file_service.delete_file(current_user.user_id, file_id)

    return DeleteFileResponse(
        message="File deleted successfully",
        file_id=result.file_id,
        storage_cleaned=result.storage_cleaned,
    )
