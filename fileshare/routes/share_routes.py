"""Public share-link routes. No authentication: the token is the credential."""

from fastapi import APIRouter

from fileshare.routes.file_routes import file_download_response
from fileshare.services.file_service import FileAccessService

router = APIRouter(tags=["Sharing"])


@router.get("/shared/{token}")
def redeem_share(token: str):
    """
    Download a file through a share link.

    Returns:
        - StreamingResponse with the file content and its original filename

    Raises:
        - 401: Token forged, expired or not a share token
        - 404: File deleted, no longer shared, or link replaced by a newer one
    """
    file_service = FileAccessService()
    record, stream = file_service.redeem_share(token)

    return file_download_response(record, stream)
