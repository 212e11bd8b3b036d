"""Command handler functions for CLI operations."""

from typing import Optional

from common.logging_config import get_logger
from cli.api_client import ShareBoxClient
from cli.config import Config
from cli.models import (
    DeleteCommand,
    DownloadCommand,
    FetchCommand,
    ListCommand,
    LoginCommand,
    LogoutCommand,
    RegisterCommand,
    ShareCommand,
    UnshareCommand,
    UploadCommand,
)

logger = get_logger(__name__)


_client: Optional[ShareBoxClient] = None


def get_client() -> ShareBoxClient:
    """
    Get or create the global ShareBoxClient instance.
    """
    global _client
    if _client is None:
        logger.debug("Creating new ShareBoxClient instance")
        _client = ShareBoxClient(Config())
    return _client


def handle_register(cmd: RegisterCommand, client: Optional[ShareBoxClient] = None) -> str:
    """
    Handle 'register' command.

    Args:
        cmd: RegisterCommand with username, password and email
        client: Optional ShareBoxClient for dependency injection (testing)

    Returns:
        Success or error message
    """
    if client is None:
        client = get_client()
    return client.register(cmd.username, cmd.password, cmd.email)


def handle_login(cmd: LoginCommand, client: Optional[ShareBoxClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.login(cmd.username, cmd.password)


def handle_logout(cmd: LogoutCommand, client: Optional[ShareBoxClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.logout()


def handle_upload(cmd: UploadCommand, client: Optional[ShareBoxClient] = None) -> str:
    """
    Handle 'upload' command.

    Returns:
        Uploaded file summary or error message
    """
    logger.info(f"Executing upload command: path={cmd.file_path}")
    if client is None:
        client = get_client()
    result = client.upload(cmd.file_path)
    logger.debug("Upload command completed")
    return result


def handle_list(cmd: ListCommand, client: Optional[ShareBoxClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.list_files()


def handle_download(cmd: DownloadCommand, client: Optional[ShareBoxClient] = None) -> str:
    """
    Handle 'download' command.

    Args:
        cmd: DownloadCommand with file_id and optional output_path
        client: Optional ShareBoxClient for dependency injection (testing)
    """
    logger.info(f"Executing download command: file_id={cmd.file_id} output_path={cmd.output_path}")
    if client is None:
        client = get_client()
    result = client.download(cmd.file_id, cmd.output_path)
    logger.debug("Download command completed")
    return result


def handle_share(cmd: ShareCommand, client: Optional[ShareBoxClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.share(cmd.file_id)


def handle_unshare(cmd: UnshareCommand, client: Optional[ShareBoxClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.unshare(cmd.file_id)


def handle_fetch(cmd: FetchCommand, client: Optional[ShareBoxClient] = None) -> str:
    """
    Handle 'fetch' command: download through a share link.
    """
    logger.info(f"Executing fetch command: output_path={cmd.output_path}")
    if client is None:
        client = get_client()
    return client.fetch_shared(cmd.link, cmd.output_path)


def handle_delete(cmd: DeleteCommand, client: Optional[ShareBoxClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.delete(cmd.file_id)


HANDLERS = {
    RegisterCommand: handle_register,
    LoginCommand: handle_login,
    LogoutCommand: handle_logout,
    UploadCommand: handle_upload,
    ListCommand: handle_list,
    DownloadCommand: handle_download,
    ShareCommand: handle_share,
    UnshareCommand: handle_unshare,
    FetchCommand: handle_fetch,
    DeleteCommand: handle_delete,
}
