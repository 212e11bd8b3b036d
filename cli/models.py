"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class RegisterCommand:
    """Register a new user account."""

    username: str
    password: str
    email: str
    command: Literal["register"] = "register"


@dataclass(frozen=True)
class LoginCommand:
    """Login with username and password."""

    username: str
    password: str
    command: Literal["login"] = "login"


@dataclass(frozen=True)
class LogoutCommand:
    """Forget the saved access token."""

    command: Literal["logout"] = "logout"


@dataclass(frozen=True)
class UploadCommand:
    """Upload a local file."""

    file_path: str
    command: Literal["upload"] = "upload"


@dataclass(frozen=True)
class ListCommand:
    """List own files."""

    command: Literal["list"] = "list"


@dataclass(frozen=True)
class DownloadCommand:
    """Download an owned file by id."""

    file_id: int
    output_path: str | None = None
    command: Literal["download"] = "download"


@dataclass(frozen=True)
class ShareCommand:
    """Create a share link for a file."""

    file_id: int
    command: Literal["share"] = "share"


@dataclass(frozen=True)
class UnshareCommand:
    """Revoke the share link of a file."""

    file_id: int
    command: Literal["unshare"] = "unshare"


@dataclass(frozen=True)
class FetchCommand:
    """Download a file through a share link or token."""

    link: str
    output_path: str | None = None
    command: Literal["fetch"] = "fetch"


@dataclass(frozen=True)
class DeleteCommand:
    """Delete an owned file by id."""

    file_id: int
    command: Literal["delete"] = "delete"


CommandRequest = (
    RegisterCommand
    | LoginCommand
    | LogoutCommand
    | UploadCommand
    | ListCommand
    | DownloadCommand
    | ShareCommand
    | UnshareCommand
    | FetchCommand
    | DeleteCommand
)
