"""Utility helper functions for the file-sharing server."""

from datetime import datetime, timezone
from pathlib import PurePosixPath, PureWindowsPath
from typing import Optional
from urllib.parse import quote


def get_current_timestamp() -> datetime:
    """
    Get the current time as an aware UTC datetime.
    """
    return datetime.now(timezone.utc)


def display_name(filename: Optional[str]) -> str:
    """
    Reduce a client-supplied filename to its final path component.

    Browsers on Windows may send full paths ("C:\\Users\\me\\notes.txt").

    Returns:
        Bare file name, or an empty string if nothing usable remains
    """
    if not filename:
        return ""
    name = PureWindowsPath(PurePosixPath(filename).name).name
    return name.strip()


def get_extension(filename: str) -> str:
    """
    Get the lower-cased extension of a filename, including the dot.
    """
    return PurePosixPath(filename.lower()).suffix


def normalize_mime_type(mime_type: Optional[str]) -> str:
    """
    Strip parameters from a mime type and lower-case it.

    "Text/Plain; charset=utf-8" -> "text/plain"
    """
    if not mime_type:
        return ""
    return mime_type.split(";", 1)[0].strip().lower()


def content_disposition(filename: str) -> str:
    """
    Build an attachment Content-Disposition header value.

    Includes an ASCII fallback plus the RFC 5987 UTF-8 form so non-ASCII
    names survive.
    """
    ascii_name = filename.encode("ascii", "replace").decode("ascii")
    ascii_name = ascii_name.replace("\\", "_").replace('"', "_").replace("?", "_")
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"
