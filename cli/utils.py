"""Utility functions for CLI operations."""

import mimetypes
import re
import sys
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

from cli.constants import GREEN, RESET


class ProgressReporter:
    """Writes a single self-overwriting progress line to stdout."""

    def __init__(self, label: str, name: str, total: Optional[int] = None):
        self.label = label
        self.name = name
        self.total = total or 0
        self.done = 0
        self._finished = False

    def advance(self, amount: int) -> None:
        self.done += amount
        if self.total > 0:
            progress = (self.done / self.total) * 100
            sys.stdout.write(
                f"\r{self.label} {self.name}: {format_file_size(self.done)} / "
                f"{format_file_size(self.total)} ({GREEN}{progress:.1f}%{RESET})"
            )
        else:
            sys.stdout.write(f"\r{self.label} {self.name}: {format_file_size(self.done)}")
        sys.stdout.flush()

    def finish(self) -> None:
        if not self._finished:
            self._finished = True
            sys.stdout.write('\n')
            sys.stdout.flush()


class ProgressFileWrapper:
    """Read-only file wrapper that reports upload progress as it is read."""

    def __init__(self, file_path: Path, file_size: int):
        self._file = open(file_path, 'rb')
        self._reporter = ProgressReporter("Uploading", file_path.name, file_size)

    def read(self, size: int = -1) -> bytes:
        piece = self._file.read(size if size > 0 else 65536)
        if piece:
            self._reporter.advance(len(piece))
        else:
            self._reporter.finish()
        return piece

    def seek(self, offset: int, whence: int = 0) -> int:
        return self._file.seek(offset, whence)

    def tell(self) -> int:
        return self._file.tell()

    def close(self) -> None:
        self._file.close()

    def __enter__(self) -> 'ProgressFileWrapper':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def format_file_size(size_bytes: int) -> str:
    """
    Format a byte count with binary units (B, KiB, MiB, GiB, TiB).

    Returns:
        Formatted string (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    size = size_bytes / 1024.0
    for unit in ['KiB', 'MiB', 'GiB']:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} TiB"


def guess_mime_type(file_path: str) -> str:
    mime_type, _ = mimetypes.guess_type(file_path)
    return mime_type or 'application/octet-stream'


_FILENAME_STAR = re.compile(r"filename\*\s*=\s*UTF-8''([^;]+)", re.IGNORECASE)
_FILENAME_PLAIN = re.compile(r'filename\s*=\s*"([^"]*)"', re.IGNORECASE)


def filename_from_disposition(header: Optional[str], fallback: str) -> str:
    """
    Extract the download filename from a Content-Disposition header.

    The RFC 5987 form is preferred over the ASCII one. Only the last path
    component is kept so a server-supplied name cannot escape the target
    directory.
    """
    name = None
    if header:
        match = _FILENAME_STAR.search(header)
        if match:
            name = unquote(match.group(1).strip())
        else:
            match = _FILENAME_PLAIN.search(header)
            if match:
                name = match.group(1)

    name = Path(name.replace('\\', '/')).name if name else ''
    if name in ('', '.', '..'):
        return fallback
    return name


def share_token_from_link(link: str) -> str:
    """
    Accept either a full share URL (.../shared/<token>) or a bare token.
    """
    link = link.strip()
    path = urlparse(link).path if '://' in link else link
    if '/shared/' in path:
        return path.rsplit('/shared/', 1)[1].strip('/')
    return link


def resolve_output_path(output_path: Optional[str], filename: str) -> Path:
    """
    Pick where a download is written.

    No output path means the current directory; an existing directory
    receives the file under its own name.
    """
    if not output_path:
        return Path.cwd() / filename

    target = Path(output_path).expanduser()
    if target.is_dir():
        target = target / filename
    target.parent.mkdir(parents=True, exist_ok=True)
    return target
