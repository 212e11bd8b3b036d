"""Project-wide constants (upload limits, token lifetimes, allowed file types)."""

from datetime import timedelta

MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024  # 10 MiB per file
STREAM_PIECE_SIZE_BYTES: int = 64 * 1024

# Room for multipart boundaries and part headers around the file itself
MULTIPART_OVERHEAD_BYTES: int = 64 * 1024
MAX_UPLOAD_REQUEST_BYTES: int = MAX_UPLOAD_BYTES + MULTIPART_OVERHEAD_BYTES

ACCESS_TOKEN_TTL: timedelta = timedelta(hours=24)
SHARE_TOKEN_TTL: timedelta = timedelta(days=7)

ACCESS_TOKEN_TYPE = "access"
SHARE_TOKEN_TYPE = "share"

BCRYPT_DEFAULT_ROUNDS: int = 10

# Extension -> mime types accepted for it. Both must agree on upload.
ALLOWED_FILE_TYPES: dict[str, frozenset[str]] = {
    ".jpg": frozenset({"image/jpeg", "image/pjpeg"}),
    ".jpeg": frozenset({"image/jpeg", "image/pjpeg"}),
    ".png": frozenset({"image/png"}),
    ".gif": frozenset({"image/gif"}),
    ".pdf": frozenset({"application/pdf"}),
    ".txt": frozenset({"text/plain"}),
    ".doc": frozenset({"application/msword"}),
    ".docx": frozenset({
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    }),
    ".xls": frozenset({"application/vnd.ms-excel"}),
    ".xlsx": frozenset({
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    }),
    ".zip": frozenset({"application/zip", "application/x-zip-compressed"}),
    ".rar": frozenset({"application/vnd.rar", "application/x-rar-compressed"}),
}
