"""Custom exception classes for the file-sharing server."""


class FileShareError(Exception):
    """
    Base exception class for all file-sharing errors.
    """
    pass


class ValidationError(FileShareError):
    """
    Raised when request input is missing or malformed.
    """
    pass


class UserAlreadyExistsError(FileShareError):
    """
    Raised when a username or email is already registered.
    """
    pass


class InvalidCredentialsError(FileShareError):
    """
    Raised when login credentials are invalid.
    """
    pass


class UnauthorizedError(FileShareError):
    """
    Raised when an access token is missing, malformed, expired or forged.
    """
    pass


class InvalidTokenError(FileShareError):
    """
    Raised when a signed token fails signature, expiry or shape checks.
    """
    pass


class FileNotFoundError(FileShareError):
    """
    Raised when a file does not exist or is not visible to the caller.
    """
    pass


class ForbiddenError(FileShareError):
    """
    Reserved. Ownership failures are reported as FileNotFoundError so that
    callers cannot discover files they do not own.
    """
    pass


class PayloadTooLargeError(FileShareError):
    """
    Raised when an upload exceeds the size limit.
    """
    pass


class UnsupportedTypeError(FileShareError):
    """
    Raised when an upload's extension or mime type is not allowed.
    """
    pass


class StorageError(FileShareError):
    """
    Raised when the object store cannot read or write file content.
    """
    pass


class InternalError(FileShareError):
    """
    Raised when a backing store fails unexpectedly.
    """
    pass
