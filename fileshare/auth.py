"""Authentication and security utilities."""

import base64
import hashlib
from typing import Optional

import bcrypt
from fastapi import Header, Request

from fileshare import config
from fileshare.exceptions import UnauthorizedError
from fileshare.tokens import AccessClaims


def _bcrypt_input(password: str) -> bytes:
    """
    SHA-256 digest of the password, base64 encoded.

    bcrypt only reads the first 72 bytes of its input (and bcrypt 5 refuses
    longer input), so every password is reduced to 44 ASCII bytes first.
    """
    digest = hashlib.sha256(password.encode('utf-8')).digest()
    return base64.b64encode(digest)


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password to hash, of any length

    Returns:
        Bcrypt hash of the password
    """
    salt = bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS)
    hashed = bcrypt.hashpw(_bcrypt_input(password), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a password against a bcrypt hash.

    Args:
        password: Plain text password to verify
        password_hash: Bcrypt hash to verify against

    Returns:
        True if password matches hash, False otherwise (including a malformed hash)
    """
    hash_bytes = password_hash.encode('utf-8')
    try:
        return bcrypt.checkpw(_bcrypt_input(password), hash_bytes)
    except ValueError:
        return False


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Pull the token out of an 'Authorization: Bearer <token>' header value.

    Raises:
        UnauthorizedError: If the header is missing or not a bearer credential
    """
    if not authorization:
        raise UnauthorizedError("Invalid or expired access token")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthorizedError("Invalid or expired access token")

    return token.strip()


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
) -> AccessClaims:
    """
    FastAPI dependency that verifies the bearer access token.

    Args:
        request: Incoming request (user id is recorded on request.state for logging)
        authorization: Authorization header value (format: "Bearer <token>")

    Returns:
        Claims of the authenticated user

    Raises:
        UnauthorizedError: If the token is missing, malformed, expired or forged
    """
    from fileshare.services.file_service import FileAccessService

    token = extract_bearer_token(authorization)
    claims = FileAccessService.authenticate_request(token)
    request.state.user_id = claims.user_id
    return claims
