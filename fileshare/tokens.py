"""Signed, time-limited tokens for user sessions and share links.

A single TokenSigner (HS256 over the process-wide secret) issues and
verifies every token. Two claim shapes ride on top of it:

    AccessClaims  {"typ": "access", "sub": "<user id>", "username": ...}
    ShareClaims   {"typ": "share", "fid": <file id>, "jti": ...}

Signature and expiry are checked first, then the payload is decoded into
the expected variant. A token of one kind never decodes as the other.
"""

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

import jwt

from common.constants import (
    ACCESS_TOKEN_TTL,
    ACCESS_TOKEN_TYPE,
    SHARE_TOKEN_TTL,
    SHARE_TOKEN_TYPE,
)
from common.logging_config import get_logger
from fileshare import config
from fileshare.exceptions import InvalidTokenError

logger = get_logger(__name__)


class TokenSigner:
    """
    Issues and verifies HS256 JWTs. Holds no mutable state, so one instance
    is shared by all requests.
    """

    def __init__(self, secret: str, algorithm: str = config.JWT_ALGORITHM):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm

    def issue(
        self,
        claims: Dict[str, Any],
        ttl: timedelta,
        issued_at: Optional[datetime] = None,
    ) -> str:
        """
        Sign claims with an expiry of issued_at + ttl.

        Args:
            claims: Payload claims; 'iat' and 'exp' are set here
            ttl: Token lifetime
            issued_at: Issue time (defaults to now, UTC)

        Returns:
            Encoded token string
        """
        if issued_at is None:
            issued_at = datetime.now(timezone.utc)

        payload = dict(claims)
        payload["iat"] = issued_at
        payload["exp"] = issued_at + ttl
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> Dict[str, Any]:
        """
        Check signature and expiry and return the decoded claims.

        Raises:
            InvalidTokenError: If the token is empty, malformed, forged or expired
        """
        if not token or not isinstance(token, str):
            raise InvalidTokenError("Token is missing")

        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise InvalidTokenError("Token has expired")
        except jwt.PyJWTError as e:
            logger.debug(f"Token rejected: {type(e).__name__}")
            raise InvalidTokenError("Token is invalid")


def _require_type(claims: Dict[str, Any], expected: str) -> None:
    if claims.get("typ") != expected:
        raise InvalidTokenError("Token is invalid")


@dataclass(frozen=True)
class AccessClaims:
    user_id: int
    username: str

    def to_claims(self) -> Dict[str, Any]:
        return {
            "typ": ACCESS_TOKEN_TYPE,
            "sub": str(self.user_id),
            "username": self.username,
        }

    @classmethod
    def from_claims(cls, claims: Dict[str, Any]) -> "AccessClaims":
        _require_type(claims, ACCESS_TOKEN_TYPE)

        sub = claims.get("sub")
        username = claims.get("username")
        if not isinstance(sub, str) or not sub.isdigit():
            raise InvalidTokenError("Token is invalid")
        if not isinstance(username, str) or not username:
            raise InvalidTokenError("Token is invalid")

        return cls(user_id=int(sub), username=username)


@dataclass(frozen=True)
class ShareClaims:
    file_id: int

    def to_claims(self) -> Dict[str, Any]:
        # jti keeps two shares issued within the same second distinct
        return {
            "typ": SHARE_TOKEN_TYPE,
            "fid": self.file_id,
            "jti": secrets.token_urlsafe(16),
        }

    @classmethod
    def from_claims(cls, claims: Dict[str, Any]) -> "ShareClaims":
        _require_type(claims, SHARE_TOKEN_TYPE)

        file_id = claims.get("fid")
        if not isinstance(file_id, int) or isinstance(file_id, bool):
            raise InvalidTokenError("Token is invalid")
        if "username" in claims or "sub" in claims:
            raise InvalidTokenError("Token is invalid")

        return cls(file_id=file_id)


_signer: Optional[TokenSigner] = None


def get_signer() -> TokenSigner:
    """Return the process-wide signer, creating it from config on first use."""
    global _signer
    if _signer is None:
        secret = config.SECRET_KEY
        if secret is None:
            logger.warning(
                "FILESHARE_SECRET_KEY is not set; using a random secret. "
                "Issued tokens will not survive a restart."
            )
            secret = config.GENERATED_SECRET_KEY
        _signer = TokenSigner(secret)
    return _signer


def set_signer(signer: Optional[TokenSigner]) -> None:
    """Replace the process-wide signer (None resets to config on next use)."""
    global _signer
    _signer = signer


def issue_access_token(user_id: int, username: str) -> str:
    claims = AccessClaims(user_id=user_id, username=username)
    return get_signer().issue(claims.to_claims(), ACCESS_TOKEN_TTL)


def verify_access_token(token: str) -> AccessClaims:
    return AccessClaims.from_claims(get_signer().verify(token))


def issue_share_token(file_id: int) -> Tuple[str, datetime]:
    """
    Issue a share token for a file.

    Returns:
        Tuple of (token, expires_at)
    """
    issued_at = datetime.now(timezone.utc)
    claims = ShareClaims(file_id=file_id)
    token = get_signer().issue(claims.to_claims(), SHARE_TOKEN_TTL, issued_at=issued_at)
    return token, issued_at + SHARE_TOKEN_TTL


def verify_share_token(token: str) -> ShareClaims:
    return ShareClaims.from_claims(get_signer().verify(token))
