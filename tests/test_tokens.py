"""Tests for access and share token issuing and verification."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from common.constants import ACCESS_TOKEN_TTL, SHARE_TOKEN_TTL
from fileshare.exceptions import InvalidTokenError
from fileshare.tokens import (
    AccessClaims,
    ShareClaims,
    TokenSigner,
    issue_access_token,
    issue_share_token,
    verify_access_token,
    verify_share_token,
)


class TestTokenSigner:

    def test_issue_and_verify_round_trip(self, token_signer):
        token = token_signer.issue({"typ": "access", "sub": "1", "username": "alice"}, timedelta(minutes=5))

        claims = token_signer.verify(token)

        assert claims["sub"] == "1"
        assert claims["username"] == "alice"
        assert claims["exp"] - claims["iat"] == 300

    def test_empty_secret_rejected(self):
        with pytest.raises(ValueError):
            TokenSigner("")

    def test_expired_token_rejected(self, token_signer):
        issued_at = datetime.now(timezone.utc) - timedelta(hours=2)
        token = token_signer.issue({"typ": "access"}, timedelta(hours=1), issued_at=issued_at)

        with pytest.raises(InvalidTokenError, match="expired"):
            token_signer.verify(token)

    def test_token_signed_with_other_secret_rejected(self, token_signer):
        other = TokenSigner("a-completely-different-secret-value")
        token = other.issue({"typ": "access", "sub": "1", "username": "alice"}, timedelta(hours=1))

        with pytest.raises(InvalidTokenError, match="invalid"):
            token_signer.verify(token)

    def test_tampered_token_rejected(self, token_signer):
        token = token_signer.issue({"typ": "share", "fid": 1}, timedelta(hours=1))
        other = token_signer.issue({"typ": "share", "fid": 2}, timedelta(hours=1))
        header, _, signature = token.split(".")
        tampered = f"{header}.{other.split('.')[1]}.{signature}"

        with pytest.raises(InvalidTokenError):
            token_signer.verify(tampered)

    @pytest.mark.parametrize("token", ["", "not-a-token", "a.b.c", None])
    def test_garbage_rejected(self, token_signer, token):
        with pytest.raises(InvalidTokenError):
            token_signer.verify(token)

    def test_token_without_expiry_rejected(self, token_signer):
        token = jwt.encode({"typ": "access", "sub": "1", "username": "alice"}, token_signer._secret, algorithm="HS256")

        with pytest.raises(InvalidTokenError):
            verify_access_token(token)


class TestAccessTokens:

    def test_access_token_decodes_to_same_user(self):
        token = issue_access_token(42, "alice")

        claims = verify_access_token(token)

        assert claims == AccessClaims(user_id=42, username="alice")

    def test_access_token_lifetime_is_24_hours(self, token_signer):
        token = issue_access_token(1, "alice")
        payload = token_signer.verify(token)

        assert payload["exp"] - payload["iat"] == int(ACCESS_TOKEN_TTL.total_seconds())

    def test_share_token_is_not_an_access_token(self):
        token, _ = issue_share_token(7)

        with pytest.raises(InvalidTokenError):
            verify_access_token(token)

    def test_non_numeric_subject_rejected(self, token_signer):
        token = token_signer.issue({"typ": "access", "sub": "abc", "username": "alice"}, ACCESS_TOKEN_TTL)

        with pytest.raises(InvalidTokenError):
            verify_access_token(token)

    def test_missing_username_rejected(self, token_signer):
        token = token_signer.issue({"typ": "access", "sub": "1"}, ACCESS_TOKEN_TTL)

        with pytest.raises(InvalidTokenError):
            verify_access_token(token)


class TestShareTokens:

    def test_share_token_round_trip(self):
        token, expires_at = issue_share_token(7)

        assert verify_share_token(token) == ShareClaims(file_id=7)
        remaining = expires_at - datetime.now(timezone.utc)
        assert SHARE_TOKEN_TTL - timedelta(minutes=1) < remaining <= SHARE_TOKEN_TTL

    def test_access_token_is_not_a_share_token(self):
        token = issue_access_token(7, "alice")

        with pytest.raises(InvalidTokenError):
            verify_share_token(token)

    def test_consecutive_share_tokens_differ(self):
        first, _ = issue_share_token(1)
        second, _ = issue_share_token(1)

        assert first != second

    def test_share_token_with_user_identity_rejected(self, token_signer):
        token = token_signer.issue({"typ": "share", "fid": 1, "username": "alice"}, SHARE_TOKEN_TTL)

        with pytest.raises(InvalidTokenError):
            verify_share_token(token)

    @pytest.mark.parametrize("fid", ["1", True, None, 1.5])
    def test_non_integer_file_id_rejected(self, token_signer, fid):
        token = token_signer.issue({"typ": "share", "fid": fid}, SHARE_TOKEN_TTL)

        with pytest.raises(InvalidTokenError):
            verify_share_token(token)

    def test_expired_share_token_rejected(self, token_signer):
        issued_at = datetime.now(timezone.utc) - SHARE_TOKEN_TTL - timedelta(seconds=5)
        token = token_signer.issue(ShareClaims(file_id=3).to_claims(), SHARE_TOKEN_TTL, issued_at=issued_at)

        with pytest.raises(InvalidTokenError, match="expired"):
            verify_share_token(token)
