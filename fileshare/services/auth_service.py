"""Authentication service for business logic."""

import sqlite3

from common.logging_config import get_logger
from fileshare.auth import hash_password, verify_password
from fileshare.exceptions import (
    InternalError,
    InvalidCredentialsError,
    UserAlreadyExistsError,
    ValidationError,
)
from fileshare.repositories.user_repository import User, UserRepository
from fileshare.tokens import issue_access_token
from fileshare.utils import get_current_timestamp

logger = get_logger(__name__)


def _validate_email(email: str) -> None:
    local, sep, domain = email.partition("@")
    if not sep or not local or not domain or "@" in domain or any(c.isspace() for c in email):
        raise ValidationError("Email address is invalid")


class AuthService:
    def __init__(self):
        self.user_repo = UserRepository()

    def register_user(self, username: str, password: str, email: str) -> tuple[str, User]:
        username = (username or "").strip()
        email = (email or "").strip()

        if not username or not password or not email:
            raise ValidationError("Username, password and email are required")
        _validate_email(email)

        logger.info(f"Attempting to register user: {username}")

        password_hash = hash_password(password)

        try:
            user = self.user_repo.create_user(
                username=username,
                email=email,
                password_hash=password_hash,
                created_at=get_current_timestamp(),
            )
        except sqlite3.IntegrityError:
            logger.warning(f"Registration failed: username '{username}' or its email already exists")
            raise UserAlreadyExistsError("Username or email already exists")
        except sqlite3.Error as e:
            logger.error(f"Registration failed for '{username}': {e}", exc_info=True)
            raise InternalError("Could not create user")

        token = issue_access_token(user.id, user.username)
        logger.info(f"Successfully registered user: {username} [user_id={user.id}]")
        return token, user

    def login_user(self, username: str, password: str) -> tuple[str, User]:
        username = (username or "").strip()
        if not username or not password:
            raise ValidationError("Username and password are required")

        logger.info(f"Login attempt for user: {username}")

        try:
            user = self.user_repo.get_by_username(username)
        except sqlite3.Error as e:
            logger.error(f"Login lookup failed for '{username}': {e}", exc_info=True)
            raise InternalError("Could not complete login")

        if user is None:
            logger.warning(f"Login failed: username '{username}' not found")
            raise InvalidCredentialsError("Invalid username or password")

        if not verify_password(password, user.password_hash):
            logger.warning(f"Login failed: invalid password for username '{username}'")
            raise InvalidCredentialsError("Invalid username or password")

        token = issue_access_token(user.id, user.username)
        logger.info(f"Successfully logged in user: {username} [user_id={user.id}]")
        return token, user
