"""Authentication API routes."""

from fastapi import APIRouter, status

from fileshare.repositories.user_repository import User
from fileshare.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UserResponse
)
from fileshare.services.auth_service import AuthService

router = APIRouter(tags=["Authentication"])


def _user_response(user: User) -> UserResponse:
    return UserResponse(id=user.id, username=user.username, email=user.email)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(request: RegisterRequest):
    """
    Register a new user account.

    Parameters:
        - username: Unique username
        - password: User password (hashed before storage)
        - email: Unique email address

    Returns:
        - token: Access token valid for 24 hours
        - user: id, username and email of the new account

    Raises:
        - 400: Missing fields, or username/email already registered
        - 500: Internal server error
    """
    auth_service = AuthService()
    token, user = auth_service.register_user(request.username, request.password, request.email)

    return AuthResponse(message="User created successfully", token=token, user=_user_response(user))


@router.post("/login", response_model=AuthResponse)
def login(request: LoginRequest):
    """
    Authenticate a user and issue a new access token.

    Raises:
        - 400: Missing username or password
        - 401: Invalid credentials
        - 500: Internal server error
    """
    auth_service = AuthService()
    token, user = auth_service.login_user(request.username, request.password)

    return AuthResponse(message="Login successful", token=token, user=_user_response(user))
