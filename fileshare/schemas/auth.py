"""Pydantic schemas for authentication endpoints."""

from pydantic import BaseModel


class RegisterRequest(BaseModel):
    """Request model for user registration."""
    username: str = ""
    password: str = ""
    email: str = ""


class LoginRequest(BaseModel):
    """Request model for user login."""
    username: str = ""
    password: str = ""


class UserResponse(BaseModel):
    """Public view of a user; never includes the password hash."""
    id: int
    username: str
    email: str


class AuthResponse(BaseModel):
    """Response model for registration and login."""
    message: str
    token: str
    user: UserResponse
