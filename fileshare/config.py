"""Configuration settings for the file-sharing server."""

import os
import secrets

from common.constants import BCRYPT_DEFAULT_ROUNDS


DATABASE_PATH = os.environ.get("FILESHARE_DATABASE_PATH", "./data/fileshare.db")

STORAGE_PATH = os.environ.get("FILESHARE_STORAGE_PATH", "./data/objects")

SERVER_HOST = os.environ.get("FILESHARE_HOST", "0.0.0.0")

SERVER_PORT = int(os.environ.get("FILESHARE_PORT", "8000"))

# Unset means a random per-process secret: tokens will not survive a restart.
SECRET_KEY = os.environ.get("FILESHARE_SECRET_KEY") or None

GENERATED_SECRET_KEY = secrets.token_urlsafe(48)

JWT_ALGORITHM = "HS256"

# Base used for share links; falls back to the incoming request's base URL.
PUBLIC_BASE_URL = os.environ.get("FILESHARE_PUBLIC_BASE_URL", "").rstrip("/") or None

CLIENT_URL = os.environ.get("FILESHARE_CLIENT_URL", "http://localhost:3001")

BCRYPT_ROUNDS = int(os.environ.get("FILESHARE_BCRYPT_ROUNDS", str(BCRYPT_DEFAULT_ROUNDS)))
