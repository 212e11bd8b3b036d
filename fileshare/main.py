"""Entry point for the file-sharing server."""

import time
import uuid

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from common.constants import MAX_UPLOAD_REQUEST_BYTES
from common.logging_config import setup_logging
from fileshare.config import CLIENT_URL, SERVER_HOST, SERVER_PORT
from fileshare.database import check_database, init_database
from fileshare.exceptions import (
    FileNotFoundError,
    FileShareError,
    InternalError,
    InvalidCredentialsError,
    InvalidTokenError,
    PayloadTooLargeError,
    StorageError,
    UnauthorizedError,
    UnsupportedTypeError,
    UserAlreadyExistsError,
    ValidationError,
)
from fileshare.object_store import LocalObjectStore
from fileshare.routes.auth_routes import router as auth_router
from fileshare.routes.file_routes import router as file_router
from fileshare.routes.share_routes import router as share_router
from fileshare.schemas.common import HealthResponse
from fileshare.services.file_service import too_large_message
from fileshare.tokens import get_signer

logger = setup_logging('fileshare')

app = FastAPI(
    title="ShareBox",
    description="Multi-user file storage with expiring share links",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[CLIENT_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def limit_upload_size(request: Request, call_next):
    """
    Refuse an upload whose Content-Length is over the limit before its
    multipart body is read and spooled to disk.

    Chunked bodies carry no Content-Length and are capped while streaming.
    """
    if request.method == "POST" and request.url.path == "/upload":
        content_length = request.headers.get("content-length", "")
        if content_length.isdigit() and int(content_length) > MAX_UPLOAD_REQUEST_BYTES:
            request_id = getattr(request.state, 'request_id', 'unknown')
            logger.warning(
                f"Upload refused: Content-Length {content_length} over limit [request_id={request_id}]"
            )
            return JSONResponse(
                status_code=413,
                content={"detail": too_large_message(), "code": "PAYLOAD_TOO_LARGE"},
            )

    return await call_next(request)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Middleware to log all HTTP requests and responses.
    """
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()

    logger.info(
        f"Request started: {request.method} {request.url.path} [request_id={request_id}]"
    )

    response = await call_next(request)

    duration = time.time() - start_time
    user_id = getattr(request.state, 'user_id', None)

    logger.info(
        f"Request completed: {request.method} {request.url.path} "
        f"status={response.status_code} duration={duration:.3f}s "
        f"[request_id={request_id}] [user_id={user_id or 'anonymous'}]"
    )

    response.headers["X-Request-ID"] = request_id

    return response


@app.on_event("startup")
async def startup_event():
    """
    Initialize database, storage directory and token signer.
    """
    logger.info("ShareBox server starting up...")

    init_database()
    logger.info("Database initialized")

    LocalObjectStore().ensure_root()
    logger.info("Object store ready")

    get_signer()


def _error_response(request: Request, exc: FileShareError, status_code: int, code: str, headers=None):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"{type(exc).__name__}: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "code": code},
        headers=headers,
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR")


@app.exception_handler(UserAlreadyExistsError)
async def user_already_exists_handler(request: Request, exc: UserAlreadyExistsError):
    return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "USER_ALREADY_EXISTS")


@app.exception_handler(InvalidCredentialsError)
async def invalid_credentials_handler(request: Request, exc: InvalidCredentialsError):
    return _error_response(request, exc, status.HTTP_401_UNAUTHORIZED, "INVALID_CREDENTIALS")


@app.exception_handler(UnauthorizedError)
async def unauthorized_handler(request: Request, exc: UnauthorizedError):
    return _error_response(
        request, exc, status.HTTP_401_UNAUTHORIZED, "UNAUTHORIZED",
        headers={"WWW-Authenticate": "Bearer"},
    )


@app.exception_handler(InvalidTokenError)
async def invalid_token_handler(request: Request, exc: InvalidTokenError):
    return _error_response(request, exc, status.HTTP_401_UNAUTHORIZED, "INVALID_TOKEN")


@app.exception_handler(FileNotFoundError)
async def file_not_found_handler(request: Request, exc: FileNotFoundError):
    return _error_response(request, exc, status.HTTP_404_NOT_FOUND, "FILE_NOT_FOUND")


@app.exception_handler(PayloadTooLargeError)
async def payload_too_large_handler(request: Request, exc: PayloadTooLargeError):
    # literal: the HTTP_413_* name differs across Starlette releases
    return _error_response(request, exc, 413, "PAYLOAD_TOO_LARGE")


@app.exception_handler(UnsupportedTypeError)
async def unsupported_type_handler(request: Request, exc: UnsupportedTypeError):
    return _error_response(request, exc, status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, "UNSUPPORTED_TYPE")


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Storage error: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc), "code": "STORAGE_ERROR"}
    )


@app.exception_handler(InternalError)
async def internal_error_handler(request: Request, exc: InternalError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Internal error: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc), "code": "INTERNAL_ERROR"}
    )


@app.exception_handler(FileShareError)
async def fileshare_exception_handler(request: Request, exc: FileShareError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Unhandled service error: {exc} [request_id={request_id}] path={request.url.path}",
        exc_info=True
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "code": "INTERNAL_ERROR"}
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Unhandled exception: {exc} [request_id={request_id}] path={request.url.path}",
        exc_info=True
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "code": "INTERNAL_ERROR"}
    )


app.include_router(auth_router)
app.include_router(file_router)
app.include_router(share_router)


@app.get("/")
async def root():
    """
    Root endpoint.
    """
    return {"message": "ShareBox API", "status": "running"}


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Liveness check. Returns 200 while the process is serving requests.
    """
    return HealthResponse(status="ok", service="fileshare")


@app.get("/ready")
async def ready_check():
    """
    Readiness check.
    Verifies the database answers and the object store is writable.
    """
    db_status = "ok" if check_database() else "error"
    storage_status = "ok" if LocalObjectStore().check_writable() else "error"

    ready = db_status == "ok" and storage_status == "ok"
    status_code = status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE

    return JSONResponse(
        status_code=status_code,
        content={
            "ready": ready,
            "database": db_status,
            "storage": storage_status
        }
    )


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    uvicorn.run(
        "fileshare.main:app",
        host=SERVER_HOST,
        port=SERVER_PORT,
    )


if __name__ == "__main__":
    main()
