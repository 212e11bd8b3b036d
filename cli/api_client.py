"""HTTP client for communicating with the ShareBox server."""

import time
import uuid
from pathlib import Path
from typing import Optional

import httpx

from common.constants import MAX_UPLOAD_BYTES
from common.logging_config import get_logger
from cli.config import Config
from cli.constants import ERROR_MESSAGES, STATUS_MESSAGES
from cli.utils import (
    ProgressFileWrapper,
    ProgressReporter,
    filename_from_disposition,
    format_file_size,
    guess_mime_type,
    resolve_output_path,
    share_token_from_link,
)

logger = get_logger(__name__)


class ShareBoxClient:
    """HTTP client for the ShareBox API with retry logic and error handling."""

    def __init__(self, config: Config, transport: Optional[httpx.BaseTransport] = None):
        """
        Initialize the client.

        Args:
            config: Configuration instance
            transport: Optional httpx transport (used to plug in a mock in tests)
        """
        self.config = config
        self.session = httpx.Client(
            base_url=config.get_base_url(),
            timeout=config.get_timeout(),
            transport=transport,
        )
        self.request_id = None
        logger.info(f"Initialized ShareBoxClient [base_url={config.get_base_url()}]")

    def _calculate_upload_timeout(self, file_size: int) -> float:
        """30s base plus 0.1s per MiB."""
        return 30.0 + (file_size / (1024 * 1024)) * 0.1

    def _new_request_headers(self, headers: Optional[dict] = None) -> dict:
        self.request_id = str(uuid.uuid4())
        merged = dict(headers or {})
        merged['X-Request-ID'] = self.request_id
        return merged

    def _request_with_retry(
        self,
        method: str,
        endpoint: str,
        max_retries: Optional[int] = None,
        **kwargs
    ) -> httpx.Response:
        """
        Make an HTTP request, retrying on 5xx responses and network failures.

        4xx responses are returned at once.

        Raises:
            ConnectionError: If the server stays unreachable after all retries
        """
        retry_config = self.config.get_retry_config()
        max_retries = max_retries if max_retries is not None else retry_config['max_retries']
        backoff = retry_config['retry_backoff_multiplier']

        kwargs['headers'] = self._new_request_headers(kwargs.get('headers'))
        last_exception = None

        logger.debug(f"Making request: {method} {endpoint} [request_id={self.request_id}]")

        for attempt in range(max_retries + 1):
            try:
                response = self.session.request(method, endpoint, **kwargs)
            except (httpx.ConnectError, httpx.TimeoutException) as e:
                last_exception = e
                if attempt < max_retries:
                    delay = backoff ** attempt
                    logger.warning(
                        f"Network error (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{method} {endpoint} error={type(e).__name__}, retrying in {delay}s "
                        f"[request_id={self.request_id}]"
                    )
                    time.sleep(delay)
                    continue
                logger.error(
                    f"Network error (max retries exceeded): {method} {endpoint} error={e} "
                    f"[request_id={self.request_id}]"
                )
                break

            logger.debug(
                f"Response received: {method} {endpoint} status={response.status_code} "
                f"[request_id={self.request_id}]"
            )

            if response.status_code >= 500 and attempt < max_retries:
                delay = backoff ** attempt
                logger.warning(
                    f"Server error (attempt {attempt + 1}/{max_retries + 1}): "
                    f"{method} {endpoint} status={response.status_code}, retrying in {delay}s "
                    f"[request_id={self.request_id}]"
                )
                time.sleep(delay)
                continue

            if 400 <= response.status_code < 500:
                logger.warning(
                    f"Client error: {method} {endpoint} status={response.status_code} "
                    f"[request_id={self.request_id}]"
                )
            return response

        if isinstance(last_exception, httpx.TimeoutException):
            raise ConnectionError("Request timed out. Server may be overloaded.")
        raise ConnectionError("Cannot connect to ShareBox server. Is it running?")

    def _format_error(self, response: httpx.Response) -> str:
        """
        Map an error response to a user-friendly message.

        Known error codes get a fixed message; otherwise the server's detail
        is shown, falling back to a message for the status code.
        """
        try:
            error_data = response.json()
        except ValueError:
            error_data = {}

        detail = error_data.get('detail') if isinstance(error_data, dict) else None
        code = error_data.get('code') if isinstance(error_data, dict) else None

        if code in ERROR_MESSAGES:
            return ERROR_MESSAGES[code]
        if isinstance(detail, str) and detail:
            return detail
        return STATUS_MESSAGES.get(response.status_code, f"HTTP {response.status_code}")

    def _get_auth_header(self) -> dict:
        """
        Raises:
            ValueError: If no access token is stored
        """
        token = self.config.get_token()
        if not token:
            raise ValueError("Not logged in. Please run: login <username> <password>")
        return {'Authorization': f'Bearer {token}'}

    def _save_session(self, data: dict) -> dict:
        user = data['user']
        self.config.set_token(data['token'], user['username'])
        return user

    def register(self, username: str, password: str, email: str) -> str:
        logger.info(f"Attempting to register user: {username}")
        try:
            response = self._request_with_retry(
                'POST',
                '/register',
                json={'username': username, 'password': password, 'email': email}
            )
        except ConnectionError as e:
            return f"Error: {e}"

        if response.status_code != 201:
            logger.warning(f"Registration failed for user: {username} status={response.status_code}")
            return f"Registration failed: {self._format_error(response)}"

        user = self._save_session(response.json())
        logger.info(f"Registration successful for user: {username} [user_id={user['id']}]")
        return f"Registration successful!\nUser ID: {user['id']}\nAccess token saved to config."

    def login(self, username: str, password: str) -> str:
        logger.info(f"Attempting to login user: {username}")
        try:
            response = self._request_with_retry(
                'POST',
                '/login',
                json={'username': username, 'password': password}
            )
        except ConnectionError as e:
            return f"Error: {e}"

        if response.status_code != 200:
            logger.warning(f"Login failed for user: {username} status={response.status_code}")
            return f"Login failed: {self._format_error(response)}"

        self._save_session(response.json())
        logger.info(f"Login successful for user: {username}")
        return f"Login successful!\nWelcome back, {username}. Access token saved to config."

    def logout(self) -> str:
        if not self.config.get_token():
            return "Not logged in."
        self.config.clear_token()
        return "Logged out. Access token removed from config."

    def upload(self, file_path: str) -> str:
        """
        Upload one local file.

        Size and existence are checked locally first so obviously bad
        uploads never leave the machine.
        """
        try:
            headers = self._get_auth_header()
        except ValueError as e:
            return f"Error: {e}"

        path = Path(file_path).expanduser()
        if not path.exists():
            return f"Error: File not found: {file_path}"
        if not path.is_file():
            return f"Error: Not a file: {file_path}"

        file_size = path.stat().st_size
        if file_size > MAX_UPLOAD_BYTES:
            return (
                f"Error: {path.name} is {format_file_size(file_size)}; "
                f"the maximum upload size is {format_file_size(MAX_UPLOAD_BYTES)}"
            )

        mime_type = guess_mime_type(path.name)
        logger.info(f"Uploading {path} ({file_size} bytes, {mime_type})")

        try:
            with ProgressFileWrapper(path, file_size) as wrapper:
                response = self.session.post(
                    '/upload',
                    files={'file': (path.name, wrapper, mime_type)},
                    headers=self._new_request_headers(headers),
                    timeout=self._calculate_upload_timeout(file_size),
                )
        except httpx.ConnectError:
            return f"Error uploading {file_path}: Cannot connect to ShareBox server"
        except httpx.TimeoutException:
            return f"Error uploading {file_path}: Upload timed out"
        except OSError as e:
            return f"Error reading {file_path}: {e}"

        if response.status_code != 201:
            return f"Error uploading {file_path}: {self._format_error(response)}"

        metadata = response.json()['file']
        return (
            f"Uploaded: {metadata['original_name']} "
            f"(ID: {metadata['id']}, Size: {format_file_size(metadata['size'])})"
        )

    def list_files(self) -> str:
        try:
            headers = self._get_auth_header()
            response = self._request_with_retry('GET', '/files', headers=headers)
        except (ValueError, ConnectionError) as e:
            return f"Error: {e}"

        if response.status_code != 200:
            return f"Error: {self._format_error(response)}"

        files = response.json()['files']
        if not files:
            return "No files yet. Upload one with: upload <path>"

        lines = [f"Found {len(files)} file(s):"]
        for item in files:
            state = 'shared' if item['is_shared'] else 'private'
            lines.append(
                f"  [{item['id']}] {item['original_name']}  "
                f"{format_file_size(item['size'])}  {item['mime_type']}  {state}"
            )
        return '\n'.join(lines)

    def download(self, file_id: int, output_path: Optional[str] = None) -> str:
        try:
            headers = self._get_auth_header()
        except ValueError as e:
            return f"Error: {e}"

        return self._stream_to_file(
            f'/files/{file_id}/download', headers, f'file-{file_id}', output_path
        )

    def fetch_shared(self, link: str, output_path: Optional[str] = None) -> str:
        """Download through a share link. No login needed."""
        token = share_token_from_link(link)
        if not token:
            return "Error: Share link does not contain a token"

        return self._stream_to_file(f'/shared/{token}', {}, 'shared-file', output_path)

    def _stream_to_file(
        self,
        endpoint: str,
        headers: dict,
        fallback_name: str,
        output_path: Optional[str]
    ) -> str:
        """
        Stream a download into a local file, removing the partial file on failure.
        """
        output_file = None
        try:
            with self.session.stream('GET', endpoint, headers=self._new_request_headers(headers)) as response:
                if response.status_code != 200:
                    response.read()
                    return f"Error: {self._format_error(response)}"

                filename = filename_from_disposition(
                    response.headers.get('Content-Disposition'), fallback_name
                )
                output_file = resolve_output_path(output_path, filename)
                total_size = int(response.headers.get('Content-Length', 0))
                reporter = ProgressReporter("Downloading", filename, total_size)

                with open(output_file, 'wb') as f:
                    for piece in response.iter_bytes(chunk_size=65536):
                        f.write(piece)
                        reporter.advance(len(piece))
                reporter.finish()
        except httpx.ConnectError:
            return "Error: Cannot connect to ShareBox server. Is it running?"
        except httpx.TimeoutException:
            self._remove_partial(output_file)
            return "Error: Request timed out. Server may be overloaded."
        except httpx.HTTPError as e:
            self._remove_partial(output_file)
            return f"Error: Download interrupted: {e}"
        except OSError as e:
            self._remove_partial(output_file)
            return f"Error writing file: {e}"

        return (
            f"Downloaded: {filename} ({format_file_size(reporter.done)})\n"
            f"Saved to: {output_file.absolute()}"
        )

    @staticmethod
    def _remove_partial(output_file: Optional[Path]) -> None:
        if output_file is not None and output_file.exists():
            try:
                output_file.unlink()
            except OSError as e:
                logger.warning(f"Could not remove partial download {output_file}: {e}")

    def share(self, file_id: int) -> str:
        try:
            headers = self._get_auth_header()
            response = self._request_with_retry('POST', f'/files/{file_id}/share', headers=headers)
        except (ValueError, ConnectionError) as e:
            return f"Error: {e}"

        if response.status_code != 200:
            return f"Error: {self._format_error(response)}"

        data = response.json()
        return (
            f"Share link for file {file_id} (valid until {data['expires_at']}):\n"
            f"{data['share_url']}\n"
            f"Any previous link for this file no longer works."
        )

    def unshare(self, file_id: int) -> str:
        try:
            headers = self._get_auth_header()
            response = self._request_with_retry('DELETE', f'/files/{file_id}/share', headers=headers)
        except (ValueError, ConnectionError) as e:
            return f"Error: {e}"

        if response.status_code != 200:
            return f"Error: {self._format_error(response)}"

        return f"File {file_id} is no longer shared."

    def delete(self, file_id: int) -> str:
        try:
            headers = self._get_auth_header()
            response = self._request_with_retry('DELETE', f'/files/{file_id}', headers=headers)
        except (ValueError, ConnectionError) as e:
            return f"Error: {e}"

        if response.status_code != 200:
            return f"Error: {self._format_error(response)}"

        data = response.json()
        message = f"Deleted file {data['file_id']}."
        if not data.get('storage_cleaned', True):
            message += " (Stored content could not be removed on the server.)"
        return message

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()
