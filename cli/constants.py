"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = [
    "register", "login", "logout", "upload", "list", "download",
    "share", "unshare", "fetch", "delete", "clear", "exit", "help",
]

STYLE = Style.from_dict(
    {
        "prompt": "#2E86DE bold",
        "command": "#0088ff bold",
    }
)

BLUE = "\033[38;2;46;134;222m"
GREEN = "\033[32m"
RESET = "\033[0m"

LOGO = f"""{BLUE}
 ┌─┐┬ ┬┌─┐┬─┐┌─┐┌┐ ┌─┐─┐ ┬
 └─┐├─┤├─┤├┬┘├┤ ├┴┐│ │┌┴┬┘
 └─┘┴ ┴┴ ┴┴└─└─┘└─┘└─┘┴ └─
{RESET}"""

WELCOME_TITLE = "ShareBox CLI - Private file storage with share links"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "sharebox> "

HELP_TEXT = """Available commands:
  register <username> <password> <email>   Create an account and log in
  login <username> <password>              Log in and save the access token
  logout                                   Forget the saved access token
  upload <path>                            Upload a local file (max 10 MiB)
  list                                     List your files
  download <file_id> [output_path]         Download one of your files
  share <file_id>                          Create a 7-day share link (replaces older links)
  unshare <file_id>                        Revoke the share link of a file
  fetch <share_url|token> [output_path]    Download a file through a share link
  delete <file_id>                         Delete one of your files
  clear                                    Clear screen and redisplay welcome message
  help                                     Show this help
  exit                                     Exit REPL

Examples:
  register alice s3cret alice@example.com
  upload ./notes.txt
  share 1
  fetch http://localhost:8000/shared/eyJhbGciOi... shared-notes.txt"""

ERROR_MESSAGES = {
    'USER_ALREADY_EXISTS': 'Username or email already registered. Try logging in instead.',
    'INVALID_CREDENTIALS': 'Invalid username or password.',
    'UNAUTHORIZED': 'Not authenticated. Please run: login <username> <password>',
    'INVALID_TOKEN': 'Share link is invalid or has expired.',
    'PAYLOAD_TOO_LARGE': 'File too large. The maximum upload size is 10 MiB.',
    'STORAGE_ERROR': 'Server could not access the stored file. Please try again later.',
    'INTERNAL_ERROR': 'Server error. Please try again later.',
}

STATUS_MESSAGES = {
    400: 'Bad request',
    401: 'Not authenticated',
    404: 'Not found',
    413: 'File too large',
    415: 'Unsupported file type',
    422: 'Invalid request',
    500: 'Server error',
    503: 'Service unavailable',
}
