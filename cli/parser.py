"""Command parser for CLI input."""

import shlex

from cli.models import (
    CommandRequest,
    DeleteCommand,
    DownloadCommand,
    FetchCommand,
    ListCommand,
    LoginCommand,
    LogoutCommand,
    RegisterCommand,
    ShareCommand,
    UnshareCommand,
    UploadCommand,
)


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if not tokens:
        raise ParseError("Empty command")

    command_name, args = tokens[0], tokens[1:]

    if command_name == "register":
        return _parse_register(args)
    elif command_name == "login":
        return _parse_login(args)
    elif command_name == "logout":
        _expect_no_args("logout", args)
        return LogoutCommand()
    elif command_name == "upload":
        return _parse_upload(args)
    elif command_name == "list":
        _expect_no_args("list", args)
        return ListCommand()
    elif command_name == "download":
        return _parse_download(args)
    elif command_name == "share":
        return ShareCommand(file_id=_parse_single_file_id("share", args))
    elif command_name == "unshare":
        return UnshareCommand(file_id=_parse_single_file_id("unshare", args))
    elif command_name == "fetch":
        return _parse_fetch(args)
    elif command_name == "delete":
        return DeleteCommand(file_id=_parse_single_file_id("delete", args))
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _expect_no_args(command_name: str, args: list[str]) -> None:
    if args:
        raise ParseError(f"{command_name} takes no arguments")


def _parse_file_id(value: str) -> int:
    """Parse a file id, which must be a positive integer."""
    if not value.isdigit() or int(value) < 1:
        raise ParseError(f"Invalid file id: {value}")
    return int(value)


def _parse_single_file_id(command_name: str, args: list[str]) -> int:
    if len(args) != 1:
        raise ParseError(f"{command_name} requires exactly 1 argument: <file_id>")
    return _parse_file_id(args[0])


def _parse_register(args: list[str]) -> RegisterCommand:
    """Parse 'register <username> <password> <email>' command."""
    if len(args) != 3:
        raise ParseError("register requires exactly 3 arguments: <username> <password> <email>")

    username, password, email = args
    return RegisterCommand(username=username, password=password, email=email)


def _parse_login(args: list[str]) -> LoginCommand:
    """Parse 'login <username> <password>' command."""
    if len(args) != 2:
        raise ParseError("login requires exactly 2 arguments: <username> <password>")

    username, password = args
    return LoginCommand(username=username, password=password)


def _parse_upload(args: list[str]) -> UploadCommand:
    if len(args) != 1:
        raise ParseError("upload requires exactly 1 argument: <path>")
    return UploadCommand(file_path=args[0])


def _parse_download(args: list[str]) -> DownloadCommand:
    """Parse 'download <file_id> [output_path]' command."""
    if len(args) not in (1, 2):
        raise ParseError("download requires 1 or 2 arguments: <file_id> [output_path]")

    output_path = args[1] if len(args) > 1 else None
    return DownloadCommand(file_id=_parse_file_id(args[0]), output_path=output_path)


def _parse_fetch(args: list[str]) -> FetchCommand:
    """Parse 'fetch <share_url|token> [output_path]' command."""
    if len(args) not in (1, 2):
        raise ParseError("fetch requires 1 or 2 arguments: <share_url|token> [output_path]")

    output_path = args[1] if len(args) > 1 else None
    return FetchCommand(link=args[0], output_path=output_path)
