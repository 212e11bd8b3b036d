"""Tests for CLI command parsing."""

import pytest

from cli.models import (
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
from cli.parser import ParseError, parse_command


@pytest.mark.parametrize(
    "line,expected",
    [
        ("register alice pw a@x.com", RegisterCommand("alice", "pw", "a@x.com")),
        ("login alice pw", LoginCommand("alice", "pw")),
        ("logout", LogoutCommand()),
        ("upload notes.txt", UploadCommand("notes.txt")),
        ('upload "my notes.txt"', UploadCommand("my notes.txt")),
        ("list", ListCommand()),
        ("download 3", DownloadCommand(3)),
        ("download 3 out/copy.txt", DownloadCommand(3, "out/copy.txt")),
        ("share 3", ShareCommand(3)),
        ("unshare 3", UnshareCommand(3)),
        ("fetch http://h/shared/abc", FetchCommand("http://h/shared/abc")),
        ("fetch abc copy.txt", FetchCommand("abc", "copy.txt")),
        ("delete 3", DeleteCommand(3)),
    ],
)
def test_parse_valid_commands(line, expected):
    assert parse_command(line) == expected


@pytest.mark.parametrize(
    "line,message",
    [
        ("", "Empty command"),
        ("   ", "Empty command"),
        ("frobnicate", "Unknown command"),
        ("register alice pw", "exactly 3 arguments"),
        ("login alice", "exactly 2 arguments"),
        ("upload", "exactly 1 argument"),
        ("upload a.txt b.txt", "exactly 1 argument"),
        ("list everything", "no arguments"),
        ("download", "1 or 2 arguments"),
        ("download abc", "Invalid file id"),
        ("download 0", "Invalid file id"),
        ("share -1", "Invalid file id"),
        ("delete", "exactly 1 argument"),
        ("fetch", "1 or 2 arguments"),
        ('upload "unterminated', "Invalid syntax"),
    ],
)
def test_parse_errors(line, message):
    with pytest.raises(ParseError, match=message):
        parse_command(line)
