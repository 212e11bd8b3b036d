"""Tests for CLI configuration module."""

import json

from cli.config import Config


def test_config_creates_default_file(tmp_path):
    """Config file is created with defaults if missing."""
    config_path = tmp_path / '.sharebox' / 'config.json'
    config = Config(config_path)

    assert config_path.exists()
    assert config.data['timeout'] == 30
    assert config.data['max_retries'] == 3
    assert config.data['retry_backoff_multiplier'] == 2
    assert 'token' not in config.data


def test_config_loads_existing_file(tmp_path):
    config_path = tmp_path / '.sharebox' / 'config.json'
    config_path.parent.mkdir(parents=True)
    with open(config_path, 'w') as f:
        json.dump({'token': 'abc', 'server_url': 'http://example.com:9000/'}, f)

    config = Config(config_path)

    assert config.get_token() == 'abc'
    assert config.get_base_url() == 'http://example.com:9000'
    assert config.get_timeout() == 30


def test_corrupt_config_is_backed_up(tmp_path):
    config_path = tmp_path / '.sharebox' / 'config.json'
    config_path.parent.mkdir(parents=True)
    config_path.write_text('{not json')

    config = Config(config_path)

    assert config.get_token() is None
    assert config_path.with_suffix('.json.bak').read_text() == '{not json'


def test_save_and_clear_token(temp_config):
    assert temp_config.get_token() is None

    temp_config.set_token('tok-123', 'alice')

    assert temp_config.get_token() == 'tok-123'
    assert temp_config.get_username() == 'alice'
    with open(temp_config.config_path) as f:
        assert json.load(f)['token'] == 'tok-123'

    temp_config.clear_token()

    assert temp_config.get_token() is None
    with open(temp_config.config_path) as f:
        assert 'token' not in json.load(f)


def test_retry_config(temp_config):
    assert temp_config.get_retry_config() == {'max_retries': 3, 'retry_backoff_multiplier': 2}


def test_cli_arguments_default_to_config_directory_log(monkeypatch):
    from cli.main import DEFAULT_LOG_FILE, build_arg_parser

    monkeypatch.delenv("SHAREBOX_CLI_LOG", raising=False)
    args = build_arg_parser().parse_args([])

    assert args.debug is False
    assert args.log_file == str(DEFAULT_LOG_FILE)


def test_cli_arguments_debug_and_log_file():
    from cli.main import build_arg_parser

    args = build_arg_parser().parse_args(["--debug", "--log-file", "/tmp/sb.log"])

    assert args.debug is True
    assert args.log_file == "/tmp/sb.log"
