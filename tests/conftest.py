"""Shared pytest fixtures for all tests."""

import tempfile
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from cli.config import Config
from fileshare.database import init_database
from fileshare.object_store import LocalObjectStore
from fileshare.tokens import TokenSigner, set_signer

TEST_SECRET = "test-secret-key-for-signing-tokens"


@pytest.fixture(autouse=True)
def token_signer() -> Generator[TokenSigner, None, None]:
    """
    Install a signer with a fixed secret for every test.
    """
    signer = TokenSigner(TEST_SECRET)
    set_signer(signer)
    yield signer
    set_signer(None)


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    """Lowest bcrypt cost so hashing does not dominate test time."""
    monkeypatch.setattr("fileshare.config.BCRYPT_ROUNDS", 4)


@pytest.fixture
def test_db(monkeypatch) -> Generator[Path, None, None]:
    """
    Create a temporary test database for each test.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        monkeypatch.setattr("fileshare.database.DATABASE_PATH", str(db_path))
        monkeypatch.setattr("fileshare.config.DATABASE_PATH", str(db_path))
        init_database()
        yield db_path


@pytest.fixture
def storage_dir(tmp_path, monkeypatch) -> Path:
    """
    Point the object store at a temporary directory.
    """
    path = tmp_path / "objects"
    monkeypatch.setattr("fileshare.config.STORAGE_PATH", str(path))
    return path


@pytest.fixture
def object_store(storage_dir) -> LocalObjectStore:
    store = LocalObjectStore(str(storage_dir))
    store.ensure_root()
    return store


@pytest.fixture
def client(test_db, storage_dir) -> Generator[TestClient, None, None]:
    """
    FastAPI test client backed by a temporary database and storage directory.

    Used as a context manager so the startup event runs.
    """
    from fileshare.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Returns:
        Path to temporary .sharebox directory
    """
    config_dir = tmp_path / '.sharebox'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir):
    """
    Create temporary config instance.
    """
    return Config(temp_config_dir / 'config.json')


@pytest.fixture
def sample_file(tmp_path):
    """
    Create a sample text file for testing uploads.
    """
    file_path = tmp_path / 'notes.txt'
    file_path.write_text('Sample content for testing')
    return file_path
