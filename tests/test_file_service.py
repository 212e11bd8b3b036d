"""Tests for the file access service: ownership, uploads and share links."""

import threading
from unittest.mock import AsyncMock

import pytest

from common.constants import MAX_UPLOAD_BYTES
from fileshare import config
from fileshare.exceptions import (
    FileNotFoundError,
    InvalidTokenError,
    PayloadTooLargeError,
    StorageError,
    UnauthorizedError,
    UnsupportedTypeError,
    ValidationError,
)
from fileshare.repositories.file_repository import FileRepository
from fileshare.services.auth_service import AuthService
from fileshare.services.file_service import FileAccessService
from fileshare.tokens import issue_access_token


async def _pieces(*chunks: bytes):
    for chunk in chunks:
        yield chunk


async def _collect(stream) -> bytes:
    return b"".join([piece async for piece in stream])


@pytest.fixture
def service(test_db, object_store) -> FileAccessService:
    return FileAccessService(object_store=object_store)


@pytest.fixture
def alice(test_db):
    _, user = AuthService().register_user("alice", "pw123456", "a@x.com")
    return user


@pytest.fixture
def bob(test_db):
    _, user = AuthService().register_user("bob", "pw123456", "b@x.com")
    return user


async def _upload(service, owner, content=b"hello world", name="notes.txt", mime="text/plain"):
    return await service.upload_file(owner.id, _pieces(content), name, mime)


class TestAuthenticateRequest:

    def test_valid_access_token(self, alice):
        claims = FileAccessService.authenticate_request(issue_access_token(alice.id, alice.username))

        assert claims.user_id == alice.id

    @pytest.mark.parametrize("token", [None, "", "garbage"])
    def test_invalid_token_is_unauthorized(self, token):
        with pytest.raises(UnauthorizedError):
            FileAccessService.authenticate_request(token)


class TestCheckFileType:

    @pytest.mark.parametrize(
        "filename,mime",
        [
            ("notes.txt", "text/plain"),
            ("notes.TXT", "text/plain; charset=utf-8"),
            ("photo.jpeg", "image/jpeg"),
            ("archive.zip", "application/x-zip-compressed"),
            ("report.docx", "application/vnd.openxmlformats-officedocument.wordprocessingml.document"),
        ],
    )
    def test_allowed(self, filename, mime):
        assert FileAccessService.check_file_type(filename, mime)

    @pytest.mark.parametrize(
        "filename,mime",
        [
            ("virus.exe", "application/x-msdownload"),
            ("notes.txt", "application/pdf"),
            ("notes", "text/plain"),
            ("notes.txt", None),
            ("script.sh", "text/plain"),
        ],
    )
    def test_rejected(self, filename, mime):
        with pytest.raises(UnsupportedTypeError):
            FileAccessService.check_file_type(filename, mime)


class TestUpload:

    @pytest.mark.asyncio
    async def test_upload_registers_file(self, service, alice):
        record = await _upload(service, alice)

        assert record.owner_id == alice.id
        assert record.original_name == "notes.txt"
        assert record.size == 11
        assert record.mime_type == "text/plain"
        assert record.is_shared is False
        assert service.object_store.exists(record.locator)

    @pytest.mark.asyncio
    async def test_path_in_filename_is_stripped(self, service, alice):
        record = await _upload(service, alice, name="C:\\Users\\alice\\notes.txt")

        assert record.original_name == "notes.txt"

    @pytest.mark.asyncio
    async def test_oversized_upload_rejected_without_registry_row(self, service, alice, storage_dir):
        piece = b"x" * (1024 * 1024)
        pieces = _pieces(*([piece] * 11))

        with pytest.raises(PayloadTooLargeError):
            await service.upload_file(alice.id, pieces, "big.txt", "text/plain")

        assert service.list_files(alice.id) == []
        assert [p for p in storage_dir.rglob("*") if p.is_file()] == []

    @pytest.mark.asyncio
    async def test_declared_size_over_limit_rejected_before_writing(self, service, alice):
        service.object_store.write_stream = AsyncMock()

        with pytest.raises(PayloadTooLargeError):
            await service.upload_file(
                alice.id, _pieces(b"x"), "big.txt", "text/plain", declared_size=MAX_UPLOAD_BYTES + 1
            )

        service.object_store.write_stream.assert_not_called()

    @pytest.mark.asyncio
    async def test_upload_exactly_at_limit_accepted(self, service, alice):
        record = await service.upload_file(alice.id, _pieces(b"x" * MAX_UPLOAD_BYTES), "edge.txt", "text/plain")

        assert record.size == MAX_UPLOAD_BYTES

    @pytest.mark.asyncio
    async def test_exe_rejected(self, service, alice):
        with pytest.raises(UnsupportedTypeError):
            await _upload(service, alice, name="setup.exe", mime="application/x-msdownload")

        assert service.list_files(alice.id) == []

    @pytest.mark.asyncio
    async def test_mime_mismatch_rejected(self, service, alice):
        with pytest.raises(UnsupportedTypeError):
            await _upload(service, alice, name="notes.txt", mime="image/png")

    @pytest.mark.asyncio
    async def test_missing_filename_rejected(self, service, alice):
        with pytest.raises(ValidationError):
            await _upload(service, alice, name="")

    @pytest.mark.asyncio
    async def test_storage_failure_reported_as_storage_error(self, service, alice):
        service.object_store.write_stream = AsyncMock(side_effect=OSError("disk full"))

        with pytest.raises(StorageError) as exc_info:
            await _upload(service, alice)

        assert "disk full" not in str(exc_info.value)
        assert service.list_files(alice.id) == []


class TestOwnership:

    @pytest.mark.asyncio
    async def test_owner_can_download(self, service, alice):
        record = await _upload(service, alice, content=b"secret notes")

        fetched, stream = service.download_file(alice.id, record.id)

        assert fetched.id == record.id
        assert await _collect(stream) == b"secret notes"

    @pytest.mark.asyncio
    async def test_other_user_gets_not_found(self, service, alice, bob):
        record = await _upload(service, alice)

        with pytest.raises(FileNotFoundError):
            service.download_file(bob.id, record.id)
        with pytest.raises(FileNotFoundError):
            service.get_file(bob.id, record.id)
        with pytest.raises(FileNotFoundError):
            service.share_file(bob.id, record.id)
        with pytest.raises(FileNotFoundError):
            await service.delete_file(bob.id, record.id)

        assert service.get_file(alice.id, record.id).id == record.id

    @pytest.mark.asyncio
    async def test_list_only_own_files(self, service, alice, bob):
        first = await _upload(service, alice, name="a.txt")
        await _upload(service, bob, name="b.txt")
        second = await _upload(service, alice, name="c.txt")

        assert [r.id for r in service.list_files(alice.id)] == [first.id, second.id]

    def test_nonexistent_file_not_found(self, service, alice):
        with pytest.raises(FileNotFoundError):
            service.download_file(alice.id, 9999)

    @pytest.mark.asyncio
    async def test_missing_object_is_storage_error(self, service, alice):
        record = await _upload(service, alice)
        await service.object_store.delete(record.locator)

        with pytest.raises(StorageError):
            service.download_file(alice.id, record.id)


class TestSharing:

    @pytest.mark.asyncio
    async def test_share_and_redeem(self, service, alice):
        record = await _upload(service, alice, content=b"shared bytes")

        link = service.share_file(alice.id, record.id, base_url="http://testserver/")

        assert link.url == f"http://testserver/shared/{link.token}"
        assert service.get_file(alice.id, record.id).is_shared is True
        shared, stream = service.redeem_share(link.token)
        assert shared.id == record.id
        assert await _collect(stream) == b"shared bytes"

    @pytest.mark.asyncio
    async def test_public_base_url_takes_precedence(self, service, alice, monkeypatch):
        monkeypatch.setattr(config, "PUBLIC_BASE_URL", "https://files.example.com")
        record = await _upload(service, alice)

        link = service.share_file(alice.id, record.id, base_url="http://internal:8000/")

        assert link.url.startswith("https://files.example.com/shared/")

    @pytest.mark.asyncio
    async def test_second_share_invalidates_first(self, service, alice):
        record = await _upload(service, alice)

        first = service.share_file(alice.id, record.id)
        second = service.share_file(alice.id, record.id)

        assert first.token != second.token
        with pytest.raises(FileNotFoundError):
            service.redeem_share(first.token)
        shared, _ = service.redeem_share(second.token)
        assert shared.id == record.id

    @pytest.mark.asyncio
    async def test_unshare_invalidates_link(self, service, alice):
        record = await _upload(service, alice)
        link = service.share_file(alice.id, record.id)

        unshared = service.unshare_file(alice.id, record.id)

        assert unshared.is_shared is False
        with pytest.raises(FileNotFoundError):
            service.redeem_share(link.token)

    @pytest.mark.asyncio
    async def test_redeem_after_delete_not_found(self, service, alice):
        record = await _upload(service, alice)
        link = service.share_file(alice.id, record.id)

        await service.delete_file(alice.id, record.id)

        with pytest.raises(FileNotFoundError):
            service.redeem_share(link.token)

    def test_access_token_rejected_as_share_token(self, service, alice):
        with pytest.raises(InvalidTokenError):
            service.redeem_share(issue_access_token(alice.id, alice.username))

    @pytest.mark.asyncio
    async def test_share_token_rejected_as_access_token(self, service, alice):
        record = await _upload(service, alice)
        link = service.share_file(alice.id, record.id)

        with pytest.raises(UnauthorizedError):
            FileAccessService.authenticate_request(link.token)


class TestDelete:

    @pytest.mark.asyncio
    async def test_delete_removes_row_and_object(self, service, alice):
        record = await _upload(service, alice)

        result = await service.delete_file(alice.id, record.id)

        assert result.file_id == record.id
        assert result.storage_cleaned is True
        assert FileRepository.get_owned(record.id, alice.id) is None
        assert not service.object_store.exists(record.locator)

    @pytest.mark.asyncio
    async def test_object_removal_failure_still_deletes_row(self, service, alice):
        record = await _upload(service, alice)
        service.object_store.delete = AsyncMock(side_effect=OSError("busy"))

        result = await service.delete_file(alice.id, record.id)

        assert result.storage_cleaned is False
        assert service.list_files(alice.id) == []


class TestRegistryCallsOffEventLoop:

    @pytest.mark.asyncio
    async def test_upload_and_delete_registry_calls_run_in_executor(self, service, alice):
        loop_thread = threading.get_ident()
        seen_threads = []

        def recording(func):
            def wrapper(*args, **kwargs):
                seen_threads.append(threading.get_ident())
                return func(*args, **kwargs)
            return wrapper

        service.file_repo.create_file = recording(FileRepository.create_file)
        service.file_repo.delete_owned = recording(FileRepository.delete_owned)

        record = await _upload(service, alice)
        await service.delete_file(alice.id, record.id)

        assert len(seen_threads) == 2
        assert loop_thread not in seen_threads
