"""Tests for the local-disk object store."""

import pytest

from fileshare.object_store import LocalObjectStore, ObjectTooLargeError, sanitize_name


async def _pieces(*chunks: bytes):
    for chunk in chunks:
        yield chunk


async def _collect(stream) -> bytes:
    return b"".join([piece async for piece in stream])


class TestSanitizeName:

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("notes.txt", "notes.txt"),
            ("my report (v2).pdf", "my_report__v2_.pdf"),
            ("../../etc/passwd", "_.._etc_passwd"),
            ("...", "file"),
            ("", "file"),
        ],
    )
    def test_sanitize_name(self, name, expected):
        assert sanitize_name(name) == expected

    def test_long_names_keep_extension(self):
        cleaned = sanitize_name("a" * 300 + ".pdf")

        assert len(cleaned) == 100
        assert cleaned.endswith(".pdf")


class TestLocalObjectStore:

    def test_new_locator_is_unique_and_owner_scoped(self, object_store):
        first = object_store.new_locator(1, "notes.txt")
        second = object_store.new_locator(1, "notes.txt")

        assert first != second
        assert first.startswith("1/")
        assert first.endswith("-notes.txt")

    def test_locator_outside_root_rejected(self, object_store):
        with pytest.raises(ValueError):
            object_store._path_for("../escape.txt")
        assert object_store.exists("../escape.txt") is False

    @pytest.mark.asyncio
    async def test_write_and_read_round_trip(self, object_store):
        locator = object_store.new_locator(1, "notes.txt")

        written = await object_store.write_stream(locator, _pieces(b"hello ", b"", b"world"), max_bytes=100)

        assert written == 11
        assert object_store.exists(locator)
        assert await _collect(object_store.read_stream(locator, piece_size=4)) == b"hello world"

    @pytest.mark.asyncio
    async def test_oversized_write_leaves_nothing_behind(self, object_store, storage_dir):
        locator = object_store.new_locator(1, "big.txt")

        with pytest.raises(ObjectTooLargeError):
            await object_store.write_stream(locator, _pieces(b"x" * 60, b"x" * 60), max_bytes=100)

        assert not object_store.exists(locator)
        assert [p for p in storage_dir.rglob("*") if p.is_file()] == []

    @pytest.mark.asyncio
    async def test_write_exactly_at_limit_succeeds(self, object_store):
        locator = object_store.new_locator(1, "edge.txt")

        written = await object_store.write_stream(locator, _pieces(b"x" * 100), max_bytes=100)

        assert written == 100

    @pytest.mark.asyncio
    async def test_delete(self, object_store):
        locator = object_store.new_locator(1, "notes.txt")
        await object_store.write_stream(locator, _pieces(b"data"), max_bytes=100)

        assert await object_store.delete(locator) is True
        assert not object_store.exists(locator)
        assert await object_store.delete(locator) is False

    @pytest.mark.asyncio
    async def test_read_missing_object_raises(self, object_store):
        with pytest.raises(FileNotFoundError):
            await _collect(object_store.read_stream("1/missing.txt"))

    def test_check_writable_creates_root(self, tmp_path):
        store = LocalObjectStore(str(tmp_path / "new-root"))

        assert store.check_writable() is True
        assert (tmp_path / "new-root").is_dir()
