"""
Unit tests for resolving request paths against the content root.
"""

import logging
from pathlib import Path

import pytest

from rangeserver.content import ContentRoot, ResolvedFile

from conftest import INDEX_BYTES, VIDEO_BYTES


@pytest.fixture
def content_root(content_dir: Path) -> ContentRoot:
    return ContentRoot(str(content_dir))


class TestContentRoot:
    """Tests for ContentRoot.resolve()."""

    def test_resolve_existing_file(self, content_root):
        resolved = content_root.resolve("/index.html")

        assert isinstance(resolved, ResolvedFile)
        with resolved:
            assert resolved.size_bytes == len(INDEX_BYTES)
            assert resolved.last_modified.tzinfo is not None
            assert resolved.path.name == "index.html"

    def test_resolve_nested_file(self, content_root):
        with content_root.resolve("/docs/readme.txt") as resolved:
            assert resolved.size_bytes == len(b"hello from docs\n")

    def test_missing_file(self, content_root):
        assert content_root.resolve("/missing.txt") is None

    def test_directory_is_not_found(self, content_root):
        assert content_root.resolve("/docs") is None
        assert content_root.resolve("/") is None

    def test_query_and_fragment_stripped(self, content_root):
        with content_root.resolve("/index.html?v=2#top") as resolved:
            assert resolved.size_bytes == len(INDEX_BYTES)

    def test_percent_decoded(self, content_dir, content_root):
        (content_dir / "my clip.mp4").write_bytes(b"x" * 10)

        with content_root.resolve("/my%20clip.mp4") as resolved:
            assert resolved.size_bytes == 10

    def test_null_byte_is_not_found(self, content_root):
        assert content_root.resolve("/index.html%00.txt") is None

    def test_metadata_reflects_current_size(self, content_dir, content_root):
        with content_root.resolve("/index.html") as resolved:
            assert resolved.size_bytes == 200

        (content_dir / "index.html").write_bytes(b"short")

        with content_root.resolve("/index.html") as resolved:
            assert resolved.size_bytes == 5

    def test_stat_failure_propagates(self, content_root, monkeypatch):
        """A file that opens but cannot be stat-ed is an I/O error, not a 404."""
        opened = []
        real_open = open

        def tracking_open(*args, **kwargs):
            handle = real_open(*args, **kwargs)
            opened.append(handle)
            return handle

        def failing_fstat(fd):
            raise OSError(5, "Input/output error")

        monkeypatch.setattr("builtins.open", tracking_open)
        monkeypatch.setattr("rangeserver.content.os.fstat", failing_fstat)

        with pytest.raises(OSError):
            content_root.resolve("/index.html")

        monkeypatch.undo()
        assert len(opened) == 1
        assert opened[0].closed

    def test_root_must_exist(self, tmp_path):
        with pytest.raises(ValueError):
            ContentRoot(str(tmp_path / "nope"))


class TestPathConfinement:
    """Requests must not escape the content root unless confinement is off."""

    @pytest.mark.parametrize("path", [
        "/../secret.txt",
        "/docs/../../secret.txt",
        "/%2e%2e/secret.txt",
        "/..%2fsecret.txt",
    ])
    def test_traversal_is_not_found(self, content_root, path, caplog):
        with caplog.at_level(logging.WARNING, logger="rangeserver.content"):
            assert content_root.resolve(path) is None

        assert "Path traversal attempt" in caplog.text

    def test_dot_segments_inside_root_allowed(self, content_root):
        with content_root.resolve("/docs/../index.html") as resolved:
            assert resolved.size_bytes == len(INDEX_BYTES)

    def test_unconfined_joins_verbatim(self, content_dir):
        root = ContentRoot(str(content_dir), confine_to_root=False)

        with root.resolve("/../secret.txt") as resolved:
            assert resolved.handle.read() == b"top secret"


class TestResolvedFile:
    """Tests for reading byte ranges from an open file."""

    def test_read_range(self, content_root):
        with content_root.resolve("/video.mp4") as resolved:
            data = b"".join(resolved.read_range(100, 50))

        assert data == VIDEO_BYTES[100:150]

    def test_read_range_chunks(self, content_root):
        with content_root.resolve("/video.mp4") as resolved:
            chunks = list(resolved.read_range(0, 1000, chunk_size=300))

        assert [len(c) for c in chunks] == [300, 300, 300, 100]

    def test_read_range_stops_at_eof(self, content_root):
        with content_root.resolve("/video.mp4") as resolved:
            data = b"".join(resolved.read_range(990, 100))

        assert data == VIDEO_BYTES[990:]

    def test_read_range_past_eof(self, content_root):
        with content_root.resolve("/video.mp4") as resolved:
            assert list(resolved.read_range(5000, 10)) == []

    def test_context_manager_closes_handle(self, content_root):
        with content_root.resolve("/index.html") as resolved:
            pass

        assert resolved.handle.closed
