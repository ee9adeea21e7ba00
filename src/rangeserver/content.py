"""
=============================================================================
CONTENT ROOT
=============================================================================

The filesystem side of the server: maps a request path to an open file
under a fixed content root, plus the size and mtime of that file.

=============================================================================
RESOLUTION
=============================================================================

    GET /videos/intro.mp4

        content_root = ./content
        joined       = ./content/videos/intro.mp4
        open()       → handle
        fstat()      → size, mtime   (once per request, never cached)

Any failure to open (missing, a directory, no permission) means "not
found"; the caller answers 404.

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

    GET /../../etc/passwd HTTP/1.1

With confine_to_root enabled (the default) the joined path is resolved
(following ".." and symlinks) and must still be inside the root:

    full_path = (root / user_input).resolve()
    full_path.relative_to(root)     # ValueError if outside

Anything outside is logged and treated as not found. With confine_to_root
disabled the path is joined verbatim and nothing stops a client from
walking out of the root.

=============================================================================
"""

import os
import stat
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, Optional
from urllib.parse import unquote


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileMetadata:
    """Size and modification time of an opened file."""

    size_bytes: int
    last_modified: datetime


class ResolvedFile:
    """
    An open file plus its metadata.

    Owns the file handle. Use as a context manager so the handle is closed
    on every exit path:

        with content_root.resolve(request.path) as resolved:
            writer.respond(conn, resolved, ...)
    """

    def __init__(self, path: Path, handle: BinaryIO, metadata: FileMetadata):
        self.path = path
        self.handle = handle
        self.metadata = metadata

    @property
    def size_bytes(self) -> int:
        return self.metadata.size_bytes

    @property
    def last_modified(self) -> datetime:
        return self.metadata.last_modified

    def read_range(self, offset: int, length: int, chunk_size: int = 8192):
        """
        Yield up to `length` bytes starting at `offset`, in chunks.

        Stops early if the file ends first; the caller compares what it got
        with what it declared.
        """
        self.handle.seek(offset)
        remaining = length
        while remaining > 0:
            chunk = self.handle.read(min(chunk_size, remaining))
            if not chunk:
                break
            remaining -= len(chunk)
            yield chunk

    def close(self):
        self.handle.close()

    def __enter__(self) -> "ResolvedFile":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class ContentRoot:
    """
    Resolves request paths against a content directory.

    Args:
        root_dir: Directory all served files live under.
        confine_to_root: Reject paths that resolve outside root_dir.
    """

    def __init__(self, root_dir: str, confine_to_root: bool = True):
        self.root_dir = Path(root_dir).resolve()
        self.confine_to_root = confine_to_root

        if not self.root_dir.is_dir():
            raise ValueError(f"Content root does not exist: {root_dir}")

    def resolve(self, request_path: str) -> Optional[ResolvedFile]:
        """
        Open the file a request path points at.

        Returns:
            ResolvedFile with an open handle, or None if nothing can be
            opened there.

        Raises:
            OSError: If the file opened but could not be stat-ed.
        """
        full_path = self._full_path(request_path)
        if full_path is None:
            return None

        try:
            handle = open(full_path, "rb")
        except (OSError, ValueError) as e:
            logger.info(f"File ({full_path}) not found: {e}")
            return None

        try:
            st = os.fstat(handle.fileno())
        except OSError:
            handle.close()
            raise

        # open() succeeds on some platforms for directories; those are not files
        if not stat.S_ISREG(st.st_mode):
            handle.close()
            logger.info(f"File ({full_path}) not found: not a regular file")
            return None

        logger.debug(f"Found file: {full_path}")
        metadata = FileMetadata(
            size_bytes=st.st_size,
            last_modified=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
        )
        return ResolvedFile(full_path, handle, metadata)

    def _full_path(self, request_path: str) -> Optional[Path]:
        # Query strings and fragments never name a file
        relative = unquote(request_path.split("?", 1)[0].split("#", 1)[0]).lstrip("/")

        if not self.confine_to_root:
            return self.root_dir / relative

        try:
            full_path = (self.root_dir / relative).resolve()
            full_path.relative_to(self.root_dir)
        except ValueError:
            logger.warning(f"Path traversal attempt: {request_path}")
            return None
        return full_path
