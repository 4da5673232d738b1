from __future__ import annotations

import os
import tarfile
from dataclasses import dataclass
from typing import BinaryIO, Dict, List, Tuple

from . import store
from .constants import TAR_ENCODING
from .errors import (
    ArchiveReplayError,
    InvalidOffsetError,
    NoExistError,
    NotAvailableError,
    NotImplementedYetError,
)
from .pathutil import norm_path
from .trailer import read_trailer


@dataclass
class Entry:
    name: str
    content_offset: int
    content_length: int
    mode: int = 0
    mtime: int = 0


def locate_archive(fh: BinaryIO) -> Tuple[int, int]:
    """Find and validate the embedded archive.

    Returns ``(container_size, archive_offset)``.
    """
    total, trailer = read_trailer(fh)
    if trailer.archive_offset < 0 or trailer.archive_offset >= total:
        raise InvalidOffsetError(trailer.archive_offset, total)
    return total, trailer.archive_offset


class EmbeddedFile:
    """Read-only view of one embedded entry.

    Reads go straight to the container at absolute offsets and never cross
    the entry's byte range. The container is shared with the owning
    :class:`EmbedFs` and is not closed here.
    """

    def __init__(self, source: BinaryIO, name: str, start: int, length: int):
        self.source = source
        self.name = name
        self.start = start
        self.length = length
        self.offset = 0
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _check_open(self):
        if self.closed:
            raise ValueError("I/O operation on closed file.")

    def readable(self) -> bool:
        return True

    def writable(self) -> bool:
        return False

    def seekable(self) -> bool:
        return False

    def read(self, size: int = -1) -> bytes:
        self._check_open()
        rest = self.length - self.offset
        if rest <= 0:
            return b""
        if size is None or size < 0:
            size = rest
        data = store.read_at(self.source, self.start + self.offset, size)
        if len(data) > rest:
            data = data[:rest]
        self.offset += len(data)
        return data

    def readinto(self, buffer) -> int:
        self._check_open()
        view = memoryview(buffer).cast("B")
        rest = self.length - self.offset
        if rest <= 0:
            return 0
        data = store.read_at(self.source, self.start + self.offset, len(view))
        n = min(len(data), rest)
        view[:n] = data[:n]
        self.offset += n
        return n

    def write(self, data) -> int:
        raise NotAvailableError()

    def truncate(self, size=None) -> int:
        raise NotAvailableError()

    def read_at(self, offset: int, size: int) -> bytes:
        raise NotImplementedYetError("read_at")

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        raise NotImplementedYetError("seek")

    def stat(self) -> os.stat_result:
        raise NotImplementedYetError("stat")

    def close(self):
        self.closed = True


class EmbedFs:
    """Read-only file system recovered from a container's embedded archive."""

    def __init__(self, origin: BinaryIO, offset: int):
        self.origin = origin
        self.offset = offset
        self.files: List[Entry] = []
        self.index: Dict[str, Entry] = {}

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def entries(self) -> List[Entry]:
        return list(self.files)

    def _add(self, entry: Entry):
        self.files.append(entry)
        # Same name twice: the later entry wins the index slot
        self.index[entry.name] = entry

    def _replay(self):
        self.origin.seek(self.offset, os.SEEK_SET)
        try:
            tar = tarfile.TarFile(fileobj=self.origin, mode="r", encoding=TAR_ENCODING)
            while True:
                member = tar.next()
                if member is None:
                    self._check_end_of_archive(tar.offset)
                    break
                self._add(
                    Entry(
                        name=norm_path(member.name),
                        content_offset=member.offset_data,
                        content_length=member.size,
                        mode=member.mode,
                        mtime=int(member.mtime),
                    )
                )
        except tarfile.TarError as exc:
            raise ArchiveReplayError(
                f"embedded archive is damaged after {len(self.files)} entries: {exc}",
                container=self,
            ) from exc

    def _check_end_of_archive(self, offset: int):
        # tarfile reports any unreadable header past stream offset 0 as a
        # normal end of archive; only an all-NUL block really is one.
        block = store.read_at(self.origin, offset, tarfile.BLOCKSIZE)
        if block != bytes(tarfile.BLOCKSIZE):
            raise ArchiveReplayError(
                f"embedded archive is damaged after {len(self.files)} entries: "
                f"invalid tar header at offset {offset}",
                container=self,
            )

    def list_entries(self, path: str) -> List[Entry]:
        """Return entries whose name starts with ``path``, in the order they were added.

        This is a literal prefix match: ``/a`` also matches ``/ab/2``.
        """
        prefix = norm_path(path)
        return [e for e in self.files if e.name.startswith(prefix)]

    def list_dir(self, path: str) -> List[str]:
        return [e.name for e in self.list_entries(path)]

    def is_file_exist(self, path: str) -> bool:
        return norm_path(path) in self.index

    def open_file(self, path: str) -> EmbeddedFile:
        """Open an embedded file for reading only."""
        path = norm_path(path)
        entry = self.index.get(path)
        if entry is None:
            raise NoExistError(path)
        return EmbeddedFile(self.origin, path, entry.content_offset, entry.content_length)

    def create_file(self, path: str):
        raise NotAvailableError()

    def temp_file(self):
        raise NotAvailableError()

    def move(self, src: str, dst: str):
        raise NotAvailableError()

    def close(self):
        self.origin.close()


def open_container(fh: BinaryIO) -> EmbedFs:
    """Open the embedded fs stored at the end of ``fh``.

    The container must have been finished by :meth:`Embedder.close`.
    """
    _total, offset = locate_archive(fh)
    fs = EmbedFs(fh, offset)
    fs._replay()
    return fs
