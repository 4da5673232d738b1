from __future__ import annotations

import io
import os
from typing import BinaryIO, Optional


def _fileno(fh: BinaryIO) -> Optional[int]:
    try:
        return fh.fileno()
    except (AttributeError, io.UnsupportedOperation):
        return None


def size(fh: BinaryIO) -> int:
    """Return the current byte length of a container."""
    fd = _fileno(fh)
    if fd is not None:
        # Buffered writes are not visible to fstat until flushed
        fh.flush()
        return os.fstat(fd).st_size
    pos = fh.tell()
    try:
        return fh.seek(0, os.SEEK_END)
    finally:
        fh.seek(pos)


def read_at(fh: BinaryIO, offset: int, length: int) -> bytes:
    """Read up to ``length`` bytes at an absolute ``offset``.

    Uses pread when the container exposes a descriptor, so the shared
    stream position is left untouched. Otherwise the position is saved and
    restored around a plain seek/read.
    """
    if length <= 0:
        return b""
    fd = _fileno(fh)
    if fd is not None and hasattr(os, "pread"):
        fh.flush()
        return os.pread(fd, length, offset)
    pos = fh.tell()
    try:
        fh.seek(offset)
        return fh.read(length)
    finally:
        fh.seek(pos)
