from __future__ import annotations

from typing import BinaryIO

from .reader import locate_archive


def truncate(fh: BinaryIO) -> int:
    """Erase all embedfs data from ``fh``.

    The container is left exactly as it was before embedding. Returns the
    new container length.
    """
    _total, offset = locate_archive(fh)
    fh.truncate(offset)
    fh.flush()
    return offset
