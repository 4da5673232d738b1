from __future__ import annotations

import os
from dataclasses import dataclass
from typing import BinaryIO, Tuple

from . import store
from .constants import SIGNATURE, TRAILER_SIZE, TRAILER_STRUCT
from .errors import InvalidFormatError, NoFootprintError


@dataclass(frozen=True)
class Trailer:
    signature: bytes
    archive_offset: int


def encode_trailer(archive_offset: int) -> bytes:
    return TRAILER_STRUCT.pack(SIGNATURE, archive_offset)


def decode_trailer(raw: bytes) -> Trailer:
    """Decode the tail record.

    Only the signature is checked here; whether ``archive_offset`` points
    inside the container is up to the caller.
    """
    if len(raw) != TRAILER_SIZE:
        raise InvalidFormatError(f"Trailer must be {TRAILER_SIZE} bytes, got {len(raw)}")
    signature, archive_offset = TRAILER_STRUCT.unpack(raw)
    if signature != SIGNATURE:
        raise InvalidFormatError("Bad trailer signature")
    return Trailer(signature=signature, archive_offset=archive_offset)


def read_trailer(fh: BinaryIO) -> Tuple[int, Trailer]:
    """Locate the trailer at the end of ``fh``.

    Returns the container size together with the decoded trailer.
    """
    total = store.size(fh)
    if total < TRAILER_SIZE:
        raise NoFootprintError()
    fh.seek(total - TRAILER_SIZE, os.SEEK_SET)
    raw = fh.read(TRAILER_SIZE)
    try:
        trailer = decode_trailer(raw)
    except InvalidFormatError:
        raise NoFootprintError() from None
    return total, trailer
