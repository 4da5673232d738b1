"""
embedfs: embed a read-only file tree into the tail of any binary blob.

Files are appended to a container (usually an executable) as a plain tar
stream, followed by a fixed 20-byte trailer:

- signature ``EMBEDFS~000:`` (12 bytes)
- absolute offset of the tar stream, big-endian signed 64-bit

The container keeps working as before; the embedded tree can be listed and
read back later from the same bytes, or stripped off again with
:func:`truncate`. Once finished, an embedded fs is read only.
"""

from .errors import (
    ArchiveReplayError,
    EmbedFsError,
    InvalidFormatError,
    InvalidOffsetError,
    NoExistError,
    NoFootprintError,
    NotAvailableError,
    NotImplementedYetError,
)
from .pathutil import norm_path
from .reader import EmbedFs, EmbeddedFile, Entry, open_container
from .trailer import Trailer, decode_trailer, encode_trailer
from .truncator import truncate
from .writer import Embedder, create

__version__ = "0.1"

__all__ = [
    "create",
    "Embedder",
    "open_container",
    "EmbedFs",
    "EmbeddedFile",
    "Entry",
    "truncate",
    "Trailer",
    "encode_trailer",
    "decode_trailer",
    "norm_path",
    "EmbedFsError",
    "NotAvailableError",
    "NoExistError",
    "NoFootprintError",
    "InvalidOffsetError",
    "InvalidFormatError",
    "NotImplementedYetError",
    "ArchiveReplayError",
]
