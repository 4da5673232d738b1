from __future__ import annotations

import os
import stat
import tarfile
from typing import BinaryIO, Optional

from .constants import TAR_ENCODING, TAR_FORMAT
from .errors import NotAvailableError
from .pathutil import norm_path
from .trailer import encode_trailer


def _raise(exc: OSError):
    raise exc


class Embedder:
    """Appends files to the end of a container as a tar stream.

    The archive starts at the container's current position. Entries become
    visible to readers only after :meth:`close` has written the trailer.
    The container itself is never closed by the embedder.
    """

    def __init__(self, fh: BinaryIO):
        self.fh = fh
        self.archive_start = fh.tell()
        self.tar: Optional[tarfile.TarFile] = tarfile.TarFile(
            fileobj=fh,
            mode="w",
            format=TAR_FORMAT,
            encoding=TAR_ENCODING,
            dereference=True,
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        # Do not seal a half-written archive
        if exc_type is None and self.tar is not None:
            self.close()

    @property
    def closed(self) -> bool:
        return self.tar is None

    def _require_open(self) -> tarfile.TarFile:
        if self.tar is None:
            raise NotAvailableError("embedder is closed, embedfs is no longer write-capable")
        return self.tar

    def embed_file(self, path: str, target: str):
        """Embed the file at ``path`` under the absolute name ``target``."""
        tar = self._require_open()
        st = os.stat(path)
        if not stat.S_ISREG(st.st_mode):
            raise IsADirectoryError(f"Not a regular file: {path}")
        info = tar.gettarinfo(path)
        # gettarinfo strips leading slashes; names are stored rooted
        info.name = norm_path(target)
        info.mtime = int(st.st_mtime)
        with open(path, "rb") as src:
            tar.addfile(info, src)

    def embed_directory(self, root: str, prefix: str):
        """Embed every regular file below ``root`` as ``prefix`` + relative path.

        Names are sorted within each directory, and a directory's files come
        before its subdirectories. A missing or unreadable directory raises
        the underlying OSError.
        """
        self._require_open()
        for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
            dirnames.sort()
            for fn in sorted(filenames):
                full = os.path.join(dirpath, fn)
                if not os.path.isfile(full):
                    continue
                rel = os.path.relpath(full, start=root)
                self.embed_file(full, prefix + "/" + rel.replace(os.sep, "/"))

    def close(self):
        """Finish the tar stream and write the trailer.

        After this call the embedder is terminal.
        """
        tar = self._require_open()
        tar.close()
        self.tar = None
        self.fh.write(encode_trailer(self.archive_start))
        self.fh.flush()


def create(fh: BinaryIO) -> Embedder:
    """Start a new embedded fs at the current position of ``fh``."""
    return Embedder(fh)
