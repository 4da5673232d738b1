class EmbedFsError(Exception):
    """Base class for embedfs-specific errors."""


class NotAvailableError(EmbedFsError):
    """Operation needs write access, but embedfs is a read only file system."""

    def __init__(self, message: str = "not available, embedfs is read only file system"):
        super().__init__(message)


class NoExistError(EmbedFsError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"file is not exist: {path}")


# Trailer related
class InvalidFormatError(EmbedFsError):
    pass


class NoFootprintError(EmbedFsError):
    def __init__(self, message: str = "no embedfs footprint found"):
        super().__init__(message)


class InvalidOffsetError(EmbedFsError):
    def __init__(self, offset: int, size: int):
        self.offset = offset
        self.size = size
        super().__init__(f"embedfs offset {offset} is out of bounds of file (size {size})")


class NotImplementedYetError(EmbedFsError):
    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"{operation}: not implemented yet")


class ArchiveReplayError(EmbedFsError):
    """Raised when the embedded tar stream cannot be replayed to its end.

    ``container`` holds the handle built from the entries recovered before the
    failure, so callers may still inspect or read them.
    """

    def __init__(self, message: str, container=None):
        self.container = container
        super().__init__(message)
