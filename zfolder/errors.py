"""Exception hierarchy shared by every zfolder module."""

from __future__ import annotations


class ZFolderError(Exception):
    """Base class for all recoverable zfolder failures."""


class ArchiveIOError(ZFolderError, OSError):
    """Raised when a file or directory cannot be opened, read or written."""


class PathTooLong(ZFolderError):
    """Raised when a stored path would exceed the configured maximum length."""


class TooManyFiles(ZFolderError):
    """Raised when an archive would exceed the configured maximum file count."""


class LengthError(ZFolderError):
    """Raised when a file or the total content does not fit a 32-bit length field."""


class FormatError(ZFolderError):
    """Raised when archive bytes are malformed, truncated or inconsistent."""


class AlreadyExists(ZFolderError):
    """Raised when an extraction target exists and overwriting was not requested."""


class CompressionError(ZFolderError):
    """Raised when the zstd collaborator reports a failure."""
