"""Whole-file read and write helpers for zfolder."""

from __future__ import annotations

from typing import Union

from ..errors import ArchiveIOError

BytesLike = Union[bytes, bytearray, memoryview]


def read_whole_file(path: str) -> bytes:
    """Return the full contents of ``path``.

    Any failure to open or read the file, including a path the OS cannot
    represent, is raised as :class:`ArchiveIOError` with the cause chained.
    """

    try:
        with open(path, "rb") as f_in:
            return f_in.read()
    except (OSError, ValueError) as exc:
        raise ArchiveIOError(f"couldn't open file -> {path}") from exc


def write_whole_file(path: str, data: BytesLike) -> int:
    """Write ``data`` to ``path``, replacing any existing file.

    Returns the number of bytes written.
    """

    try:
        with open(path, "wb") as f_out:
            return f_out.write(data)
    except (OSError, ValueError) as exc:
        raise ArchiveIOError(f"couldn't write file -> {path}") from exc
