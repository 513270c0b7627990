"""Populate an :class:`~zfolder.archive.model.Archive` from files on disk.

Files are read whole and appended to the archive's single content buffer.
Directory walks are depth-first and, by default, visit each directory's
entries in lexicographic order so the same tree always packs to the same
bytes.
"""

from __future__ import annotations

import logging
import os
from typing import Iterator, Optional, Tuple

from ..errors import ArchiveIOError, LengthError, PathTooLong, TooManyFiles
from ..io import file_utils, path_utils
from .model import UINT32_MAX, Archive, FileEntry

logger = logging.getLogger(__name__)


def add_file(archive: Archive, path: str, arcname: Optional[str] = None) -> FileEntry:
    """Read ``path`` and append it to ``archive`` under ``arcname`` (default: ``path``).

    The stored name never starts with a drive or ``/``, so absolute inputs
    extract below the output directory.
    """

    if archive.is_full:
        raise TooManyFiles(f"archive already holds the maximum of {archive.limits.max_files} files")

    name = path_utils.strip_anchor(path_utils.normalize_separators(arcname if arcname is not None else path))
    name_len = path_utils.encoded_length(name)
    if name_len > archive.limits.max_path_len:
        raise PathTooLong(f"path is too long ({name_len} > {archive.limits.max_path_len} bytes): {name}")

    data = file_utils.read_whole_file(path)
    if len(data) > UINT32_MAX:
        raise LengthError(f"file is too large for a 32-bit length -> {path}")
    if archive.content_length + len(data) > UINT32_MAX:
        raise LengthError(f"archive content would exceed 4 GiB when adding -> {path}")

    entry = FileEntry(path=name, length=len(data))
    archive.append(entry, data)
    logger.debug("added %s (%d bytes)", name, entry.length)
    return entry


def iter_directory(
    path: str,
    recursive: bool = True,
    *,
    sort: bool = True,
    prefix: str = "",
    max_len: Optional[int] = None,
) -> Iterator[Tuple[str, str]]:
    """Yield ``(filesystem_path, name)`` for regular files under ``path``.

    Names are relative to ``path`` and joined under ``prefix`` with ``/``.
    When ``max_len`` is set, every file and subdirectory name is checked
    against it, so an over-long empty directory is reported too. Symlinks
    and special files are skipped.
    """

    try:
        with os.scandir(path) as it:
            entries = list(it)
    except OSError as exc:
        raise ArchiveIOError(f"couldn't open directory -> {path}") from exc
    if sort:
        entries.sort(key=lambda entry: entry.name)

    for entry in entries:
        if entry.is_symlink():
            continue
        if entry.is_file(follow_symlinks=False):
            yield entry.path, path_utils.join_path(prefix, entry.name, max_len)
        elif recursive and entry.is_dir(follow_symlinks=False):
            dir_name = path_utils.join_path(prefix, entry.name, max_len)
            yield from iter_directory(entry.path, True, sort=sort, prefix=dir_name, max_len=max_len)


def add_directory(
    archive: Archive,
    path: str,
    recursive: bool = True,
    *,
    relative: bool = False,
    sort: bool = True,
) -> int:
    """Add every regular file under ``path`` to ``archive``.

    Stored names are ``path/<relative name>`` (without any leading drive or
    ``/``) or, with ``relative=True``, just the relative name. On any failure
    the archive is restored to the state it had before the call. Returns the
    number of files added.
    """

    base = "" if relative else path_utils.strip_anchor(path_utils.normalize_separators(path))
    mark = archive.mark()
    added = 0
    try:
        for fs_path, arcname in iter_directory(
            path, recursive, sort=sort, prefix=base, max_len=archive.limits.max_path_len
        ):
            add_file(archive, fs_path, arcname=arcname)
            added += 1
    except Exception:
        archive.rollback(mark)
        raise
    logger.info("added %d files from %s", added, path)
    return added
