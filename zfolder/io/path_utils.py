"""String-level path helpers used while packing and materializing archives.

Stored entry paths always use ``/`` as the separator regardless of the host
platform, so these helpers operate on plain strings rather than
:class:`pathlib.Path` objects.
"""

from __future__ import annotations

import logging
import os
from typing import Iterator, Optional, Tuple

from ..errors import ArchiveIOError, PathTooLong

logger = logging.getLogger(__name__)

SEPARATOR: str = "/"


def encoded_length(path: str) -> int:
    """Return the number of bytes ``path`` occupies on the wire."""

    return len(path.encode("utf-8"))


def join_path(base: str, leaf: str, max_len: Optional[int] = None) -> str:
    """Concatenate ``base`` and ``leaf`` with a single ``/``.

    When ``max_len`` is given the UTF-8 length of the result is checked
    against it and :class:`PathTooLong` is raised if it does not fit.
    """

    if not base:
        joined = leaf
    elif base.endswith(SEPARATOR):
        joined = base + leaf
    else:
        joined = base + SEPARATOR + leaf
    if max_len is not None and encoded_length(joined) > max_len:
        raise PathTooLong(f"path is too long ({encoded_length(joined)} > {max_len} bytes): {joined}")
    return joined


def split_first_segment(path: str) -> Optional[Tuple[str, str]]:
    """Split ``path`` at its first ``/``.

    Returns ``(segment, remainder)`` or ``None`` once no separator is left.
    """

    head, sep, tail = path.partition(SEPARATOR)
    if not sep:
        return None
    return head, tail


def iter_ancestors(path: str) -> Iterator[str]:
    """Yield every ancestor prefix of ``path``, shortest first.

    ``"out/sub/b.txt"`` yields ``"out"`` then ``"out/sub"``. The final
    segment is never yielded. Empty prefixes (a leading ``/``) are skipped.
    """

    remainder = path
    consumed = 0
    while True:
        parts = split_first_segment(remainder)
        if parts is None:
            return
        segment, remainder = parts
        consumed += len(segment) + 1
        prefix = path[: consumed - 1]
        if prefix:
            yield prefix


def ensure_directories(path: str) -> None:
    """Create every missing ancestor directory of ``path``.

    Every prefix is checked, even when an earlier one already existed.
    Creation races against an existing directory are ignored; any other
    failure is raised as :class:`ArchiveIOError`.
    """

    for prefix in iter_ancestors(path):
        if os.path.isdir(prefix):
            continue
        try:
            os.mkdir(prefix)
        except FileExistsError:
            continue
        except (OSError, ValueError) as exc:
            raise ArchiveIOError(f"couldn't create directory -> {prefix}") from exc
        logger.debug("created directory %s", prefix)


def normalize_separators(path: str) -> str:
    """Convert host separators to ``/`` for storage inside an archive."""

    if os.sep != SEPARATOR:
        path = path.replace(os.sep, SEPARATOR)
    if os.altsep and os.altsep != SEPARATOR:
        path = path.replace(os.altsep, SEPARATOR)
    return path


def strip_anchor(path: str) -> str:
    """Drop a drive prefix and leading separators so ``path`` reads as relative.

    ``"/tmp/tree/a.txt"`` becomes ``"tmp/tree/a.txt"`` and ``"C:/data"`` becomes
    ``"data"``. Extraction joins stored names below its output directory.
    """

    drive, rest = os.path.splitdrive(path)
    if not drive and len(path) > 1 and path[1] == ":":
        rest = path[2:]
    return rest.lstrip(SEPARATOR)


def is_safe_relative(path: str) -> bool:
    """Return whether a stored path stays inside the directory it is joined to."""

    if not path or path.startswith(SEPARATOR) or "\x00" in path:
        return False
    # Windows drive letters
    if len(path) > 1 and path[1] == ":":
        return False
    return ".." not in path.split(SEPARATOR)
