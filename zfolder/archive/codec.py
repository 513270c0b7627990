"""Serialize archives to the zfolder wire format and materialize them on disk.

Decompressed layout (all integers little-endian)::

    magic           4 bytes  b"ZFLD"
    version         uint8
    entry_count     uint32
    entry_count x:
        path_length uint8
        file_length uint32
        path_bytes  path_length bytes, UTF-8, no terminator
    content_length  uint32
    content_bytes   content_length bytes, every file back-to-back in entry order

The serialized buffer is compressed as one zstd frame and written to disk.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..compression import zstd_utils
from ..errors import AlreadyExists, ArchiveIOError, FormatError, TooManyFiles
from ..io import file_utils, path_utils
from .model import UINT32_MAX, Archive, ArchiveLimits, FileEntry, get_file_bytes

logger = logging.getLogger(__name__)

HEADER_MAGIC: bytes = b"ZFLD"
HEADER_VERSION: int = 1
BYTE_ORDER = "little"

__all__ = [
    "HEADER_MAGIC",
    "HEADER_VERSION",
    "PackStats",
    "serialize",
    "deserialize",
    "max_payload_size",
    "to_file",
    "from_file",
    "extract_to",
    "get_file_bytes",
]


@dataclass
class PackStats:
    """Sizes reported after an archive has been written."""

    file_count: int
    original_size: int
    compressed_size: int


def _u8(value: int) -> bytes:
    return value.to_bytes(1, BYTE_ORDER)


def _u32(value: int) -> bytes:
    return value.to_bytes(4, BYTE_ORDER)


def serialize(archive: Archive) -> bytes:
    """Return the uncompressed wire representation of ``archive``."""

    total = sum(entry.length for entry in archive.entries)
    if total != archive.content_length:
        raise ValueError("Archive entry lengths do not add up to its content length.")
    if len(archive.entries) > archive.limits.max_files:
        raise TooManyFiles(f"archive holds {len(archive.entries)} files, more than the maximum of {archive.limits.max_files}")
    if archive.content_length > UINT32_MAX:
        raise ValueError("Archive content does not fit a 32-bit length field.")

    components = [HEADER_MAGIC, _u8(HEADER_VERSION), _u32(len(archive.entries))]
    for entry in archive.entries:
        encoded = entry.encoded_path
        if len(encoded) > 255:
            raise ValueError(f"Entry path does not fit a one-byte length: {entry.path}")
        components.extend([_u8(len(encoded)), _u32(entry.length), encoded])
    components.append(_u32(archive.content_length))
    components.append(bytes(archive.content))
    return b"".join(components)


def _take(payload: bytes, idx: int, size: int, what: str) -> Tuple[bytes, int]:
    end = idx + size
    if end > len(payload):
        raise FormatError(f"Archive truncated while reading {what}.")
    return payload[idx:end], end


def _take_u8(payload: bytes, idx: int, what: str) -> Tuple[int, int]:
    raw, idx = _take(payload, idx, 1, what)
    return raw[0], idx


def _take_u32(payload: bytes, idx: int, what: str) -> Tuple[int, int]:
    raw, idx = _take(payload, idx, 4, what)
    return int.from_bytes(raw, BYTE_ORDER), idx


def deserialize(payload: bytes, limits: Optional[ArchiveLimits] = None) -> Archive:
    """Parse an uncompressed archive buffer.

    Every read is bounds-checked. The result is only built once the whole
    buffer has been validated.
    """

    limits = limits or ArchiveLimits()
    payload = bytes(payload)
    idx = 0

    magic, idx = _take(payload, idx, len(HEADER_MAGIC), "magic")
    if magic != HEADER_MAGIC:
        raise FormatError("Magic bytes do not match the zfolder format.")
    version, idx = _take_u8(payload, idx, "version")
    if version != HEADER_VERSION:
        raise FormatError(f"Unsupported zfolder archive version {version}.")

    count, idx = _take_u32(payload, idx, "entry count")
    if count > limits.max_files:
        raise FormatError(f"Archive declares {count} files, more than the maximum of {limits.max_files}.")

    entries: List[FileEntry] = []
    for i in range(count):
        path_len, idx = _take_u8(payload, idx, f"path length of entry {i}")
        file_len, idx = _take_u32(payload, idx, f"file length of entry {i}")
        raw_path, idx = _take(payload, idx, path_len, f"path of entry {i}")
        if path_len > limits.max_path_len:
            raise FormatError(f"Entry {i} path is longer than {limits.max_path_len} bytes.")
        try:
            path = raw_path.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise FormatError(f"Entry {i} path is not valid UTF-8.") from exc
        if "\x00" in path:
            raise FormatError(f"Entry {i} path contains a NUL byte.")
        entries.append(FileEntry(path=path, length=file_len))

    content_len, idx = _take_u32(payload, idx, "content length")
    content, idx = _take(payload, idx, content_len, "content")
    if idx != len(payload):
        raise FormatError(f"{len(payload) - idx} bytes of trailing data after archive content.")

    declared = sum(entry.length for entry in entries)
    if declared != content_len:
        raise FormatError(f"Entry lengths add up to {declared} bytes but content holds {content_len}.")

    archive = Archive(limits=limits)
    archive.replace(entries, content)
    return archive


def max_payload_size(limits: ArchiveLimits) -> int:
    """Largest serialized archive that ``limits`` permit."""

    header = len(HEADER_MAGIC) + 1 + 4
    per_entry = 1 + 4 + limits.max_path_len
    return header + limits.max_files * per_entry + 4 + UINT32_MAX


def to_file(archive: Archive, output_path: str, quality: int = zstd_utils.DEFAULT_LEVEL) -> PackStats:
    """Serialize, compress and write ``archive`` to ``output_path``."""

    payload = serialize(archive)
    compressed = zstd_utils.compress_bytes(payload, level=quality)
    file_utils.write_whole_file(output_path, compressed)

    stats = PackStats(
        file_count=len(archive.entries),
        original_size=len(payload),
        compressed_size=len(compressed),
    )
    logger.info("number of files: %d", stats.file_count)
    logger.info("original size:   %d b -- %d kb", stats.original_size, stats.original_size // 1024)
    logger.info("compressed size: %d b -- %d kb", stats.compressed_size, stats.compressed_size // 1024)
    return stats


def from_file(path: str, limits: Optional[ArchiveLimits] = None) -> Archive:
    """Read, decompress and parse the archive stored at ``path``."""

    compressed = file_utils.read_whole_file(path)
    size = zstd_utils.query_decompressed_size(compressed)
    if size is None:
        raise FormatError(f"Archive {path} does not record its decompressed size.")
    ceiling = max_payload_size(limits or ArchiveLimits())
    if size > ceiling:
        raise FormatError(f"Archive {path} declares {size} decompressed bytes, more than the {ceiling} its limits allow.")
    payload = zstd_utils.decompress_bytes(compressed, size)
    archive = deserialize(payload, limits)
    logger.info("loaded %d files (%d bytes) from %s", len(archive.entries), archive.content_length, path)
    return archive


def extract_to(archive: Archive, output_dir: str, overwrite: bool = False) -> List[str]:
    """Write every entry of ``archive`` below ``output_dir``.

    Returns the written file paths in entry order. Any write failure aborts
    the whole extraction.
    """

    if os.path.exists(output_dir) and not overwrite:
        raise AlreadyExists(f"folder {output_dir} already exists")

    for entry in archive.entries:
        if not path_utils.is_safe_relative(entry.path):
            raise FormatError(f"Entry path escapes the output directory: {entry.path}")

    try:
        os.makedirs(output_dir, exist_ok=True)
    except OSError as exc:
        raise ArchiveIOError(f"couldn't create directory -> {output_dir}") from exc

    root = path_utils.normalize_separators(output_dir)
    written: List[str] = []
    for entry, data in archive.iter_files():
        target = path_utils.join_path(root, entry.path)
        path_utils.ensure_directories(target)
        file_utils.write_whole_file(target, data)
        logger.debug("extracted %s (%d bytes)", target, entry.length)
        written.append(target)
    logger.info("extracted %d files to %s", len(written), output_dir)
    return written
