"""Zstandard compression helpers used as the archive's compression stage.

Archives are written as a single zstd frame with the decompressed size
recorded in the frame header, which lets the reader size its output buffer
before decoding anything.
"""

from __future__ import annotations

from typing import Optional

import zstandard

from ..errors import CompressionError, FormatError

# Named quality presets accepted by the CLI and to_file().
MIN_COMPRESSION: int = -5
DECENT_COMPRESSION: int = 8
GOOD_ENOUGH_COMPRESSION: int = 18
MAX_COMPRESSION: int = 20
DEFAULT_LEVEL: int = 3

MIN_LEVEL: int = -(1 << 17)  # ZSTD_minCLevel()
MAX_LEVEL: int = zstandard.MAX_COMPRESSION_LEVEL


def _check_bytes(data: object) -> None:
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError("data must be bytes-like")


def compress_bytes(data: bytes, level: int = DEFAULT_LEVEL) -> bytes:
    """Compress ``data`` into one zstd frame that records its content size."""

    _check_bytes(data)
    if not MIN_LEVEL <= level <= MAX_LEVEL:
        raise CompressionError(f"Compression level {level} is outside {MIN_LEVEL}..{MAX_LEVEL}.")
    try:
        compressor = zstandard.ZstdCompressor(level=level, write_content_size=True)
        return compressor.compress(bytes(data))
    except zstandard.ZstdError as exc:
        raise CompressionError("couldn't compress data") from exc


def query_decompressed_size(data: bytes) -> Optional[int]:
    """Return the decompressed size recorded in the frame, or ``None`` if absent.

    Raises :class:`FormatError` when ``data`` is not a readable zstd frame.
    """

    _check_bytes(data)
    try:
        size = zstandard.frame_content_size(bytes(data))
    except zstandard.ZstdError as exc:
        raise FormatError("couldn't retrieve size from file") from exc
    if size < 0:
        return None
    return size


def decompress_bytes(data: bytes, expected_size: int) -> bytes:
    """Decompress ``data`` and check it expands to exactly ``expected_size`` bytes."""

    _check_bytes(data)
    try:
        decompressor = zstandard.ZstdDecompressor()
        result = decompressor.decompress(bytes(data), max_output_size=expected_size)
    except zstandard.ZstdError as exc:
        raise CompressionError("couldn't decompress data") from exc
    if len(result) != expected_size:
        raise CompressionError(
            f"Decompressed {len(result)} bytes but the frame declared {expected_size}."
        )
    return result
