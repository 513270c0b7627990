import pytest

from zfolder.compression import zstd_utils
from zfolder.errors import CompressionError, FormatError


def test_compress_records_content_size():
    data = b"zfolder " * 500
    compressed = zstd_utils.compress_bytes(data, level=zstd_utils.DECENT_COMPRESSION)
    assert len(compressed) < len(data)
    assert zstd_utils.query_decompressed_size(compressed) == len(data)
    assert zstd_utils.decompress_bytes(compressed, len(data)) == data


@pytest.mark.parametrize(
    "level",
    [
        zstd_utils.MIN_COMPRESSION,
        zstd_utils.DEFAULT_LEVEL,
        zstd_utils.GOOD_ENOUGH_COMPRESSION,
        zstd_utils.MAX_COMPRESSION,
    ],
)
def test_quality_presets_are_accepted(level):
    compressed = zstd_utils.compress_bytes(b"preset", level=level)
    assert zstd_utils.decompress_bytes(compressed, 6) == b"preset"


def test_compress_rejects_out_of_range_level():
    with pytest.raises(CompressionError):
        zstd_utils.compress_bytes(b"data", level=zstd_utils.MAX_LEVEL + 1)


def test_compress_rejects_non_bytes():
    with pytest.raises(TypeError):
        zstd_utils.compress_bytes("text")  # type: ignore[arg-type]


def test_query_size_rejects_garbage():
    with pytest.raises(FormatError):
        zstd_utils.query_decompressed_size(b"\x00\x01\x02\x03\x04\x05")


def test_decompress_rejects_truncated_frame():
    compressed = zstd_utils.compress_bytes(bytes(range(256)) * 8)
    with pytest.raises(CompressionError):
        zstd_utils.decompress_bytes(compressed[:-4], 2048)
