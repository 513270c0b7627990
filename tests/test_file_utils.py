import pytest

from zfolder.errors import ArchiveIOError
from zfolder.io import file_utils


def test_read_whole_file(tmp_path):
    file_path = tmp_path / "example.bin"
    file_path.write_bytes(b"\x00hello\xff")
    assert file_utils.read_whole_file(str(file_path)) == b"\x00hello\xff"


def test_read_whole_file_missing_path(tmp_path):
    with pytest.raises(ArchiveIOError) as excinfo:
        file_utils.read_whole_file(str(tmp_path / "missing"))
    assert isinstance(excinfo.value.__cause__, FileNotFoundError)


def test_write_whole_file_replaces_contents(tmp_path):
    target = tmp_path / "out.bin"
    target.write_bytes(b"old contents that are longer")
    written = file_utils.write_whole_file(str(target), b"new")
    assert written == 3
    assert target.read_bytes() == b"new"


def test_write_whole_file_into_missing_directory(tmp_path):
    with pytest.raises(ArchiveIOError):
        file_utils.write_whole_file(str(tmp_path / "nope" / "out.bin"), b"data")


def test_paths_with_nul_are_reported_as_io_errors(tmp_path):
    with pytest.raises(ArchiveIOError):
        file_utils.write_whole_file(str(tmp_path / "bad\x00name"), b"data")
    with pytest.raises(ArchiveIOError):
        file_utils.read_whole_file(str(tmp_path / "bad\x00name"))
