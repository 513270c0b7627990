"""In-memory archive model: file entries plus one contiguous content buffer.

The byte offset of an entry is never stored. It is always the sum of the
lengths of the entries before it, so ``entries`` and ``content`` must only
ever change together.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Tuple

from ..errors import TooManyFiles

DEFAULT_MAX_PATH_LEN: int = 128
PATH_LEN_CEILING: int = 255  # path length is serialized in one byte
DEFAULT_MAX_FILES: int = 2048
UINT32_MAX: int = 0xFFFFFFFF


@dataclass(frozen=True)
class ArchiveLimits:
    """Configured ceilings enforced by both the builder and the parser."""

    max_path_len: int = DEFAULT_MAX_PATH_LEN
    max_files: int = DEFAULT_MAX_FILES

    def __post_init__(self) -> None:
        if not 1 <= self.max_path_len <= PATH_LEN_CEILING:
            raise ValueError(f"max_path_len must be between 1 and {PATH_LEN_CEILING}.")
        if not 1 <= self.max_files <= UINT32_MAX:
            raise ValueError("max_files must fit in an unsigned 32-bit count.")


@dataclass(frozen=True)
class FileEntry:
    """Metadata for one packed file."""

    path: str
    length: int

    @property
    def encoded_path(self) -> bytes:
        return self.path.encode("utf-8")


@dataclass
class Archive:
    """A packed set of files and their concatenated content."""

    limits: ArchiveLimits = field(default_factory=ArchiveLimits)
    entries: List[FileEntry] = field(default_factory=list)
    content: bytearray = field(default_factory=bytearray)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def content_length(self) -> int:
        return len(self.content)

    @property
    def is_full(self) -> bool:
        return len(self.entries) >= self.limits.max_files

    def append(self, entry: FileEntry, data: bytes) -> None:
        if self.is_full:
            raise TooManyFiles(f"archive already holds the maximum of {self.limits.max_files} files")
        if len(data) != entry.length:
            raise ValueError("Entry length does not match the data being appended.")
        self.content += data
        self.entries.append(entry)

    def replace(self, entries: Iterable[FileEntry], content: bytes) -> None:
        """Swap in a complete set of entries and content in one step."""

        new_entries = list(entries)
        if sum(entry.length for entry in new_entries) != len(content):
            raise ValueError("Entry lengths do not add up to the content length.")
        self.entries = new_entries
        self.content = bytearray(content)

    def mark(self) -> Tuple[int, int]:
        return len(self.entries), len(self.content)

    def rollback(self, mark: Tuple[int, int]) -> None:
        """Drop everything appended after ``mark`` was taken."""

        n_entries, n_bytes = mark
        del self.entries[n_entries:]
        del self.content[n_bytes:]

    def clear(self) -> None:
        self.entries = []
        self.content = bytearray()

    def offset_of(self, index: int) -> int:
        if not 0 <= index < len(self.entries):
            raise IndexError(f"no entry {index} in archive of {len(self.entries)} files")
        return sum(entry.length for entry in self.entries[:index])

    def get_file_bytes(self, index: int) -> bytes:
        start = self.offset_of(index)
        return bytes(self.content[start : start + self.entries[index].length])

    def iter_files(self) -> Iterator[Tuple[FileEntry, bytes]]:
        offset = 0
        for entry in self.entries:
            yield entry, bytes(self.content[offset : offset + entry.length])
            offset += entry.length


def new_archive(limits: Optional[ArchiveLimits] = None) -> Archive:
    return Archive(limits=limits or ArchiveLimits())


def get_file_bytes(archive: Archive, index: int) -> bytes:
    """Return a copy of the content of entry ``index``."""

    return archive.get_file_bytes(index)
