"""Length-only file key used to pre-filter duplicate candidates."""

from pathlib import Path
from typing import Any

from .probe import probe_length


class FileMetadataKey:
    """File path and length, compared by length alone.

    Two keys are equal whenever their files have the same length, whatever
    their paths or contents. This makes the key useful for bucketing
    candidates before computing an ``Imprint``: files of different length
    cannot be duplicates. Equal keys say nothing about content and must not
    be used where content equivalence is required.
    """

    __slots__ = ('_path', '_length')

    def __init__(self, path: Path, length: int) -> None:
        if length < 0:
            raise ValueError(f"File length must be non-negative, got {length}")
        self._path = Path(path)
        self._length = length

    @classmethod
    def from_path(cls, path: Path | str) -> "FileMetadataKey":
        """
        Probe a file and build its key. No content is read.

        Raises:
            NotAFileError: If the path is not a regular file
            ImprintIOError: If the stat call fails
        """
        return cls(Path(path), probe_length(path))

    @property
    def path(self) -> Path:
        return self._path

    @property
    def length(self) -> int:
        return self._length

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, FileMetadataKey):
            return NotImplemented
        return self._length == other._length

    def __hash__(self) -> int:
        return hash(self._length)

    def __repr__(self) -> str:
        return f"FileMetadataKey(path={str(self._path)!r}, length={self._length})"
