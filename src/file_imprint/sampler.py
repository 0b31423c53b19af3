"""Head and tail sampling.

A file is represented by at most two sample windows: the head, starting at
offset 0, and the tail, ending at the last byte. Each window is at most
``SAMPLE_SIZE`` bytes. The tail only exists for files longer than
``SAMPLE_SIZE`` and never overlaps the head.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional, Tuple

from .digest import Digest, HashFunction
from .errors import ImprintIOError

logger = logging.getLogger(__name__)

# 512 KiB per window
SAMPLE_SIZE = 0x80000


@dataclass(frozen=True)
class SampleWindow:
    """Contiguous byte range read from a file.

    Attributes:
        offset: Start offset in bytes
        length: Number of bytes in the window
    """
    offset: int
    length: int

    @property
    def end(self) -> int:
        """Offset one past the last byte of the window."""
        return self.offset + self.length


def _check_length(length: int) -> None:
    if length < 0:
        raise ValueError(f"File length must be non-negative, got {length}")


def head_window(length: int) -> SampleWindow:
    """Window over the first ``min(length, SAMPLE_SIZE)`` bytes."""
    _check_length(length)
    return SampleWindow(offset=0, length=min(length, SAMPLE_SIZE))


def tail_window(length: int) -> Optional[SampleWindow]:
    """Window ending at the last byte, or None when the head covers the file.

    The tail is ``min(length - SAMPLE_SIZE, SAMPLE_SIZE)`` bytes long, so for
    files up to ``2 * SAMPLE_SIZE`` it picks up exactly where the head stops.
    """
    _check_length(length)
    remainder = length - SAMPLE_SIZE
    if remainder <= 0:
        return None
    tail_length = min(remainder, SAMPLE_SIZE)
    return SampleWindow(offset=length - tail_length, length=tail_length)


def sample_windows(length: int) -> Tuple[SampleWindow, Optional[SampleWindow]]:
    """Head and optional tail window for a file of ``length`` bytes."""
    return head_window(length), tail_window(length)


def read_exact(handle: BinaryIO, view: memoryview, path: Path | str | None = None) -> None:
    """
    Fill ``view`` completely from ``handle``.

    Args:
        handle: Binary file object positioned at the start of the window
        view: Writable buffer to fill
        path: Path used in error context

    Raises:
        ImprintIOError: If end of file is reached before the buffer is full,
            or the underlying read fails
    """
    expected = len(view)
    filled = 0
    while filled < expected:
        try:
            count = handle.readinto(view[filled:])
        except OSError as e:
            raise ImprintIOError(
                f"Read failed: {path}",
                file_path=str(path),
                errno=e.errno,
            ) from e
        if not count:
            raise ImprintIOError(
                f"Short read: expected {expected} bytes, got {filled}",
                file_path=str(path),
                expected=expected,
                actual=filled,
            )
        filled += count


class Sampler:
    """Digests the head and tail windows of an open file.

    Both windows are read through one buffer sized to the head window. The
    head digest is computed before the buffer is reused for the tail.
    """

    def __init__(self, hash_function: HashFunction) -> None:
        self.hash_function = hash_function

    def digest_windows(
        self,
        handle: BinaryIO,
        length: int,
        path: Path | str | None = None,
    ) -> Tuple[Digest, Optional[Digest]]:
        """
        Read and digest the sample windows of ``handle``.

        Args:
            handle: Binary file object positioned at offset 0
            length: File length captured by the probe
            path: Path used in log messages and error context

        Returns:
            Tuple of (head digest, tail digest or None)

        Raises:
            ImprintIOError: On seek/read failure or short read
        """
        head, tail = sample_windows(length)
        view = memoryview(bytearray(head.length))

        read_exact(handle, view, path)
        head_digest = self.hash_function(view)

        tail_digest = None
        if tail is not None:
            try:
                handle.seek(-tail.length, os.SEEK_END)
            except OSError as e:
                raise ImprintIOError(
                    f"Seek failed: {path}",
                    file_path=str(path),
                    errno=e.errno,
                ) from e
            read_exact(handle, view[:tail.length], path)
            tail_digest = self.hash_function(view[:tail.length])

        logger.debug(
            f"Sampled file: {{'path': {str(path)!r}, 'length': {length}, "
            f"'head': {head.length}, 'tail': {tail.length if tail else None}, "
            f"'algorithm': {self.hash_function.name!r}}}"
        )
        return head_digest, tail_digest
