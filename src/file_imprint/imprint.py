"""Sampled content fingerprints.

An ``Imprint`` identifies a file by the digest of its head window and, for
files longer than ``SAMPLE_SIZE``, the digest of its tail window. Reading
at most two windows keeps the cost bounded regardless of file size.

Imprints are not full-content hashes. Two files longer than
``2 * SAMPLE_SIZE`` whose heads and tails match byte for byte have equal
imprints even if the unsampled middle differs.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .digest import Digest, HashFunction, default_hash_function
from .errors import ImprintIOError
from .probe import probe_length
from .sampler import Sampler

logger = logging.getLogger(__name__)

__all__ = ['Imprint', 'compute_imprint']

# Serialized form: flag byte, head length byte, head, then tail if flagged.
_NO_TAIL = 0x00
_HAS_TAIL = 0x01


@dataclass(frozen=True)
class Imprint:
    """Head digest plus optional tail digest of a file.

    Attributes:
        head: Digest of the first ``min(length, SAMPLE_SIZE)`` bytes
        tail: Digest of the last ``min(length - SAMPLE_SIZE, SAMPLE_SIZE)``
            bytes, or None when the file is at most ``SAMPLE_SIZE`` long
    """
    head: Digest
    tail: Optional[Digest] = None

    @classmethod
    def from_path(
        cls,
        path: Path | str,
        hash_function: Optional[HashFunction] = None,
    ) -> "Imprint":
        """
        Compute the imprint of a file.

        Args:
            path: Path to a regular file
            hash_function: Digest backend (default: SHA-256)

        Returns:
            Imprint of the file's head and tail windows

        Raises:
            NotAFileError: If the path is not a regular file
            ImprintIOError: If stat, open, seek or read fails, including
                short reads when the file shrinks during construction
        """
        if hash_function is None:
            hash_function = default_hash_function()

        length = probe_length(path)

        try:
            handle = open(path, 'rb')
        except OSError as e:
            raise ImprintIOError(
                f"Cannot open file: {path}",
                file_path=str(path),
                errno=e.errno,
            ) from e

        with handle:
            head, tail = Sampler(hash_function).digest_windows(handle, length, path)

        imprint = cls(head=head, tail=tail)
        logger.debug(f"Computed imprint: {{'path': {str(path)!r}, 'imprint': {str(imprint)!r}}}")
        return imprint

    @property
    def has_tail(self) -> bool:
        """True if the file was long enough to sample a tail window."""
        return self.tail is not None

    def to_bytes(self) -> bytes:
        """Serialize as flag byte, head length byte, head digest, tail digest."""
        head = self.head.value
        if self.tail is None:
            return bytes([_NO_TAIL, len(head)]) + head
        return bytes([_HAS_TAIL, len(head)]) + head + self.tail.value

    @classmethod
    def from_bytes(cls, data: bytes) -> "Imprint":
        """
        Rebuild an imprint produced by ``to_bytes``.

        Raises:
            ValueError: If the payload is truncated, has trailing bytes, or
                carries an unknown flag
        """
        if len(data) < 2:
            raise ValueError("Serialized imprint is too short")

        flag, size = data[0], data[1]
        head = data[2:2 + size]
        rest = data[2 + size:]
        if len(head) != size:
            raise ValueError("Serialized imprint has a truncated head digest")

        if flag == _NO_TAIL:
            if rest:
                raise ValueError("Serialized imprint has trailing bytes")
            return cls(head=Digest(bytes(head)))
        if flag == _HAS_TAIL:
            if len(rest) != size:
                raise ValueError("Serialized imprint has a malformed tail digest")
            return cls(head=Digest(bytes(head)), tail=Digest(bytes(rest)))
        raise ValueError(f"Unknown imprint flag: {flag:#04x}")

    def __str__(self) -> str:
        if self.tail is None:
            return self.head.hex()
        return f"{self.head.hex()}:{self.tail.hex()}"


def compute_imprint(
    path: Path | str,
    hash_function: Optional[HashFunction] = None,
) -> Imprint:
    """Compute the imprint of a file. See ``Imprint.from_path``."""
    return Imprint.from_path(path, hash_function)
