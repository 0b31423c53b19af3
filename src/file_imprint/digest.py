"""Pluggable digest functions.

Sampling and imprint construction only depend on the ``HashFunction``
protocol: something with a ``name`` that turns a bytes-like buffer into a
fixed-size ``Digest``. Concrete backends wrap ``hashlib`` constructors and
are looked up by name so the algorithm can be chosen from configuration.
"""

import hashlib
from dataclasses import dataclass
from typing import Callable, Dict, Protocol, runtime_checkable

from .errors import UnsupportedAlgorithmError

__all__ = [
    'Digest',
    'HashFunction',
    'HashlibHashFunction',
    'DEFAULT_ALGORITHM',
    'available_algorithms',
    'get_hash_function',
    'default_hash_function',
]

DEFAULT_ALGORITHM = "sha256"

BytesLike = bytes | bytearray | memoryview


@dataclass(frozen=True, slots=True)
class Digest:
    """Fixed-size hash output, compared and hashed by value."""

    value: bytes

    def hex(self) -> str:
        """Lowercase hex rendering of the digest."""
        return self.value.hex()

    def __len__(self) -> int:
        return len(self.value)

    def __bytes__(self) -> bytes:
        return self.value

    def __str__(self) -> str:
        return self.value.hex()

    def __repr__(self) -> str:
        return f"Digest({self.value.hex()!r})"


@runtime_checkable
class HashFunction(Protocol):
    """Reduces an arbitrary buffer to a ``Digest``."""

    name: str

    def __call__(self, data: BytesLike) -> Digest:
        ...


class HashlibHashFunction:
    """``HashFunction`` backed by a ``hashlib`` constructor."""

    def __init__(self, name: str, factory: Callable[[], "hashlib._Hash"]) -> None:
        self.name = name
        self._factory = factory

    def __call__(self, data: BytesLike) -> Digest:
        hasher = self._factory()
        hasher.update(data)
        return Digest(hasher.digest())

    @property
    def digest_size(self) -> int:
        """Size in bytes of digests produced by this function."""
        return self._factory().digest_size

    def __repr__(self) -> str:
        return f"HashlibHashFunction({self.name!r})"


# Cryptographic backends only; all have fixed output size.
_ALGORITHMS: Dict[str, Callable[[], "hashlib._Hash"]] = {
    "sha256": hashlib.sha256,
    "sha512": hashlib.sha512,
    "sha3_256": hashlib.sha3_256,
    "blake2b": hashlib.blake2b,
    "blake2s": hashlib.blake2s,
}


def available_algorithms() -> list[str]:
    """Names accepted by ``get_hash_function``, sorted."""
    return sorted(_ALGORITHMS)


def get_hash_function(name: str) -> HashlibHashFunction:
    """
    Look up a digest backend by name.

    Names are case-insensitive and ``-`` is accepted in place of ``_``
    (``SHA3-256`` resolves to ``sha3_256``).

    Args:
        name: Algorithm name, e.g. ``"sha256"`` or ``"blake2b"``

    Returns:
        Hash function producing ``Digest`` values

    Raises:
        UnsupportedAlgorithmError: If the name is not a known algorithm
    """
    key = name.strip().lower().replace("-", "_")
    try:
        factory = _ALGORITHMS[key]
    except KeyError:
        raise UnsupportedAlgorithmError(
            f"Unsupported digest algorithm: {name!r}",
            algorithm=name,
            available=available_algorithms(),
        ) from None
    return HashlibHashFunction(key, factory)


def default_hash_function() -> HashlibHashFunction:
    """SHA-256, the backend used when none is configured."""
    return get_hash_function(DEFAULT_ALGORITHM)
