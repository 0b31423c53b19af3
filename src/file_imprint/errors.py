"""Error classes for file imprinting."""

import os
from typing import Any, Dict


class ImprintError(Exception):
    """Base exception for all file_imprint errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context

    def __str__(self) -> str:
        return self.message


class NotAFileError(ImprintError):
    """Path exists but does not reference a regular file."""
    pass


class ImprintIOError(ImprintError, OSError):
    """Stat, open, read or seek failed, or a read came back short.

    ``errno``, ``strerror`` and ``filename`` are filled from the ``errno``
    and ``file_path`` context entries, so code inspecting ``OSError``
    attributes sees the underlying failure. Short reads carry no errno.
    """

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message, **context)
        code = context.get('errno')
        self.errno = code
        self.strerror = os.strerror(code) if code is not None else None
        self.filename = context.get('file_path')


class UnsupportedAlgorithmError(ImprintError, ValueError):
    """Requested digest algorithm is not available."""
    pass


def classify_error(exception: Exception) -> str:
    """
    Classify an exception into an error category.

    Args:
        exception: The exception to classify

    Returns:
        Error category string: 'not_a_file', 'permission', 'io',
        'unsupported', or 'unknown'
    """
    if isinstance(exception, NotAFileError):
        return 'not_a_file'
    elif isinstance(exception, UnsupportedAlgorithmError):
        return 'unsupported'
    elif isinstance(exception, ImprintIOError):
        if isinstance(exception.__cause__, PermissionError):
            return 'permission'
        return 'io'
    elif isinstance(exception, PermissionError):
        return 'permission'
    elif isinstance(exception, OSError):
        return 'io'
    else:
        return 'unknown'
