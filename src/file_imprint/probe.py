"""Filesystem probe: validate a path and capture its length."""

import errno
import logging
import os
import stat
from pathlib import Path

from .errors import ImprintIOError, NotAFileError

logger = logging.getLogger(__name__)


def probe(path: Path | str) -> os.stat_result:
    """
    Stat a path and check that it references a regular file.

    Symlinks are followed, so a link to a regular file is accepted and a
    link to a directory or device is rejected.

    Args:
        path: Path to the file

    Returns:
        Stat result of the file

    Raises:
        NotAFileError: If the path is not a regular file
        ImprintIOError: If the stat call fails, including paths the OS
            rejects outright (embedded NUL byte)
    """
    try:
        st = os.stat(path)
    except OSError as e:
        raise ImprintIOError(
            f"Cannot stat path: {path}",
            file_path=str(path),
            errno=e.errno,
        ) from e
    except ValueError as e:
        raise ImprintIOError(
            f"Invalid path: {path!r}",
            file_path=str(path),
            errno=errno.EINVAL,
        ) from e

    if not stat.S_ISREG(st.st_mode):
        raise NotAFileError(
            f"Path does not reference a file: {path}",
            file_path=str(path),
            mode=stat.filemode(st.st_mode),
        )

    logger.debug(f"Probed file: {{'path': {str(path)!r}, 'length': {st.st_size}}}")
    return st


def probe_length(path: Path | str) -> int:
    """Stat a path and return its byte length. See ``probe``."""
    return probe(path).st_size
