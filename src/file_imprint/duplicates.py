"""Duplicate candidate grouping over caller-supplied paths.

Grouping runs in two stages:

1. Bucket paths by ``FileMetadataKey`` (length only). Lengths seen once
   cannot have duplicates and are dropped without reading any content.
2. Compute an ``Imprint`` for every remaining path and group by length
   and imprint. Imprints do not encode length, so files of different
   length are never grouped even if their windows match.

Length equality is only ever used to decide which files are worth
imprinting; every reported group is confirmed by imprint equality.

A file reached through more than one path (listed twice, a symlink and
its target, hard links) is bucketed once, under the first path seen.
Otherwise a single file would be reported as a duplicate of itself.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Hashable, Iterable, List, Optional, Tuple

from .digest import HashFunction, default_hash_function
from .errors import ImprintError, classify_error
from .imprint import Imprint
from .logging import LogContext
from .metadata_key import FileMetadataKey
from .probe import probe

logger = logging.getLogger(__name__)


@dataclass
class DuplicateReport:
    """Result of duplicate grouping.

    Attributes:
        groups: Lists of two or more paths sharing an imprint
        imprinted: Number of files that were imprinted
        unique_length: Number of files skipped because no other file had
            the same length
        aliases: Paths skipped because they reach a file already listed,
            mapped to the path that was kept
        errors: Paths that could not be probed or imprinted, mapped to their
            error category (only populated when errors are skipped)
    """
    groups: List[List[Path]] = field(default_factory=list)
    imprinted: int = 0
    unique_length: int = 0
    aliases: Dict[Path, Path] = field(default_factory=dict)
    errors: Dict[Path, str] = field(default_factory=dict)


def _record_error(report: Optional[DuplicateReport], path: Path, error: Exception) -> None:
    category = classify_error(error)
    if report is not None:
        report.errors[path] = category
    logger.warning(
        f"Skipping file: {{'path': {str(path)!r}, 'category': {category!r}}}",
        exc_info=error,
    )


def group_by_length(
    paths: Iterable[Path | str],
    report: Optional[DuplicateReport] = None,
    skip_errors: bool = False,
) -> Dict[FileMetadataKey, List[Path]]:
    """
    Bucket distinct files by length.

    Args:
        paths: Files to probe
        report: Receives aliases and, when skipping errors, failed paths
        skip_errors: Log and skip paths that cannot be probed instead of
            raising

    Returns:
        Mapping of length key to the paths of that length, in input order.
        Each file appears once even if several paths reach it.

    Raises:
        NotAFileError: If a path is not a regular file and errors are not skipped
        ImprintIOError: If a stat fails and errors are not skipped
    """
    buckets: Dict[FileMetadataKey, List[Path]] = defaultdict(list)
    seen: Dict[Hashable, Path] = {}

    for raw_path in paths:
        path = Path(raw_path)
        try:
            st = probe(path)
        except ImprintError as e:
            if not skip_errors:
                raise
            _record_error(report, path, e)
            continue

        # st_ino is 0 on filesystems without stable inode numbers
        identity: Hashable = (st.st_dev, st.st_ino) if st.st_ino else path.resolve()
        kept = seen.get(identity)
        if kept is not None:
            logger.debug(f"Skipping repeated file: {{'path': {str(path)!r}, 'kept': {str(kept)!r}}}")
            if report is not None:
                report.aliases[path] = kept
            continue
        seen[identity] = path

        buckets[FileMetadataKey(path, st.st_size)].append(path)
    return dict(buckets)


def find_duplicates(
    paths: Iterable[Path | str],
    hash_function: Optional[HashFunction] = None,
    skip_errors: bool = False,
) -> DuplicateReport:
    """
    Find groups of distinct files with equal imprints.

    Args:
        paths: Files to compare
        hash_function: Digest backend (default: SHA-256)
        skip_errors: Record failing paths in the report instead of raising

    Returns:
        DuplicateReport with groups sorted by their first path

    Raises:
        ImprintError: On the first failing path when ``skip_errors`` is False
    """
    if hash_function is None:
        hash_function = default_hash_function()

    report = DuplicateReport()

    with LogContext(algorithm=hash_function.name):
        buckets = group_by_length(paths, report, skip_errors)

        by_imprint: Dict[Tuple[int, Imprint], List[Path]] = defaultdict(list)
        for key, members in buckets.items():
            if len(members) < 2:
                report.unique_length += len(members)
                continue

            with LogContext(length=key.length, candidates=len(members)):
                logger.debug("Imprinting length group")
                for path in members:
                    try:
                        imprint = Imprint.from_path(path, hash_function)
                    except ImprintError as e:
                        if not skip_errors:
                            raise
                        _record_error(report, path, e)
                        continue
                    report.imprinted += 1
                    by_imprint[(key.length, imprint)].append(path)

        report.groups = sorted(
            (members for members in by_imprint.values() if len(members) > 1),
            key=lambda members: str(members[0]),
        )

        logger.info(
            f"Duplicate grouping complete: {{'groups': {len(report.groups)}, "
            f"'imprinted': {report.imprinted}, 'unique_length': {report.unique_length}, "
            f"'aliases': {len(report.aliases)}, 'errors': {len(report.errors)}}}"
        )
    return report
