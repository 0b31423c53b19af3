"""Sampled head/tail file fingerprints for fast duplicate and change detection."""

from .config import ConfigLoader, DigestConfig, ImprintConfig, load_config
from .digest import (
    Digest, HashFunction, HashlibHashFunction, available_algorithms,
    default_hash_function, get_hash_function
)
from .duplicates import DuplicateReport, find_duplicates, group_by_length
from .errors import (
    ImprintError, ImprintIOError, NotAFileError, UnsupportedAlgorithmError,
    classify_error
)
from .imprint import Imprint, compute_imprint
from .logging import (
    ContextFieldFilter, LogContext, StructuredFormatter, current_log_fields,
    setup_logging, setup_logging_from_config
)
from .logging_config import LoggingConfig
from .metadata_key import FileMetadataKey
from .probe import probe, probe_length
from .sampler import SAMPLE_SIZE, SampleWindow, Sampler, sample_windows

__version__ = "0.1.0"

__all__ = [
    'SAMPLE_SIZE',
    'Imprint',
    'compute_imprint',
    'FileMetadataKey',
    'Digest',
    'HashFunction',
    'HashlibHashFunction',
    'available_algorithms',
    'default_hash_function',
    'get_hash_function',
    'SampleWindow',
    'Sampler',
    'sample_windows',
    'probe',
    'probe_length',
    'DuplicateReport',
    'find_duplicates',
    'group_by_length',
    'ImprintError',
    'ImprintIOError',
    'NotAFileError',
    'UnsupportedAlgorithmError',
    'classify_error',
    'ConfigLoader',
    'DigestConfig',
    'ImprintConfig',
    'load_config',
    'LoggingConfig',
    'LogContext',
    'ContextFieldFilter',
    'StructuredFormatter',
    'current_log_fields',
    'setup_logging',
    'setup_logging_from_config',
]
