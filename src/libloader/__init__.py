"""
libloader resolves the libraries declared in archive manifests, stores them
at content-addressed paths and verifies their SHA-512 digests.
"""

from .libloader_config import LibLoaderConfig
from .libloader_exceptions import (
    AcquisitionFailed,
    CorruptArchive,
    IntegrityViolation,
    LibLoaderException,
    MalformedVersion,
    MissingCandidateSource,
    NoAcquisitionSource,
    ResolutionDidNotConverge,
)
from .libloader_logger import LibLoaderLogger
from .library_loader import LibraryLoader, discover_candidates
from .resolution import ResolutionResult

__all__ = [
    "LibraryLoader",
    "LibLoaderConfig",
    "LibLoaderLogger",
    "ResolutionResult",
    "discover_candidates",
    "LibLoaderException",
    "MalformedVersion",
    "MissingCandidateSource",
    "CorruptArchive",
    "NoAcquisitionSource",
    "AcquisitionFailed",
    "IntegrityViolation",
    "ResolutionDidNotConverge",
]
