"""
Library acquisition for libloader.

This package handles:
1. Computing content-addressed store paths
2. Extracting libraries from their declaring archive
3. Downloading libraries from URLs
4. Verifying the SHA-512 digest of what ends up on disk
"""

from .acquisition_plan import AcquisitionPlan, AcquisitionSource, content_path
from .acquirer import LibraryAcquirer

__all__ = [
    "AcquisitionPlan",
    "AcquisitionSource",
    "LibraryAcquirer",
    "content_path",
]
