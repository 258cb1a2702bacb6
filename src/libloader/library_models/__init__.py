"""
Library models for libloader.

This package provides the Version value type and the Pydantic data models
for library declarations and the libraries materialized from them.
"""

from .version import Version
from .library_declaration import (
    LibraryDeclaration,
    MaterializedLibrary,
)

__all__ = [
    "Version",
    "LibraryDeclaration",
    "MaterializedLibrary",
]
