"""
Acquisition plans.

Captures where a declaration's bytes will live in the content-addressed
store and how they are going to be obtained.
"""

import os
import pathlib
from typing import Optional

from libloader.libloader_exceptions import LibLoaderException
from libloader.library_models import LibraryDeclaration


class AcquisitionSource:
    """Where the bytes of a materialized library came from."""

    EXISTING = "existing"
    ARCHIVE = "archive"
    URL = "url"


def content_path(declaration: LibraryDeclaration, store_root: pathlib.Path) -> pathlib.Path:
    """
    Absolute, content-addressed path of a declaration below store_root.

    Depends only on group, name, version, digest and classifier, never on
    which archive declared the library or when.

    Raises:
        LibLoaderException: If the path would leave store_root
    """
    root = pathlib.Path(store_root).absolute()
    path = root.joinpath(*declaration.relative_path().parts)
    if os.path.commonpath([root, os.path.normpath(path)]) != str(root):
        raise LibLoaderException(f"{declaration} would be stored outside {root}: {path}")
    return path


class AcquisitionPlan:
    """
    A plan to materialize one library.
    """

    def __init__(self, declaration: LibraryDeclaration, destination_path: pathlib.Path):
        """
        Initialize an acquisition plan.

        Args:
            declaration: The winning declaration for the library
            destination_path: Content-addressed path the bytes are written to
        """
        self.declaration = declaration
        self.destination_path = destination_path
        self.source: Optional[str] = None
        self.actual_digest: Optional[str] = None

    @property
    def key(self) -> str:
        return self.declaration.key

    def __repr__(self) -> str:
        return f"AcquisitionPlan(key={self.key}, source={self.source}, path={self.destination_path})"
