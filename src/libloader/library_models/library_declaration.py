"""
Pydantic data models for the LibLoader-* declarations found in archive manifests.

A declaration names one library (group + name), the version it provides,
the SHA-512 digest its bytes must have, and where to get those bytes from:
an entry inside the declaring archive or a URL.
"""

import pathlib
import re
from typing import Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from libloader.libloader_exceptions import LibLoaderException
from libloader.libloader_settings import LibLoaderSettings
from libloader.library_models.version import Version

_HEX_PATTERN = re.compile(r"[0-9a-f]+")
_UNSAFE_CHARACTERS = ("/", "\\", "\0")


def _is_path_segment(value: str) -> bool:
    return bool(value) and value not in (".", "..") and not any(c in value for c in _UNSAFE_CHARACTERS)


class LibraryDeclaration(BaseModel):
    """
    One library declaration taken from an archive's manifest.

    Aliases match the manifest field names, so a declaration can be built
    straight from a {field: value} mapping of one manifest index.
    """

    group: str = Field(..., description="Group, e.g. org.example")
    name: str = Field(..., description="Library name within the group")
    classifier: Optional[str] = Field(None, description="Optional classifier appended to the file name")
    version: Version = Field(..., description="Declared version")
    digest: str = Field(..., description="Lowercase hex SHA-512 of the library bytes")
    url: Optional[str] = Field(None, description="URL to download from")
    file: Optional[str] = Field(None, description="Entry inside the declaring archive holding the bytes")
    build_time: int = Field(0, alias="buildTime", description="Build timestamp, only used as a tie-break")
    source: Optional[pathlib.Path] = Field(
        None, exclude=True, description="Archive the declaration was read from"
    )

    class Config:
        frozen = True
        populate_by_name = True
        arbitrary_types_allowed = True

    @field_validator("version", mode="before")
    @classmethod
    def _parse_version(cls, value):
        if isinstance(value, Version):
            return value
        return Version.parse(value)

    @field_validator("digest", mode="before")
    @classmethod
    def _normalize_digest(cls, value):
        if not isinstance(value, str):
            return value
        digest = value.strip().lower()
        if not _HEX_PATTERN.fullmatch(digest):
            raise LibLoaderException(f"Digest '{value}' is not a hex string")
        return digest

    @field_validator("group")
    @classmethod
    def _check_group(cls, value: str) -> str:
        # Every dot-separated segment becomes one directory below the store root
        if any(not _is_path_segment(segment) for segment in value.split(".")):
            raise LibLoaderException(f"Group '{value}' is not a dot-separated list of names")
        return value

    @field_validator("name", "classifier")
    @classmethod
    def _check_file_name_part(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and (not _is_path_segment(value) or ".." in value):
            raise LibLoaderException(f"'{value}' can not be used in a library file name")
        return value

    @property
    def key(self) -> str:
        """Logical key: the library irrespective of version, classifier or digest."""
        return f"{self.group}.{self.name}"

    def sort_key(self) -> Tuple[Version, int]:
        return self.version, self.build_time

    def supersedes(self, other: Optional["LibraryDeclaration"]) -> bool:
        """
        True if this declaration should replace other for the same key.

        A declaration supersedes nothing at all, or one that compares strictly
        lower by version and then by build time.
        """
        if other is None:
            return True
        return self.sort_key() > other.sort_key()

    def relative_path(self) -> pathlib.PurePosixPath:
        """
        Content-addressed location below the store root.

        <group as dirs>/<name>-<version>-<digest>/<name>-<version>[-<classifier>].jar
        """
        file_name = f"{self.name}-{self.version}"
        if self.classifier:
            file_name += f"-{self.classifier}"
        file_name += LibLoaderSettings.LIBRARY_EXTENSION
        return pathlib.PurePosixPath(
            *self.group.split("."),
            f"{self.name}-{self.version}-{self.digest}",
            file_name,
        )

    def __str__(self) -> str:
        classifier = f"-{self.classifier}" if self.classifier else ""
        return f"{self.key}{classifier}-{self.version}"


class MaterializedLibrary(BaseModel):
    """
    A declaration whose bytes are on disk at its content-addressed path.
    """

    declaration: LibraryDeclaration
    path: pathlib.Path
    actual_digest: str = Field(..., description="Digest computed from the bytes on disk")
    source: Optional[str] = Field(None, description="Where the bytes came from: existing, archive or url")

    class Config:
        frozen = True

    @property
    def key(self) -> str:
        return self.declaration.key

    @property
    def verified(self) -> bool:
        return self.actual_digest == self.declaration.digest
