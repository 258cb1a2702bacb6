"""
Declaration parser.

Reads the main section of an archive's META-INF/MANIFEST.MF and turns the
indexed LibLoader-* attributes into LibraryDeclaration objects:

    LibLoader-group0: org.example
    LibLoader-name0: core
    LibLoader-version0: 1.2.0
    LibLoader-digest0: 3f7a...
    LibLoader-file0: META-INF/libraries/core-1.2.0.jar
    LibLoader-buildTime0: 1514764800000
"""

import logging
import pathlib
import zipfile
import zlib
from typing import Dict, Iterator, Optional

from libloader.libloader_exceptions import CorruptArchive, LibLoaderException, MalformedVersion
from libloader.libloader_logger import LibLoaderLogger
from libloader.libloader_settings import LibLoaderSettings
from libloader.libloader_utils import FileUtils
from libloader.library_models import LibraryDeclaration, Version

# Older archives carry the digest under this field name instead of "digest"
LEGACY_DIGEST_FIELD = "sha512hash"


def parse_main_attributes(text: str) -> Dict[str, str]:
    """
    Parses the main section of a JAR manifest.

    Lines are "Key: Value"; a line starting with a single space continues
    the previous value; the main section ends at the first blank line.
    """
    attributes: Dict[str, str] = {}
    last_key: Optional[str] = None
    for line in text.splitlines():
        if not line:
            break
        if line.startswith(" "):
            if last_key is not None:
                attributes[last_key] += line[1:]
            continue
        key, sep, value = line.partition(":")
        if not sep:
            last_key = None
            continue
        last_key = key.strip()
        attributes[last_key] = value[1:] if value.startswith(" ") else value
    return attributes


class DeclarationParser:
    """
    Extracts library declarations from an archive's manifest.
    """

    def __init__(self, logger: LibLoaderLogger, namespace: str = LibLoaderSettings.DEFAULT_NAMESPACE):
        self.logger = logger
        self.namespace = namespace

    def read_attributes(self, archive_path: pathlib.Path) -> Dict[str, str]:
        """
        Returns the manifest main attributes of an archive, keyed by lowercased name.

        Files without a manifest, or that are not zip archives at all, have none.

        Raises:
            CorruptArchive: If the file cannot be read, or is a zip archive whose
                manifest is damaged
        """
        try:
            archive = zipfile.ZipFile(archive_path)
        except zipfile.BadZipFile:
            self.logger.log(f"{archive_path} is not a zip archive, it declares nothing", logging.WARNING)
            return {}
        except OSError as e:
            raise CorruptArchive(str(archive_path), str(e)) from e

        with archive:
            try:
                data = FileUtils.read_archive_entry(archive, LibLoaderSettings.MANIFEST_ENTRY)
            except (OSError, zipfile.BadZipFile, zlib.error) as e:
                raise CorruptArchive(str(archive_path), f"unreadable manifest: {e}") from e
        if data is None:
            return {}
        # Manifest attribute names are case-insensitive
        return {
            key.lower(): value
            for key, value in parse_main_attributes(data.decode("utf-8", errors="replace")).items()
        }

    def parse(self, archive_path: pathlib.Path) -> Iterator[LibraryDeclaration]:
        """
        Lazily yields the declarations of one archive.

        Indices are read from 0 upwards until an index has no group. An index
        without a digest is a requirement some other library is expected to
        provide; it is skipped without ending the scan.

        Raises:
            CorruptArchive: If the archive cannot be read
            MalformedVersion: If a declared version cannot be parsed
        """
        archive_path = pathlib.Path(archive_path)
        attributes = self.read_attributes(archive_path)

        index = 0
        while True:
            fields = self._fields_at(attributes, index)
            if fields.get("group") is None:
                return
            if fields.get("digest") is None:
                self.logger.log(
                    f"{archive_path.name}: {fields['group']}.{fields.get('name')} is required "
                    "but not provided here, skipping",
                    logging.DEBUG,
                )
            else:
                yield self._declaration(archive_path, index, fields)
            index += 1

    def _fields_at(self, attributes: Dict[str, str], index: int) -> Dict[str, Optional[str]]:
        def get(field: str) -> Optional[str]:
            return attributes.get(f"{self.namespace}-{field}{index}".lower())

        return {
            "group": get("group"),
            "name": get("name"),
            "classifier": get("classifier"),
            "version": get("version"),
            "digest": get("digest") or get(LEGACY_DIGEST_FIELD),
            "url": get("url"),
            "file": get("file"),
            "buildTime": get("buildTime"),
        }

    def _declaration(
        self, archive_path: pathlib.Path, index: int, fields: Dict[str, Optional[str]]
    ) -> LibraryDeclaration:
        if not fields["name"]:
            raise LibLoaderException(
                f"{archive_path}: declaration {index} ({fields['group']}) has no name"
            )
        try:
            version = Version.parse(fields["version"])
        except MalformedVersion:
            self.logger.log(
                f"{archive_path}: declaration {index} ({fields['group']}.{fields['name']}) "
                f"has malformed version '{fields['version']}'",
                logging.ERROR,
            )
            raise

        build_time = fields["buildTime"]
        try:
            build_time = int(build_time) if build_time is not None else 0
        except ValueError:
            raise LibLoaderException(
                f"{archive_path}: declaration {index} has non-integer build time '{build_time}'"
            ) from None

        return LibraryDeclaration(
            group=fields["group"],
            name=fields["name"],
            classifier=fields["classifier"] or None,
            version=version,
            digest=fields["digest"],
            url=fields["url"] or None,
            file=fields["file"] or None,
            build_time=build_time,
            source=archive_path,
        )
