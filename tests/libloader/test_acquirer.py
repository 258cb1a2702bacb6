"""
Tests for the library acquirer.
"""

import zipfile
from unittest import mock

import pytest
import requests

from libloader.libloader_exceptions import (
    AcquisitionFailed,
    IntegrityViolation,
    LibLoaderException,
    NoAcquisitionSource,
)
from libloader.libloader_utils import FileUtils
from libloader.library_acquirer import AcquisitionSource, LibraryAcquirer, content_path
from libloader.library_models import LibraryDeclaration, Version

from library_archives import build_archive, corrupt_entry, sha512

CORE = b"core library bytes"


class FakeResponse:
    """Stands in for a streamed requests.Response."""

    def __init__(self, body: bytes, status_code: int = 200):
        self.body = body
        self.status_code = status_code

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def iter_content(self, chunk_size=1):
        for start in range(0, len(self.body), 4):
            yield self.body[start:start + 4]


@pytest.fixture
def declaring_archive(tmp_path):
    return build_archive(tmp_path / "mods" / "a.jar", [], entries={"libs/core.bin": CORE})


def archive_declaration(source, digest=None, **overrides):
    fields = dict(
        group="com.x",
        name="core",
        version="1.0",
        digest=digest or sha512(CORE),
        file="libs/core.bin",
        source=source,
    )
    fields.update(overrides)
    return LibraryDeclaration(**fields)


def url_declaration(digest=None):
    return LibraryDeclaration(
        group="com.x",
        name="core",
        version="1.0",
        digest=digest or sha512(CORE),
        url="https://repo.example.com/core-1.0.jar",
    )


class TestContentPath:
    """Tests for content-addressed paths."""

    def test_layout(self, store_dir, declaring_archive):
        declaration = archive_declaration(declaring_archive)
        path = content_path(declaration, store_dir)
        assert path.is_absolute()
        assert path == store_dir.absolute() / "com" / "x" / f"core-1.0-{sha512(CORE)}" / "core-1.0.jar"

    def test_independent_of_source(self, store_dir, tmp_path, declaring_archive):
        a = archive_declaration(declaring_archive, build_time=1)
        b = archive_declaration(tmp_path / "other.jar", build_time=2, file=None, url="https://x")
        assert content_path(a, store_dir) == content_path(b, store_dir)

    @pytest.mark.parametrize("name", ["../../outside", "/tmp/outside"])
    def test_refuses_paths_outside_the_store(self, store_dir, name):
        # model_construct skips the field checks, as a hand-built declaration could
        declaration = LibraryDeclaration.model_construct(
            group="com.x", name=name, classifier=None, version=Version.parse("1"), digest="ab"
        )
        with pytest.raises(LibLoaderException):
            content_path(declaration, store_dir)


class TestLibraryAcquirer:
    """Tests for LibraryAcquirer."""

    @pytest.fixture
    def acquirer(self, store_dir, logger):
        return LibraryAcquirer(str(store_dir), logger)

    def test_extracts_from_archive(self, acquirer, declaring_archive):
        library = acquirer.materialize(archive_declaration(declaring_archive))
        assert library.path.read_bytes() == CORE
        assert library.verified
        assert library.source == AcquisitionSource.ARCHIVE
        assert library.path == acquirer.plan(library.declaration).destination_path

    def test_downloads_from_url(self, acquirer):
        with mock.patch("requests.get", return_value=FakeResponse(CORE)) as get:
            library = acquirer.materialize(url_declaration())
        assert library.path.read_bytes() == CORE
        assert library.source == AcquisitionSource.URL
        args, kwargs = get.call_args
        assert args == ("https://repo.example.com/core-1.0.jar",)
        assert kwargs["stream"] is True
        assert kwargs["timeout"] == (10.0, 10.0)

    def test_archive_entry_preferred_over_url(self, acquirer, declaring_archive):
        declaration = archive_declaration(declaring_archive, url="https://repo.example.com/core.jar")
        with mock.patch("requests.get") as get:
            acquirer.materialize(declaration)
        get.assert_not_called()

    def test_no_source(self, acquirer):
        declaration = LibraryDeclaration(group="com.x", name="core", version="1", digest=sha512(CORE))
        with pytest.raises(NoAcquisitionSource):
            acquirer.materialize(declaration)

    def test_missing_entry(self, acquirer, declaring_archive):
        with pytest.raises(AcquisitionFailed):
            acquirer.materialize(archive_declaration(declaring_archive, file="libs/missing.bin"))

    def test_download_timeout(self, acquirer):
        with mock.patch("requests.get", side_effect=requests.Timeout("slow")):
            with pytest.raises(AcquisitionFailed) as info:
                acquirer.materialize(url_declaration())
        assert info.value.url == "https://repo.example.com/core-1.0.jar"

    def test_download_http_error(self, acquirer):
        with mock.patch("requests.get", return_value=FakeResponse(b"", status_code=404)):
            with pytest.raises(AcquisitionFailed):
                acquirer.materialize(url_declaration())

    def test_integrity_violation(self, acquirer, declaring_archive):
        declaration = archive_declaration(declaring_archive, digest=sha512(b"something else"))
        with pytest.raises(IntegrityViolation) as info:
            acquirer.materialize(declaration)
        assert info.value.expected == sha512(b"something else")
        assert info.value.actual == sha512(CORE)

    def test_validation_disabled_only_warns(self, store_dir, logger, declaring_archive):
        acquirer = LibraryAcquirer(str(store_dir), logger, disable_validation=True)
        declaration = archive_declaration(declaring_archive, digest=sha512(b"something else"))
        library = acquirer.materialize(declaration)
        assert not library.verified
        assert len(acquirer.warnings) == 1
        assert "Wrong hash" in acquirer.warnings[0]

    def test_materialize_twice_acquires_once(self, acquirer, declaring_archive):
        declaration = archive_declaration(declaring_archive)
        with mock.patch.object(
            FileUtils, "extract_archive_entry", wraps=FileUtils.extract_archive_entry
        ) as extract:
            first = acquirer.materialize(declaration)
            second = acquirer.materialize(declaration)
        assert first.path == second.path
        assert extract.call_count == 1

    def test_fresh_acquirer_reuses_store(self, store_dir, logger, declaring_archive):
        declaration = archive_declaration(declaring_archive)
        first = LibraryAcquirer(str(store_dir), logger).materialize(declaration)
        with mock.patch.object(FileUtils, "extract_archive_entry") as extract:
            second = LibraryAcquirer(str(store_dir), logger).materialize(declaration)
        extract.assert_not_called()
        assert first.path == second.path
        assert first.source == AcquisitionSource.ARCHIVE
        assert second.source == AcquisitionSource.EXISTING

    def test_corrupted_file_is_reacquired(self, acquirer, declaring_archive):
        declaration = archive_declaration(declaring_archive)
        library = acquirer.materialize(declaration)
        library.path.write_bytes(b"half written")

        plan = acquirer.plan(declaration)
        assert not acquirer._reuse_existing(plan)

        again = acquirer.materialize(declaration)
        assert again.path.read_bytes() == CORE
        assert again.verified

    def test_corrupted_file_with_bad_source_is_reported(self, acquirer, declaring_archive):
        declaration = archive_declaration(declaring_archive)
        library = acquirer.materialize(declaration)
        library.path.write_bytes(b"tampered")
        build_archive(declaring_archive, [], entries={"libs/core.bin": b"also tampered"})

        with pytest.raises(IntegrityViolation):
            acquirer.materialize(declaration)

    def test_unwritable_store(self, tmp_path, logger, declaring_archive):
        store = tmp_path / "libraries"
        store.write_bytes(b"a file where the store directory should be")
        with pytest.raises(AcquisitionFailed):
            LibraryAcquirer(str(store), logger).materialize(archive_declaration(declaring_archive))

    def test_corrupt_bundled_entry(self, acquirer, tmp_path):
        archive = build_archive(
            tmp_path / "mods" / "a.jar",
            [],
            entries={"libs/core.bin": CORE * 64},
            compression=zipfile.ZIP_DEFLATED,
        )
        corrupt_entry(archive, "libs/core.bin")
        with pytest.raises(AcquisitionFailed):
            acquirer.materialize(archive_declaration(archive, digest=sha512(CORE * 64)))

    def test_unreadable_existing_file(self, acquirer, declaring_archive):
        declaration = archive_declaration(declaring_archive)
        acquirer.materialize(declaration)
        with mock.patch.object(FileUtils, "hash_file", side_effect=PermissionError("denied")):
            with pytest.raises(AcquisitionFailed):
                acquirer.materialize(declaration)
