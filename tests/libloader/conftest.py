"""
Shared fixtures for the libloader tests.
"""

import pytest

from libloader.libloader_logger import LibLoaderLogger


@pytest.fixture
def logger():
    return LibLoaderLogger()


@pytest.fixture
def mods_dir(tmp_path):
    path = tmp_path / "mods"
    path.mkdir()
    return path


@pytest.fixture
def store_dir(tmp_path):
    return tmp_path / "libraries"
