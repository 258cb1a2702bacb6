"""
Process-wide constants shared by the libloader components.
"""

import os
import pathlib


class LibLoaderSettings:
    """
    Provides the various settings for libloader.
    """

    # Manifest entry that carries the LibLoader-* attributes
    MANIFEST_ENTRY = "META-INF/MANIFEST.MF"
    DEFAULT_NAMESPACE = "LibLoader"

    # Only files with this suffix are treated as round-0 candidates
    CANDIDATE_SUFFIX = ".jar"
    LIBRARY_EXTENSION = ".jar"

    HASH_ALGORITHM = "sha512"
    CHUNK_SIZE = 1024 * 1024

    DEFAULT_MODS_FOLDER = "mods"
    DEFAULT_LIBRARIES_FOLDER = "libraries"
    DEFAULT_CONNECT_TIMEOUT = 10.0
    DEFAULT_READ_TIMEOUT = 10.0
    DEFAULT_MAX_ROUNDS = 64

    ENV_PREFIX = "LIBLOADER_"
    CONFIG_FILE_NAME = "libloader.toml"

    @staticmethod
    def get_default_config_path() -> str:
        """
        Returns the libloader.toml looked up when no explicit config path is given
        """
        return str(pathlib.PurePath(os.getcwd(), LibLoaderSettings.CONFIG_FILE_NAME))
