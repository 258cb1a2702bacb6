"""
This file contains various utility functions like I/O operations, handling paths, etc.
"""

import hashlib
import logging
import os
import shutil
import zipfile
import zlib
from typing import Optional, Tuple

import requests

from libloader.libloader_exceptions import LibLoaderException
from libloader.libloader_logger import LibLoaderLogger
from libloader.libloader_settings import LibLoaderSettings


class FileUtils:
    """
    Utility functions for file operations.
    """

    @staticmethod
    def hash_file(path: str, algorithm: str = LibLoaderSettings.HASH_ALGORITHM) -> str:
        """
        Computes the lowercase hex digest of a file, streaming it in chunks.
        """
        digest = hashlib.new(algorithm)
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(LibLoaderSettings.CHUNK_SIZE), b""):
                digest.update(chunk)
        return digest.hexdigest()

    @staticmethod
    def read_archive_entry(archive: zipfile.ZipFile, entry_name: str) -> Optional[bytes]:
        """
        Reads a single entry of an open zip archive into memory.

        Returns None if the archive has no such entry. Raises zipfile.BadZipFile
        on a CRC mismatch, zlib.error on a corrupt deflate stream and OSError if
        the archive cannot be read.
        """
        try:
            info = archive.getinfo(entry_name)
        except KeyError:
            return None
        return archive.read(info)

    @staticmethod
    def extract_archive_entry(
        logger: LibLoaderLogger, archive_path: str, entry_name: str, target_path: str
    ) -> None:
        """
        Streams a single entry of a zip archive to target_path, overwriting it.
        """
        try:
            os.makedirs(os.path.dirname(target_path), exist_ok=True)
            with zipfile.ZipFile(archive_path) as archive:
                try:
                    info = archive.getinfo(entry_name)
                except KeyError:
                    raise LibLoaderException(
                        f"Archive {archive_path} has no entry '{entry_name}'"
                    ) from None
                with archive.open(info) as src, open(target_path, "wb") as dst:
                    shutil.copyfileobj(src, dst, LibLoaderSettings.CHUNK_SIZE)
        except (OSError, zipfile.BadZipFile, zlib.error) as exc:
            logger.log(
                f"Error extracting '{entry_name}' from '{archive_path}': {exc}", logging.ERROR
            )
            raise LibLoaderException(f"Error extracting '{entry_name}': {exc}") from exc

    @staticmethod
    def download_file(
        logger: LibLoaderLogger, url: str, target_path: str, timeout: Tuple[float, float]
    ) -> None:
        """
        Downloads the file from the given URL to the given {target_path}, overwriting it.

        timeout is the (connect, read) pair handed to requests, so a stalled
        server fails the download instead of blocking forever.
        """
        try:
            os.makedirs(os.path.dirname(target_path), exist_ok=True)
            with requests.get(url, stream=True, timeout=timeout) as response:
                if response.status_code != 200:
                    logger.log(
                        f"Error downloading file '{url}': {response.status_code}", logging.ERROR
                    )
                    raise LibLoaderException(
                        f"Error downloading file '{url}': HTTP {response.status_code}"
                    )
                with open(target_path, "wb") as f:
                    for chunk in response.iter_content(chunk_size=LibLoaderSettings.CHUNK_SIZE):
                        if chunk:
                            f.write(chunk)
        except requests.Timeout as exc:
            logger.log(f"Timed out downloading file '{url}': {exc}", logging.ERROR)
            raise LibLoaderException(f"Timed out downloading file '{url}'") from exc
        except (requests.RequestException, OSError) as exc:
            logger.log(f"Error downloading file '{url}': {exc}", logging.ERROR)
            raise LibLoaderException(f"Error downloading file '{url}': {exc}") from exc
