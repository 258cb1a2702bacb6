"""
Configuration parameters for libloader.
"""

import inspect
import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

try:
    import tomllib
except ModuleNotFoundError:
    # Python < 3.11
    import tomli as tomllib

from libloader.libloader_exceptions import LibLoaderException
from libloader.libloader_settings import LibLoaderSettings


LIBLOADER_TOML_SCHEMA = """
# libloader configuration

[libloader]
# Folder scanned (non-recursively) for the initial *.jar candidates
mods_folder = "mods"

# Root of the content-addressed library store
libraries_folder = "libraries"

# Downgrade digest mismatches to warnings. Development use only.
# disable_validation = false

# Upper bound on resolution rounds before giving up
# max_rounds = 64

# Worker threads used for scanning and acquiring (defaults to the executor default)
# max_workers = 8

# Download timeouts in seconds
# connect_timeout = 10
# read_timeout = 10
"""

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off"}


def parse_bool(value: Any, option: str) -> bool:
    """
    Interprets a boolean option given either as a bool or as a string.

    Raises:
        LibLoaderException: If the value is not a recognizable boolean
    """
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    raise LibLoaderException(f"Option '{option}' expects a boolean, got '{value}'")


def _parse_int(value: Any, option: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise LibLoaderException(f"Option '{option}' expects an integer, got '{value}'") from None


def _parse_float(value: Any, option: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise LibLoaderException(f"Option '{option}' expects a number, got '{value}'") from None


@dataclass
class LibLoaderConfig:
    """
    Configuration parameters
    """

    mods_folder: str = LibLoaderSettings.DEFAULT_MODS_FOLDER
    libraries_folder: str = LibLoaderSettings.DEFAULT_LIBRARIES_FOLDER
    disable_validation: bool = False
    max_workers: Optional[int] = None
    max_rounds: int = LibLoaderSettings.DEFAULT_MAX_ROUNDS
    connect_timeout: float = LibLoaderSettings.DEFAULT_CONNECT_TIMEOUT
    read_timeout: float = LibLoaderSettings.DEFAULT_READ_TIMEOUT
    namespace: str = LibLoaderSettings.DEFAULT_NAMESPACE

    def __post_init__(self):
        self.mods_folder = str(self.mods_folder)
        self.libraries_folder = str(self.libraries_folder)
        self.disable_validation = parse_bool(self.disable_validation, "disable_validation")
        self.max_rounds = _parse_int(self.max_rounds, "max_rounds")
        if self.max_workers is not None:
            self.max_workers = _parse_int(self.max_workers, "max_workers")
            if self.max_workers < 1:
                raise LibLoaderException("Option 'max_workers' must be at least 1")
        if self.max_rounds < 1:
            raise LibLoaderException("Option 'max_rounds' must be at least 1")
        self.connect_timeout = _parse_float(self.connect_timeout, "connect_timeout")
        self.read_timeout = _parse_float(self.read_timeout, "read_timeout")

    @classmethod
    def from_dict(cls, env: Mapping[str, Any]) -> "LibLoaderConfig":
        """
        Create a LibLoaderConfig from a dictionary, ignoring unknown keys.
        """
        return cls(**{k: v for k, v in env.items() if k in inspect.signature(cls).parameters})

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "LibLoaderConfig":
        """
        Create a LibLoaderConfig from LIBLOADER_* environment variables.

        For example LIBLOADER_MODS_FOLDER sets mods_folder and
        LIBLOADER_DISABLE_VALIDATION sets disable_validation.
        """
        if environ is None:
            environ = os.environ
        prefix = LibLoaderSettings.ENV_PREFIX
        values = {
            key[len(prefix):].lower(): value
            for key, value in environ.items()
            if key.startswith(prefix)
        }
        return cls.from_dict(values)

    @classmethod
    def from_toml(cls, path: str) -> "LibLoaderConfig":
        """
        Create a LibLoaderConfig from the [libloader] table of a TOML file.

        Raises:
            LibLoaderException: If the file cannot be read or parsed
        """
        try:
            with open(path, "rb") as f:
                config_dict = tomllib.load(f)
        except OSError as e:
            raise LibLoaderException(f"Could not read config file {path}: {e}") from e
        except tomllib.TOMLDecodeError as e:
            raise LibLoaderException(f"Invalid TOML in {path}: {e}") from e

        section = config_dict.get("libloader", {})
        if not isinstance(section, dict):
            raise LibLoaderException(f"'libloader' in {path} must be a table")
        return cls.from_dict(section)
