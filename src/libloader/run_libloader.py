import os
import sys

from libloader import LibraryLoader
from libloader.libloader_config import LibLoaderConfig
from libloader.libloader_exceptions import LibLoaderException
from libloader.libloader_logger import LibLoaderLogger
from libloader.libloader_settings import LibLoaderSettings


def main(argv=None) -> int:
    """
    Resolves the libraries for the current directory and prints their paths, one per line.

    Reads the config file given as the only argument, else ./libloader.toml
    if present, else LIBLOADER_* environment variables.
    """
    argv = sys.argv[1:] if argv is None else argv
    config_path = argv[0] if argv else LibLoaderSettings.get_default_config_path()
    logger = LibLoaderLogger()
    try:
        if argv or os.path.isfile(config_path):
            config = LibLoaderConfig.from_toml(config_path)
        else:
            config = LibLoaderConfig.from_env()
        result = LibraryLoader.init(config, logger=logger)
    except LibLoaderException as e:
        print(f"libloader: {e}", file=sys.stderr)
        return 1

    for path in result.paths:
        print(path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
