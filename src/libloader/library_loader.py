"""
Provides the LibraryLoader, which wires candidate discovery, resolution and the
consumer of the resolved library paths together.
"""

import logging
import os
import pathlib
import threading
from typing import Callable, List, Optional

from libloader.libloader_config import LibLoaderConfig
from libloader.libloader_exceptions import MissingCandidateSource
from libloader.libloader_logger import LibLoaderLogger
from libloader.libloader_settings import LibLoaderSettings
from libloader.library_acquirer import LibraryAcquirer
from libloader.library_manifest import DeclarationParser
from libloader.resolution import ResolutionEngine, ResolutionResult

# Receives the ordered, absolute paths of the resolved libraries
PathConsumer = Callable[[List[pathlib.Path]], None]


def discover_candidates(mods_folder: str) -> List[pathlib.Path]:
    """
    Lists the *.jar files directly inside mods_folder, sorted by name.

    Raises:
        MissingCandidateSource: If the folder cannot be listed
    """
    try:
        names = os.listdir(mods_folder)
    except OSError:
        raise MissingCandidateSource(os.path.abspath(mods_folder)) from None

    suffix = LibLoaderSettings.CANDIDATE_SUFFIX
    return [
        pathlib.Path(mods_folder, name)
        for name in sorted(names)
        if name.lower().endswith(suffix) and os.path.isfile(os.path.join(mods_folder, name))
    ]


class LibraryLoader:
    """
    Resolves the libraries declared by the archives in the mods folder and
    hands their paths to a consumer.
    """

    _init_lock = threading.Lock()
    _init_result: Optional[ResolutionResult] = None

    def __init__(self, config: LibLoaderConfig, logger: LibLoaderLogger):
        """
        Creates a loader. Use LibraryLoader.create() rather than instantiating directly.
        """
        self.config = config
        self.logger = logger

    @classmethod
    def create(
        cls, config: Optional[LibLoaderConfig] = None, logger: Optional[LibLoaderLogger] = None
    ) -> "LibraryLoader":
        """
        Creates a loader from the given config, or from LIBLOADER_* environment variables.
        """
        return cls(config or LibLoaderConfig.from_env(), logger or LibLoaderLogger())

    def _create_engine(self) -> ResolutionEngine:
        return ResolutionEngine(
            parser=DeclarationParser(self.logger, self.config.namespace),
            acquirer=LibraryAcquirer(
                self.config.libraries_folder,
                self.logger,
                disable_validation=self.config.disable_validation,
                connect_timeout=self.config.connect_timeout,
                read_timeout=self.config.read_timeout,
            ),
            logger=self.logger,
            max_workers=self.config.max_workers,
            max_rounds=self.config.max_rounds,
        )

    def resolve(self) -> ResolutionResult:
        """
        Discovers the candidates and resolves every library they transitively declare.

        Raises:
            LibLoaderException: If anything fails; no partial result is produced
        """
        if self.config.disable_validation:
            self.logger.log(
                "Library hash validation is disabled. Do not use this outside development.",
                logging.WARNING,
            )
        candidates = discover_candidates(self.config.mods_folder)
        self.logger.log(
            f"Scanning {len(candidates)} candidates in {os.path.abspath(self.config.mods_folder)}",
            logging.INFO,
        )
        return self._create_engine().resolve(candidates)

    def load(self, consumer: Optional[PathConsumer] = None) -> ResolutionResult:
        """
        Resolves the libraries and hands the ordered path list to the consumer.

        The consumer is only called when resolution succeeded and found at least one library.
        """
        result = self.resolve()
        if result.paths and consumer is not None:
            self.logger.log(
                "Adding libraries: " + ", ".join(str(path) for path in result.paths), logging.INFO
            )
            consumer(list(result.paths))
        return result

    @classmethod
    def init(
        cls,
        config: Optional[LibLoaderConfig] = None,
        consumer: Optional[PathConsumer] = None,
        logger: Optional[LibLoaderLogger] = None,
    ) -> ResolutionResult:
        """
        Process-wide entry point: resolves and loads libraries once.

        Later calls return the first successful result without resolving again.
        """
        with cls._init_lock:
            if cls._init_result is None:
                cls._init_result = cls.create(config, logger).load(consumer)
            return cls._init_result

    @classmethod
    def _reset(cls) -> None:
        with cls._init_lock:
            cls._init_result = None
