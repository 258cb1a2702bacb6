"""
Library acquirer implementation.

Turns a declaration into verified bytes at its content-addressed path,
extracting them from the declaring archive or downloading them.
"""

import logging
import os
import pathlib
import threading
from typing import List

from libloader.libloader_exceptions import (
    AcquisitionFailed,
    IntegrityViolation,
    LibLoaderException,
    NoAcquisitionSource,
)
from libloader.libloader_logger import LibLoaderLogger
from libloader.libloader_settings import LibLoaderSettings
from libloader.libloader_utils import FileUtils
from libloader.library_acquirer.acquisition_plan import (
    AcquisitionPlan,
    AcquisitionSource,
    content_path,
)
from libloader.library_models import LibraryDeclaration, MaterializedLibrary


class LibraryAcquirer:
    """
    Materializes declarations into the content-addressed store.

    materialize() is idempotent and may be called concurrently for distinct
    declarations. Two calls racing on the same path both write the same
    bytes and both verify them afterwards.
    """

    def __init__(
        self,
        store_root: str,
        logger: LibLoaderLogger,
        disable_validation: bool = False,
        connect_timeout: float = LibLoaderSettings.DEFAULT_CONNECT_TIMEOUT,
        read_timeout: float = LibLoaderSettings.DEFAULT_READ_TIMEOUT,
    ):
        """
        Initialize the library acquirer.

        Args:
            store_root: Root directory of the content-addressed store
            logger: Logger for progress and error messages
            disable_validation: Downgrade digest mismatches to warnings
            connect_timeout: Seconds to wait for a download connection
            read_timeout: Seconds to wait between bytes of a download
        """
        self.store_root = pathlib.Path(store_root).absolute()
        self.logger = logger
        self.disable_validation = disable_validation
        self.timeout = (connect_timeout, read_timeout)
        self._warnings: List[str] = []
        self._warnings_lock = threading.Lock()

    @property
    def warnings(self) -> List[str]:
        with self._warnings_lock:
            return list(self._warnings)

    def plan(self, declaration: LibraryDeclaration) -> AcquisitionPlan:
        return AcquisitionPlan(declaration, content_path(declaration, self.store_root))

    def materialize(self, declaration: LibraryDeclaration) -> MaterializedLibrary:
        """
        Puts the declaration's bytes at its content-addressed path and verifies them.

        Raises:
            NoAcquisitionSource: If the declaration has neither a file nor a URL
            AcquisitionFailed: If reading the store, extracting or downloading fails
            IntegrityViolation: If the digest does not match and validation is enabled
        """
        try:
            plan = self.plan(declaration)
            if self._reuse_existing(plan):
                plan.source = AcquisitionSource.EXISTING
            else:
                self._acquire(plan)
            self._verify(plan)
        except LibLoaderException as e:
            self.logger.log(f"Failed to acquire {declaration}: {e}", logging.ERROR)
            raise

        return MaterializedLibrary(
            declaration=declaration,
            path=plan.destination_path,
            actual_digest=plan.actual_digest,
            source=plan.source,
        )

    def _reuse_existing(self, plan: AcquisitionPlan) -> bool:
        """
        True if the destination already holds usable bytes from an earlier run.
        """
        path = plan.destination_path
        if not path.is_file():
            return False
        if self.disable_validation:
            return True
        try:
            existing_digest = FileUtils.hash_file(str(path))
        except OSError as e:
            raise AcquisitionFailed(plan.declaration, f"could not read {path}: {e}") from e
        if existing_digest == plan.declaration.digest:
            self.logger.log(f"Reusing {plan.declaration} at {path}", logging.DEBUG)
            return True
        self.logger.log(
            f"Existing file for {plan.declaration} at {path} does not match its digest, re-acquiring",
            logging.INFO,
        )
        return False

    def _acquire(self, plan: AcquisitionPlan) -> None:
        declaration = plan.declaration
        destination = str(plan.destination_path)

        try:
            os.makedirs(os.path.dirname(destination), exist_ok=True)
            if declaration.file is not None:
                if declaration.source is None:
                    raise LibLoaderException(
                        f"{declaration} names archive entry '{declaration.file}' but has no source archive"
                    )
                plan.source = AcquisitionSource.ARCHIVE
                self.logger.log(
                    f"Extracting library {declaration} from {declaration.source}!{declaration.file}",
                    logging.INFO,
                )
                FileUtils.extract_archive_entry(
                    self.logger, str(declaration.source), declaration.file, destination
                )
            elif declaration.url is not None:
                plan.source = AcquisitionSource.URL
                self.logger.log(
                    f"Downloading library {declaration} from {declaration.url}. "
                    f"Expected hash: {declaration.digest}",
                    logging.INFO,
                )
                FileUtils.download_file(self.logger, declaration.url, destination, self.timeout)
            else:
                raise NoAcquisitionSource(declaration)
        except NoAcquisitionSource:
            raise
        except LibLoaderException as e:
            raise AcquisitionFailed(declaration, str(e), url=declaration.url) from e
        except OSError as e:
            raise AcquisitionFailed(declaration, f"could not write {destination}: {e}", url=declaration.url) from e

    def _verify(self, plan: AcquisitionPlan) -> None:
        path = plan.destination_path
        if not path.is_file():
            raise AcquisitionFailed(plan.declaration, f"{path} does not exist after acquisition")

        try:
            plan.actual_digest = FileUtils.hash_file(str(path))
        except OSError as e:
            raise AcquisitionFailed(plan.declaration, f"could not read {path}: {e}") from e
        if plan.actual_digest == plan.declaration.digest:
            return

        error = IntegrityViolation(
            plan.declaration, str(path), plan.declaration.digest, plan.actual_digest
        )
        if not self.disable_validation:
            raise error
        self.logger.log(f"{error} (validation disabled, continuing)", logging.WARNING)
        with self._warnings_lock:
            self._warnings.append(str(error))
