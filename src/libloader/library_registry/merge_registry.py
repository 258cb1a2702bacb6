"""
Merge registry.

Keeps the best-known declaration for every logical key and the set of keys
won during the current resolution round (the frontier).
"""

import logging
import threading
from enum import Enum
from typing import Dict

from libloader.libloader_logger import LibLoaderLogger
from libloader.library_models import LibraryDeclaration


class OfferOutcome(Enum):
    """Result of offering a declaration to the registry."""

    ACCEPTED = "accepted"
    REJECTED = "rejected"


class MergeRegistry:
    """
    Concurrent map from logical key to the winning declaration.

    The read-compare-replace of one key happens under that key's own lock,
    so concurrent offers for the same library are serialized while offers
    for different libraries never wait on each other.
    """

    def __init__(self, logger: LibLoaderLogger):
        self.logger = logger
        self._winners: Dict[str, LibraryDeclaration] = {}
        self._frontier: Dict[str, LibraryDeclaration] = {}
        self._key_locks: Dict[str, threading.Lock] = {}
        # Only held for single dictionary updates, never across a comparison
        self._guard = threading.Lock()

    def _lock_for(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = self._key_locks[key] = threading.Lock()
            return lock

    def offer(self, declaration: LibraryDeclaration) -> OfferOutcome:
        """
        Folds a declaration into the registry.

        Accepted when the key is unknown or the declaration compares strictly
        greater than the current winner; accepted keys join the frontier.
        """
        key = declaration.key
        with self._lock_for(key):
            current = self._winners.get(key)
            if not declaration.supersedes(current):
                self.logger.log(
                    f"Keeping {current} (build {current.build_time}) over {declaration} "
                    f"(build {declaration.build_time}) from {declaration.source}",
                    logging.DEBUG,
                )
                return OfferOutcome.REJECTED
            with self._guard:
                self._winners[key] = declaration
                self._frontier[key] = declaration

        self.logger.log(
            f"Accepted {declaration} from {declaration.source}"
            + (f", replacing {current}" if current is not None else ""),
            logging.DEBUG,
        )
        return OfferOutcome.ACCEPTED

    def take_frontier(self) -> Dict[str, LibraryDeclaration]:
        """
        Returns the keys won since the last call, with their winners, and clears the frontier.
        """
        with self._guard:
            frontier, self._frontier = self._frontier, {}
        return frontier

    def winners(self) -> Dict[str, LibraryDeclaration]:
        """Snapshot of the all-time winners."""
        with self._guard:
            return dict(self._winners)

    def get(self, key: str):
        return self._winners.get(key)

    def __len__(self) -> int:
        return len(self._winners)
