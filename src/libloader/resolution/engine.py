"""
Resolution engine.

Drives the scan/merge/acquire rounds until a round wins no new keys:

    SCANNING -> MERGING -> ACQUIRING -> SCANNING -> ... -> MERGING -> DONE

Each round scans an immutable tuple of candidate archives and emits the
next round's candidates: the libraries it just materialized, whose own
manifests may declare dependencies nobody has seen yet.
"""

import logging
import pathlib
from concurrent.futures import FIRST_EXCEPTION, Executor, ThreadPoolExecutor, wait
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

from pydantic import BaseModel, Field

from libloader.libloader_exceptions import ResolutionDidNotConverge
from libloader.libloader_logger import LibLoaderLogger
from libloader.libloader_settings import LibLoaderSettings
from libloader.library_acquirer import LibraryAcquirer
from libloader.library_manifest import DeclarationParser
from libloader.library_models import LibraryDeclaration, MaterializedLibrary
from libloader.library_registry import MergeRegistry, OfferOutcome
from libloader.resolution.assembler import ResultAssembler

T = TypeVar("T")
R = TypeVar("R")


class ResolutionState(Enum):
    """States of the resolution loop."""

    SCANNING = "scanning"
    MERGING = "merging"
    ACQUIRING = "acquiring"
    DONE = "done"


class ResolutionResult(BaseModel):
    """Outcome of a completed resolution."""

    rounds: int = Field(..., description="Rounds that won at least one key")
    libraries: Dict[str, MaterializedLibrary] = Field(default_factory=dict)
    paths: List[pathlib.Path] = Field(default_factory=list, description="Ordered output for the consumer")
    warnings: List[str] = Field(default_factory=list, description="Digest mismatches tolerated with validation disabled")


def run_all(executor: Executor, fn: Callable[[T], R], items: Iterable[T]) -> List[R]:
    """
    Runs fn over items on the executor and waits for every call.

    Results come back in input order. The first exception cancels the calls
    that have not started yet and is re-raised unchanged.
    """
    futures = [executor.submit(fn, item) for item in items]
    if not futures:
        return []
    done, not_done = wait(futures, return_when=FIRST_EXCEPTION)
    for future in futures:
        if future in done and future.exception() is not None:
            for pending in not_done:
                pending.cancel()
            wait(not_done)
            raise future.exception()
    return [future.result() for future in futures]


class ResolutionEngine:
    """
    Resolves the transitive set of libraries declared by a set of archives.

    Rounds are strictly sequential; the archives of one round are scanned in
    parallel and its newly won libraries are acquired in parallel.
    """

    def __init__(
        self,
        parser: DeclarationParser,
        acquirer: LibraryAcquirer,
        logger: LibLoaderLogger,
        assembler: Optional[ResultAssembler] = None,
        max_workers: Optional[int] = None,
        max_rounds: int = LibLoaderSettings.DEFAULT_MAX_ROUNDS,
    ):
        self.parser = parser
        self.registry = MergeRegistry(logger)
        self.acquirer = acquirer
        self.logger = logger
        self.assembler = assembler or ResultAssembler()
        self.max_workers = max_workers
        self.max_rounds = max_rounds
        self.state = ResolutionState.SCANNING

    def resolve(self, candidates: Sequence[pathlib.Path]) -> ResolutionResult:
        """
        Runs rounds until one wins no new keys.

        Every call starts from an empty registry, so an engine can resolve again.

        Raises:
            LibLoaderException: On the first fatal error in any round; nothing
                partial is returned
        """
        candidates: Tuple[pathlib.Path, ...] = tuple(pathlib.Path(c) for c in candidates)
        materialized: Dict[str, MaterializedLibrary] = {}
        frontier: Dict[str, LibraryDeclaration] = {}
        rounds = 0
        self.registry = MergeRegistry(self.logger)
        self.state = ResolutionState.SCANNING

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="libloader") as executor:
            while self.state is not ResolutionState.DONE:
                if self.state is ResolutionState.SCANNING:
                    self.logger.log(
                        f"Round {rounds + 1}: scanning {len(candidates)} archives", logging.INFO
                    )
                    run_all(executor, self._scan, candidates)
                    self.state = ResolutionState.MERGING

                elif self.state is ResolutionState.MERGING:
                    frontier = self.registry.take_frontier()
                    if not frontier:
                        self.state = ResolutionState.DONE
                    elif rounds >= self.max_rounds:
                        self.logger.log(
                            f"Still finding new libraries after {rounds} rounds", logging.ERROR
                        )
                        raise ResolutionDidNotConverge(self.max_rounds, frontier.keys())
                    else:
                        rounds += 1
                        self.state = ResolutionState.ACQUIRING

                elif self.state is ResolutionState.ACQUIRING:
                    self.logger.log(
                        f"Round {rounds}: acquiring {', '.join(sorted(frontier))}", logging.INFO
                    )
                    produced = run_all(
                        executor, self.acquirer.materialize, [frontier[key] for key in sorted(frontier)]
                    )
                    materialized.update((library.key, library) for library in produced)
                    candidates = tuple(library.path for library in produced)
                    frontier = {}
                    self.state = ResolutionState.SCANNING

        libraries = dict(sorted(materialized.items()))
        self.logger.log(
            f"Found libs after {rounds} rounds: {', '.join(str(lib.declaration) for lib in libraries.values())}",
            logging.INFO,
        )
        return ResolutionResult(
            rounds=rounds,
            libraries=libraries,
            paths=self.assembler.assemble(libraries.values()),
            warnings=self.acquirer.warnings,
        )

    def _scan(self, archive: pathlib.Path) -> int:
        accepted = 0
        for declaration in self.parser.parse(archive):
            if self.registry.offer(declaration) is OfferOutcome.ACCEPTED:
                accepted += 1
        return accepted
