"""
Result assembler.

Collapses materialized libraries with byte-identical content and orders the
remaining paths for the consumer.
"""

import pathlib
from typing import Dict, Iterable, List

from libloader.library_models import MaterializedLibrary


class ResultAssembler:
    """
    Produces the ordered path list handed to the consumer.
    """

    def by_digest(self, libraries: Iterable[MaterializedLibrary]) -> Dict[str, pathlib.Path]:
        """
        Maps each distinct digest to one path.

        When several keys share a digest, the path of the lowest key wins so
        the choice does not depend on the order of the input.
        """
        paths: Dict[str, pathlib.Path] = {}
        for library in sorted(libraries, key=lambda lib: (lib.key, str(lib.path))):
            paths.setdefault(library.declaration.digest, pathlib.Path(library.path).absolute())
        return paths

    def assemble(self, libraries: Iterable[MaterializedLibrary]) -> List[pathlib.Path]:
        """
        Deduplicated absolute paths, sorted by their text.
        """
        return sorted(self.by_digest(libraries).values(), key=str)
