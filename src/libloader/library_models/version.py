"""
Version value type used to order declarations of the same library.

A version is a dot-separated list of non-negative integers with an optional
free-text suffix after the first '-', e.g. "1.12.2", "2.0-beta", "3-SNAPSHOT".
"""

import re
from functools import total_ordering
from typing import Optional, Tuple

from libloader.libloader_exceptions import MalformedVersion

_NUMERIC_PATTERN = re.compile(r"[0-9]+(\.[0-9]+)*")

# Ordering of suffix classes; any other non-empty suffix ranks -1 and no suffix ranks 0.
_SUFFIX_CLASSES = {
    "alpha": -3,
    "beta": -2,
    "snapshot": -2,
}


@total_ordering
class Version:
    """
    Immutable version with a total order.

    Components are compared pairwise after padding the shorter list with
    zeros, so "1.0" == "1". Ties are broken by the suffix class
    (alpha < beta/snapshot < other < none) and then by the raw suffix text.
    """

    __slots__ = ("parts", "suffix")

    def __init__(self, parts: Tuple[int, ...], suffix: Optional[str] = None):
        object.__setattr__(self, "parts", tuple(parts))
        object.__setattr__(self, "suffix", suffix)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __reduce__(self):
        return type(self), (self.parts, self.suffix)

    @classmethod
    def parse(cls, text: Optional[str]) -> "Version":
        """
        Parses a version string.

        Raises:
            MalformedVersion: If the numeric part is not digits(.digits)*
        """
        if text is None:
            raise MalformedVersion(None, "Version can not be null")
        version = text.strip()

        suffix = None
        dash = version.find("-")
        if dash != -1:
            # "1-" carries no suffix and is the same version as "1"
            suffix = version[dash + 1:].strip() or None
            version = version[:dash]

        if not _NUMERIC_PATTERN.fullmatch(version):
            raise MalformedVersion(text)
        return cls(tuple(int(part) for part in version.split(".")), suffix)

    @property
    def suffix_class(self) -> int:
        if self.suffix is None:
            return 0
        return _SUFFIX_CLASSES.get(self.suffix.lower(), -1)

    @property
    def is_final(self) -> bool:
        return self.suffix is None

    def _padded(self, length: int) -> Tuple[int, ...]:
        return self.parts + (0,) * (length - len(self.parts))

    def compare(self, other: "Version") -> int:
        """
        Returns -1, 0 or 1 as this version sorts below, equal to or above other.
        """
        length = max(len(self.parts), len(other.parts))
        mine, theirs = self._padded(length), other._padded(length)
        if mine != theirs:
            return -1 if mine < theirs else 1

        if self.suffix == other.suffix:
            return 0
        if self.suffix_class != other.suffix_class:
            return -1 if self.suffix_class < other.suffix_class else 1
        # Same class and different text means both suffixes are present
        return -1 if self.suffix < other.suffix else 1

    def __eq__(self, other) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.compare(other) == 0

    def __lt__(self, other) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.compare(other) < 0

    def __hash__(self) -> int:
        parts = self.parts
        while len(parts) > 1 and parts[-1] == 0:
            parts = parts[:-1]
        return hash((parts, self.suffix))

    def __str__(self) -> str:
        text = ".".join(str(part) for part in self.parts)
        return text if self.suffix is None else f"{text}-{self.suffix}"

    def __repr__(self) -> str:
        return f"Version('{self}')"
