"""
This module contains the exceptions raised by the libloader framework.

Every failure is fatal for the whole resolution: nothing is handed to the
consumer once one of these has been raised.
"""

from typing import Optional


class LibLoaderException(Exception):
    """
    Exceptions raised by the libloader framework.
    """

    def __init__(self, message: str):
        """
        Initializes the exception with the given message.
        """
        super().__init__(message)


class MalformedVersion(LibLoaderException):
    """
    A declared version string does not match digits(.digits)* with an optional -suffix.
    """

    def __init__(self, version_string: Optional[str], message: Optional[str] = None):
        self.version_string = version_string
        super().__init__(
            message
            or "Invalid version format. Should consist of digits and dots with "
            f"optional suffix after -. Got '{version_string}'"
        )


class MissingCandidateSource(LibLoaderException):
    """
    The folder holding the initial candidate archives cannot be listed.
    """

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Candidate folder cannot be listed: {path}")


class CorruptArchive(LibLoaderException):
    """
    A candidate archive could not be read while scanning it.
    """

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Could not read archive {path}: {reason}")


class NoAcquisitionSource(LibLoaderException):
    """
    A declaration names neither an archive entry nor a URL.
    """

    def __init__(self, declaration):
        self.declaration = declaration
        super().__init__(f"No way to acquire dependency: {declaration}")


class AcquisitionFailed(LibLoaderException):
    """
    Extracting or downloading a library failed, including timeouts.
    """

    def __init__(self, declaration, reason: str, url: Optional[str] = None):
        self.declaration = declaration
        self.url = url
        self.reason = reason
        super().__init__(f"Couldn't extract/download library {declaration}: {reason}")


class IntegrityViolation(LibLoaderException):
    """
    The bytes on disk do not hash to the declared digest.
    """

    def __init__(self, declaration, path: str, expected: str, actual: str):
        self.declaration = declaration
        self.path = path
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Wrong hash for library {declaration} at {path}. Expected {expected}, got {actual}"
        )


class ResolutionDidNotConverge(LibLoaderException):
    """
    The resolution loop kept finding newer declarations past the configured round limit.
    """

    def __init__(self, max_rounds: int, frontier_keys):
        self.max_rounds = max_rounds
        self.frontier_keys = sorted(frontier_keys)
        super().__init__(
            f"Resolution did not converge after {max_rounds} rounds; "
            f"still changing: {', '.join(self.frontier_keys)}"
        )
