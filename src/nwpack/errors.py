"""Exception types raised by the build and run pipelines."""

from __future__ import annotations


class BundleError(Exception):
    """Base class for all packaging failures."""


class NotFoundError(BundleError):
    """A required file or directory does not exist."""


class ParseError(BundleError):
    """A descriptor or metadata file could not be parsed."""


class BundleIOError(BundleError):
    """A copy, rename or write operation failed."""


class ExternalProcessError(BundleError):
    """An external command failed to start or exited with an error."""

    def __init__(
        self,
        message: str,
        *,
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class DownloadError(BundleError):
    """A runtime or codec artifact could not be provided."""


class UnresolvedVersionError(BundleError):
    """A version spec could not be resolved to a concrete version."""


class UnsupportedPlatformError(BundleError):
    """No platform profile exists for a target."""
