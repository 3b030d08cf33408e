"""Exceptions raised by gcs-release."""

from __future__ import annotations

from typing import Optional, Sequence


class ReleaseError(RuntimeError):
    """Base class for failures that abort a release run."""


class ConfigurationError(ReleaseError):
    """Raised when inputs are malformed or missing, before any external call."""


class ArtifactError(ReleaseError):
    """Raised when build artifacts cannot be downloaded."""


class StorageCommandError(ReleaseError):
    """A storage CLI invocation exited with a non-zero status."""

    def __init__(
        self,
        message: str,
        *,
        command: Optional[Sequence[str]] = None,
        returncode: Optional[int] = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = list(command or [])
        self.returncode = returncode
        self.stderr = stderr


class DiscoveryError(StorageCommandError):
    """Raised when listing buckets or reading their labels fails."""


class CopyError(StorageCommandError):
    """Raised when copying the source tree to a bucket fails."""


class ACLError(StorageCommandError):
    """Raised when granting public read on a bucket fails."""


__all__ = [
    "ReleaseError",
    "ConfigurationError",
    "ArtifactError",
    "StorageCommandError",
    "DiscoveryError",
    "CopyError",
    "ACLError",
]
