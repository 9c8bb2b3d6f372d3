"""
Custom exception classes for the Bitbucket to GitHub migration tool.
"""

from __future__ import annotations


class MigrationError(Exception):
    """Base exception for migration errors."""


class ExportError(MigrationError):
    """Raised when the Bitbucket export archive cannot be read or decoded."""


class TrackerAPIError(MigrationError):
    """Raised when a call to the destination issue tracker fails.

    Carries the response's Retry-After value (if any) so that the caller can
    still pace the next request after a failure.
    """

    def __init__(self, message: str, *, retry_after: str | None = None, status: int | None = None) -> None:
        super().__init__(message)
        self.retry_after: str | None = retry_after
        self.status: int | None = status
