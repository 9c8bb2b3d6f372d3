"""Mapping of Bitbucket issue statuses to GitHub issue states."""

from __future__ import annotations

from typing import Final, NamedTuple

CLOSED_STATUSES: Final[frozenset[str]] = frozenset({"resolved", "closed", "invalid", "wontfix", "duplicate"})
OPEN_STATUSES: Final[frozenset[str]] = frozenset({"new", "open", "on hold", "onhold"})


class StatusMapping(NamedTuple):
    """Result of mapping a source status."""

    closed: bool
    """Whether the destination issue should end up closed."""
    recognized: bool
    """False if the status is not a known Bitbucket status."""


def map_status(status: str) -> StatusMapping:
    """Map a Bitbucket status to a GitHub lifecycle state.

    Matching is case-insensitive. An empty status counts as open. Unknown
    statuses are also treated as open, but flagged as unrecognized so the
    caller can report them.
    """
    normalized = status.lower()
    if normalized in CLOSED_STATUSES:
        return StatusMapping(closed=True, recognized=True)
    if not normalized or normalized in OPEN_STATUSES:
        return StatusMapping(closed=False, recognized=True)
    return StatusMapping(closed=False, recognized=False)
