"""Ordering and skip-resolution that make reruns safe.

GitHub numbers issues sequentially, so a rerun treats the first
``existing_count`` source issues (in ascending id order) as already migrated.
This only holds while the destination's numbering is dense: issues or pull
requests created by hand, or a previous run that failed mid-way, will shift
the count.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .models import SourceIssue


def order_issues(issues: Iterable[SourceIssue]) -> list[SourceIssue]:
    """Sort issues ascending by id, keeping export order for ties."""
    return sorted(issues, key=lambda issue: issue.id)


def skip_migrated(ordered: Sequence[SourceIssue], existing_count: int) -> list[SourceIssue]:
    """Return the issues still to migrate given the destination's issue count.

    Raises:
        ValueError: If existing_count is negative
    """
    if existing_count < 0:
        msg = f"Existing issue count cannot be negative: {existing_count}"
        raise ValueError(msg)
    if existing_count >= len(ordered):
        return []
    return list(ordered[existing_count:])
