"""Build GitHub issue bodies and canonical issues from Bitbucket issue data."""

from __future__ import annotations

import datetime as dt
import logging
from typing import TYPE_CHECKING

from .labels import derive_labels
from .models import CanonicalIssue
from .status import map_status

if TYPE_CHECKING:
    from collections.abc import Sequence
    from string import Template

    from .labels import LabelTranslator
    from .models import SourceIssue

logger: logging.Logger = logging.getLogger(__name__)

# Minimum time difference (in seconds) to consider showing "last edited" timestamp
LAST_EDITED_THRESHOLD_SECONDS = 60


def format_timestamp(iso_timestamp: str | None) -> str:
    """Format ISO 8601 timestamp to human-readable format.

    Args:
        iso_timestamp: ISO 8601 formatted timestamp string

    Returns:
        Formatted timestamp (e.g., "2024-01-15 10:30:45Z").
        Returns original value if parsing fails, and "" for None.
    """
    if not iso_timestamp:
        return ""

    try:
        timestamp_dt = dt.datetime.fromisoformat(iso_timestamp)
        formatted = timestamp_dt.isoformat(sep=" ", timespec="seconds")
        return formatted.replace("+00:00", "Z")
    except (ValueError, TypeError):
        return iso_timestamp


def should_show_last_edited(created_at: str | None, edited_at: str | None) -> bool:
    """Check if last edited timestamp should be shown.

    Returns:
        True if edited_at differs from created_at by more than LAST_EDITED_THRESHOLD_SECONDS
    """
    if not created_at or not edited_at:
        return False

    try:
        created_dt = dt.datetime.fromisoformat(created_at)
        edited_dt = dt.datetime.fromisoformat(edited_at)
        diff = abs((edited_dt - created_dt).total_seconds())
    except (ValueError, TypeError):
        return False

    return diff > LAST_EDITED_THRESHOLD_SECONDS


def template_fields(issue: SourceIssue) -> dict[str, str]:
    """Placeholders available to a custom body template."""
    return {
        "id": str(issue.id),
        "title": issue.title,
        "content": issue.content,
        "reporter": issue.reporter,
        "status": issue.status,
        "priority": issue.priority,
        "kind": issue.kind,
        "component": issue.component or "",
        "created": format_timestamp(issue.created_on),
        "updated": format_timestamp(issue.updated_on),
        "edited": format_timestamp(issue.edited_on)
        if should_show_last_edited(issue.created_on, issue.edited_on)
        else "",
    }


def render_body(
    issue: SourceIssue,
    *,
    attribution: bool = True,
    template: Template | None = None,
    log: logging.Logger | None = None,
) -> str:
    """Render the GitHub issue body.

    By default the content is prefixed with an attribution header naming the
    Bitbucket reporter. A custom template replaces that layout entirely; if it
    fails to render, the raw content is used instead.
    """
    log = log or logger
    if template is not None:
        try:
            return template.substitute(template_fields(issue))
        except (KeyError, ValueError) as e:
            log.warning(f"Failed to render body template for issue {issue.id}, using raw content: {e!r}")
            return issue.content

    if not attribution or not issue.reporter:
        return issue.content
    return f"by **{issue.reporter}**:\n\n---\n\n{issue.content}"


def build_canonical_issue(
    issue: SourceIssue,
    extra_labels: str | Sequence[str] | None = None,
    *,
    translator: LabelTranslator | None = None,
    attribution: bool = True,
    template: Template | None = None,
    log: logging.Logger | None = None,
) -> CanonicalIssue:
    """Derive the canonical issue (labels, body, closed flag) for a source issue."""
    log = log or logger
    mapping = map_status(issue.status)
    if not mapping.recognized:
        log.warning(f"Found unknown status on issue #{issue.id}: '{issue.status}', migrating it as open")

    return CanonicalIssue(
        source_id=issue.id,
        title=issue.title,
        body=render_body(issue, attribution=attribution, template=template, log=log),
        reporter=issue.reporter,
        labels=derive_labels(issue, extra_labels, translator),
        closed=mapping.closed,
    )
