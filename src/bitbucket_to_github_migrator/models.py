"""Data models for migration between the Bitbucket export and GitHub.

SourceIssue mirrors one record of the export's ``issues`` array; CanonicalIssue
is the tracker-agnostic view handed to the destination. Both are intentionally
simple.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


def _text(value: Any) -> str:
    # The export uses null for unset free-text fields
    return "" if value is None else str(value)


@dataclass
class SourceIssue:
    """An issue record as decoded from a Bitbucket export.

    Ordinal ids are unique within one export but may have gaps and need not
    start at 1.
    """

    id: int
    title: str
    content: str = ""
    status: str = ""
    priority: str = ""
    kind: str = ""
    reporter: str = ""
    component: str | None = None
    created_on: str | None = None
    updated_on: str | None = None
    edited_on: str | None = None

    @classmethod
    def from_export_record(cls, record: dict[str, Any]) -> SourceIssue:
        """Build a SourceIssue from one entry of the export's ``issues`` array.

        Raises:
            KeyError: If the record has no ``id``
            ValueError: If the ``id`` is not an integer
        """
        raw_id = record["id"]
        if isinstance(raw_id, bool) or not isinstance(raw_id, int):
            msg = f"Issue id must be an integer, got {raw_id!r}"
            raise ValueError(msg)

        component = record.get("component")
        return cls(
            id=raw_id,
            title=_text(record.get("title")),
            content=_text(record.get("content")),
            status=_text(record.get("status")),
            priority=_text(record.get("priority")),
            kind=_text(record.get("kind")),
            reporter=_text(record.get("reporter")),
            component=None if component is None else str(component),
            created_on=record.get("created_on"),
            updated_on=record.get("updated_on"),
            edited_on=record.get("edited_on"),
        )


@dataclass
class CanonicalIssue:
    """The normalized issue that is created on the destination tracker."""

    source_id: int
    title: str
    body: str
    reporter: str = ""
    labels: list[str] = field(default_factory=list)
    closed: bool = False
