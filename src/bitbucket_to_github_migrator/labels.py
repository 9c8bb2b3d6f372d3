"""
Label derivation and translation for migrated issues.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .models import SourceIssue


class LabelTranslator:
    """Handles label translation patterns."""

    def __init__(self, patterns: Sequence[str] | None) -> None:
        self.patterns: list[tuple[str, str]] = []

        for pattern in patterns or []:
            if ":" not in pattern:
                msg = f"Invalid pattern format: {pattern}"
                raise ValueError(msg)
            source, target = pattern.split(":", 1)
            self.patterns.append((source, target))

    def translate(self, label_name: str) -> str:
        """Translate a label name using configured patterns."""
        for source_pattern, target_pattern in self.patterns:
            if "*" in source_pattern:
                # Convert glob pattern to regex
                regex_pattern = "(.*)".join(re.escape(part) for part in source_pattern.split("*"))
                match = re.fullmatch(regex_pattern, label_name)
                if match:
                    return target_pattern.replace("*", match.group(1))
            elif source_pattern == label_name:
                return target_pattern
        return label_name


def parse_extra_labels(extra_labels: str | Sequence[str] | None) -> list[str]:
    """Split comma-separated extra labels, dropping empty entries.

    Accepts a single string (``"a,b"``) or a sequence of such strings, as
    produced by a repeatable command line option.
    """
    if not extra_labels:
        return []
    chunks = [extra_labels] if isinstance(extra_labels, str) else list(extra_labels)
    return [label.strip() for chunk in chunks for label in chunk.split(",") if label.strip()]


def derive_labels(
    issue: SourceIssue,
    extra_labels: str | Sequence[str] | None = None,
    translator: LabelTranslator | None = None,
) -> list[str]:
    """Build the label list for a migrated issue.

    Order: extra labels, priority, kind, component, raw status. Empty values
    are never included; duplicates are kept since GitHub deduplicates label
    sets itself.
    """
    labels = parse_extra_labels(extra_labels)
    # Bitbucket statuses are finer grained than GitHub states, so keep the raw
    # status as a label too.
    labels.extend(value for value in (issue.priority, issue.kind, issue.component or "", issue.status) if value)

    if translator is None:
        return labels
    return [translated for translated in (translator.translate(label) for label in labels) if translated]
