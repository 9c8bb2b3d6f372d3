"""Migration orchestrator that drives issue creation on the destination tracker.

The Migrator class is the central coordinator for migration. It:
1. Orders the source issues and skips those migrated by a previous run
2. Derives the canonical issue (labels, body, closed flag) for each one
3. Creates, and where needed closes, each issue on the destination
4. Paces every request from the response's Retry-After value
5. Keeps a tally of successful and failed operations

Migration Flow
--------------
Phase 1: Preparation
    - Sort source issues ascending by their Bitbucket id
    - Count the issues already present on the destination (fatal on failure)
    - Skip that many source issues: GitHub numbers issues sequentially, so
      they are assumed to come from an earlier run

Phase 2: Issues
    Strictly one issue at a time, one request in flight at a time:

        Start ──► Creating ──► CreateFailed
                     │
                     ▼
                  Created ──(open)──► done
                     │
                  (closed)
                     ▼
                  Closing ──► Closed | CloseFailed

    After every request, successful or not, the Migrator sleeps for the
    delay computed by rate_limit.next_delay().

Phase 3: Report
    - Log and return the tally ("Imported N, Errors M")

Tally
-----
``imported`` counts successful operations, not issues: an issue that is
created and then closed adds two. ``errors`` counts failed operations. A
failed issue is not retried within the run.
"""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .exceptions import MigrationError, TrackerAPIError
from .issue_builder import build_canonical_issue
from .labels import LabelTranslator
from .rate_limit import next_delay
from .resume import order_issues, skip_migrated

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from string import Template

    from .models import CanonicalIssue, SourceIssue
    from .protocols import IssueTracker

logger = logging.getLogger(__name__)


class OutcomeKind(enum.Enum):
    """Final state of one migrated issue."""

    CREATED = "created"
    CREATED_AND_CLOSED = "created_and_closed"
    FAILED_TO_CREATE = "failed_to_create"
    FAILED_TO_CLOSE = "failed_to_close"


@dataclass
class MigrationOutcome:
    """Per-issue result of a migration run."""

    source_id: int
    kind: OutcomeKind
    target_number: int | None = None
    error: str | None = None


@dataclass
class RunTally:
    """Operation counters accumulated during one run."""

    imported: int = 0
    errors: int = 0

    def summary(self) -> str:
        return f"Imported {self.imported}, Errors {self.errors}"


@dataclass
class MigrationResult:
    """Result of a migration run."""

    tally: RunTally
    existing_count: int = 0
    skipped: int = 0
    outcomes: list[MigrationOutcome] = field(default_factory=list)


class Migrator:
    """Migrates Bitbucket issues to a destination tracker.

    Usage:
        tracker = GitHubTracker(github_client, "owner/repo")
        migrator = Migrator(tracker, extra_labels="bitbucket")
        result = migrator.migrate(read_export("export.zip"))

    The migrator is stateless between runs - all state is returned in
    MigrationResult.
    """

    _tracker: IssueTracker

    def __init__(
        self,
        tracker: IssueTracker,
        *,
        extra_labels: str | Sequence[str] | None = None,
        label_translations: Sequence[str] | None = None,
        attach_labels: bool = True,
        attribution: bool = True,
        template: Template | None = None,
        sleep: Callable[[float], None] | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        """Initialize the migrator.

        Args:
            tracker: Destination tracker to create issues in
            extra_labels: Labels added to every issue (comma-separated)
            label_translations: Optional translation patterns ("source:target")
            attach_labels: Whether to send labels with created issues
            attribution: Whether to prefix bodies with the reporter's name
            template: Optional body template, replaces the default layout
            sleep: Blocking wait used between requests (default time.sleep)
            log: Logger to report progress and failures to
        """
        self._tracker = tracker
        self._extra_labels = extra_labels
        self._translator = LabelTranslator(label_translations) if label_translations else None
        self._attach_labels = attach_labels
        self._attribution = attribution
        self._template = template
        self._sleep = sleep or time.sleep
        self._log = log or logger

    def _pause(self, retry_after: str | None) -> None:
        delay = next_delay(retry_after, log=self._log)
        self._log.debug(f"Waiting {delay.total_seconds():g}s between requests")
        self._sleep(delay.total_seconds())

    def migrate(self, source_issues: Iterable[SourceIssue]) -> MigrationResult:
        """Execute the migration.

        Returns:
            MigrationResult with the tally and per-issue outcomes

        Raises:
            MigrationError: If the existing destination issues cannot be enumerated
        """
        ordered = order_issues(source_issues)

        try:
            response = self._tracker.count_issues()
        except TrackerAPIError as e:
            msg = f"Error enumerating existing issues on destination: {e}"
            raise MigrationError(msg) from e
        existing_count = response.value
        self._pause(response.retry_after)

        pending = skip_migrated(ordered, existing_count)
        result = MigrationResult(tally=RunTally(), existing_count=existing_count)
        result.skipped = len(ordered) - len(pending)

        if existing_count > len(ordered):
            self._log.warning(
                f"Destination already has {existing_count} issues but the export only has {len(ordered)}; "
                "nothing will be migrated. Issues created outside this tool shift the count."
            )
        elif existing_count:
            self._log.warning(
                f"Skipping {existing_count} issues assumed migrated by a previous run. This assumes the "
                "destination holds no other issues or pull requests and that earlier runs did not fail mid-way."
            )

        self._log.info(f"Migrating {len(pending)} of {len(ordered)} issues")
        for issue in pending:
            result.outcomes.append(self._migrate_issue(issue, result.tally))

        self._log.info(result.tally.summary())
        return result

    def _migrate_issue(self, issue: SourceIssue, tally: RunTally) -> MigrationOutcome:
        canonical = build_canonical_issue(
            issue,
            self._extra_labels,
            translator=self._translator,
            attribution=self._attribution,
            template=self._template,
            log=self._log,
        )

        self._log.debug(f"Attempting to create issue {issue.id}")
        try:
            response = self._tracker.create_issue(
                canonical.title,
                canonical.body,
                closed=canonical.closed,
                labels=canonical.labels if self._attach_labels else (),
            )
        except TrackerAPIError as e:
            tally.errors += 1
            self._log.error(f"Error creating issue {issue.id}: {e}")
            self._pause(e.retry_after)
            return MigrationOutcome(issue.id, OutcomeKind.FAILED_TO_CREATE, error=str(e))

        number = response.value
        tally.imported += 1
        self._log.info(f"Created issue #{number} from Bitbucket issue {issue.id}: {canonical.title}")
        self._pause(response.retry_after)

        if not canonical.closed:
            return MigrationOutcome(issue.id, OutcomeKind.CREATED, target_number=number)
        return self._close_issue(canonical, number, tally)

    def _close_issue(self, canonical: CanonicalIssue, number: int, tally: RunTally) -> MigrationOutcome:
        try:
            response = self._tracker.close_issue(number)
        except TrackerAPIError as e:
            tally.errors += 1
            self._log.error(f"Error closing issue #{number} (Bitbucket issue {canonical.source_id}): {e}")
            self._pause(e.retry_after)
            return MigrationOutcome(canonical.source_id, OutcomeKind.FAILED_TO_CLOSE, target_number=number, error=str(e))

        tally.imported += 1
        self._log.debug(f"Closed issue #{number}")
        self._pause(response.retry_after)
        return MigrationOutcome(canonical.source_id, OutcomeKind.CREATED_AND_CLOSED, target_number=number)
