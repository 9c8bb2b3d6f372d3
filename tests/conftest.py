"""
Pytest configuration and fixtures.

This module configures pytest behavior for different test types:
- Integration tests: run the whole pipeline and fail on any warnings from the code under test
- Unit tests: allow warnings

It also provides an in-memory issue tracker and a Bitbucket export builder.
"""

from __future__ import annotations

import json
import logging
import zipfile
from typing import TYPE_CHECKING, Any, override

import pytest

from bitbucket_to_github_migrator.exceptions import TrackerAPIError
from bitbucket_to_github_migrator.protocols import TrackerResponse

if TYPE_CHECKING:
    from collections.abc import Callable, Generator, Iterable, Sequence
    from pathlib import Path

# Store warning records during test execution
_integration_test_warnings: dict[str, list[logging.LogRecord]] = {}


class IntegrationTestWarningHandler(logging.Handler):
    """Custom logging handler to capture warnings during integration tests."""

    test_nodeid: str

    def __init__(self, test_nodeid: str) -> None:
        super().__init__()
        self.test_nodeid = test_nodeid
        self.setLevel(logging.WARNING)

    @override
    def emit(self, record: logging.LogRecord) -> None:
        """Capture WARNING and above level logs."""
        _integration_test_warnings.setdefault(self.test_nodeid, []).append(record)


@pytest.fixture(autouse=True)
def fail_on_log_warnings_for_integration_tests(
    request: pytest.FixtureRequest,
) -> Generator[None]:
    """Fail integration tests if the code under test logs any WARNING or ERROR.

    A clean end-to-end run over a well-formed export must not warn.
    """
    if request.node.get_closest_marker("integration") is None:
        yield
        return

    test_nodeid = request.node.nodeid
    _integration_test_warnings[test_nodeid] = []

    handler = IntegrationTestWarningHandler(test_nodeid)
    root_logger = logging.getLogger()
    root_logger.addHandler(handler)

    try:
        yield
    finally:
        root_logger.removeHandler(handler)


@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(
    item: pytest.Item, call: pytest.CallInfo[None]
) -> Generator[None]:  # type: ignore[misc]
    """Mark a passed integration test as failed if warnings were logged during its call phase."""
    outcome = yield
    report = outcome.get_result()

    if call.when == "call" and report.outcome == "passed":
        warning_records = _integration_test_warnings.get(item.nodeid, [])

        if warning_records:
            warning_messages = [
                f"{record.levelname}: {record.getMessage()} (in {record.name}:{record.lineno})"
                for record in warning_records
            ]
            report.outcome = "failed"
            report.longrepr = f"Integration test failed: {len(warning_records)} warning(s) detected:\n" + "\n".join(
                f"  - {msg}" for msg in warning_messages
            )

        _integration_test_warnings.pop(item.nodeid, None)


class FakeTracker:
    """In-memory IssueTracker.

    Issues are numbered sequentially after ``existing`` pre-existing ones.
    Creating an issue whose title is in ``fail_create`` and closing an issue
    whose number is in ``fail_close`` raise TrackerAPIError.
    """

    def __init__(
        self,
        existing: int = 0,
        *,
        fail_create: Iterable[str] = (),
        fail_close: Iterable[int] = (),
        fail_count: bool = False,
        retry_after: str | None = None,
    ) -> None:
        self.issues: list[dict[str, Any]] = [
            {"number": n, "title": f"Existing {n}", "body": "", "labels": [], "closed": False}
            for n in range(1, existing + 1)
        ]
        self.fail_create: set[str] = set(fail_create)
        self.fail_close: set[int] = set(fail_close)
        self.fail_count = fail_count
        self.retry_after = retry_after
        self.calls: list[tuple[str, Any]] = []

    def count_issues(self) -> TrackerResponse[int]:
        self.calls.append(("count", None))
        if self.fail_count:
            msg = "listing failed"
            raise TrackerAPIError(msg, retry_after=self.retry_after, status=500)
        return TrackerResponse(len(self.issues), self.retry_after)

    def create_issue(
        self,
        title: str,
        body: str,
        *,
        closed: bool = False,
        labels: Sequence[str] = (),
    ) -> TrackerResponse[int]:
        self.calls.append(("create", title))
        if title in self.fail_create:
            msg = f"cannot create {title}"
            raise TrackerAPIError(msg, retry_after=self.retry_after, status=422)
        number = len(self.issues) + 1
        self.issues.append({"number": number, "title": title, "body": body, "labels": list(labels), "closed": False})
        return TrackerResponse(number, self.retry_after)

    def close_issue(self, number: int) -> TrackerResponse[None]:
        self.calls.append(("close", number))
        if number in self.fail_close:
            msg = f"cannot close #{number}"
            raise TrackerAPIError(msg, retry_after=self.retry_after, status=502)
        self.issues[number - 1]["closed"] = True
        return TrackerResponse(None, self.retry_after)

    def by_title(self, title: str) -> dict[str, Any]:
        return next(issue for issue in self.issues if issue["title"] == title)


def export_record(issue_id: int, status: str = "new", **overrides: Any) -> dict[str, Any]:
    """One entry of a Bitbucket export's ``issues`` array."""
    record: dict[str, Any] = {
        "id": issue_id,
        "title": f"Issue {issue_id}",
        "content": f"Content of issue {issue_id}",
        "status": status,
        "priority": "major",
        "kind": "bug",
        "component": None,
        "reporter": "alice",
        "assignee": None,
        "watchers": ["alice"],
        "voters": [],
        "version": None,
        "milestone": None,
        "created_on": "2018-01-17T20:21:58.143417+00:00",
        "updated_on": "2018-01-18T09:00:00.000000+00:00",
        "content_updated_on": "2018-01-17T20:21:58.143417+00:00",
        "edited_on": None,
    }
    record.update(overrides)
    return record


@pytest.fixture
def make_export(tmp_path: Path) -> Callable[..., Path]:
    """Build a Bitbucket export zip from issue records."""

    def _make_export(records: list[dict[str, Any]], member: str = "db-1.0.json") -> Path:
        document = {
            "issues": records,
            "comments": [],
            "attachments": [],
            "logs": [],
            "milestones": [],
            "versions": [],
            "components": [],
            "meta": {"default_kind": "bug"},
        }
        path = tmp_path / "bitbucket-export.zip"
        with zipfile.ZipFile(path, "w") as archive:
            archive.writestr(member, json.dumps(document))
        return path

    return _make_export


@pytest.fixture
def issue_record() -> Callable[..., dict[str, Any]]:
    """Factory for Bitbucket export issue records."""
    return export_record


@pytest.fixture
def make_tracker() -> type[FakeTracker]:
    """The in-memory tracker class, for building trackers with per-test failures."""
    return FakeTracker
