"""Protocol defining the contract for the destination issue tracker.

The Migrator only needs three operations from the destination: count the
issues that already exist, create an issue, and close one. Keeping the
contract this small lets tests drive the Migrator with an in-memory fake.

Every call reports the response's Retry-After value, successful or not, so
the Migrator can pace the next request:

- On success, it is carried on the returned TrackerResponse.
- On failure, the call raises TrackerAPIError, which carries it instead.

Example implementations:
    - GitHubTracker (github_utils.py): PyGithub requester against the REST API
    - FakeTracker (tests/conftest.py): in-memory list of issues
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Generic, Protocol, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class TrackerResponse(Generic[T]):
    """Result of a successful tracker call."""

    value: T
    retry_after: str | None = None


class IssueTracker(Protocol):
    """Protocol for creating issues in a destination tracker."""

    def count_issues(self) -> TrackerResponse[int]:
        """Return the number of issues (in any state) already in the destination.

        Raises:
            TrackerAPIError: If the issues cannot be enumerated
        """
        ...

    def create_issue(
        self,
        title: str,
        body: str,
        *,
        closed: bool = False,
        labels: Sequence[str] = (),
    ) -> TrackerResponse[int]:
        """Create an issue and return its destination number.

        ``closed`` is informational for trackers that cannot create closed
        issues directly; the Migrator closes such issues with close_issue().

        Raises:
            TrackerAPIError: If the issue could not be created
        """
        ...

    def close_issue(self, number: int) -> TrackerResponse[None]:
        """Close an existing issue.

        Raises:
            TrackerAPIError: If the issue could not be closed
        """
        ...
