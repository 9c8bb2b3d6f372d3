"""Tests for ordering and skip-resolution."""

from __future__ import annotations

import pytest

from bitbucket_to_github_migrator.models import SourceIssue
from bitbucket_to_github_migrator.resume import order_issues, skip_migrated


def _issues(*ids: int) -> list[SourceIssue]:
    return [SourceIssue(id=i, title=f"Issue {i}") for i in ids]


@pytest.mark.unit
class TestOrderIssues:
    def test_sorts_by_id(self) -> None:
        ordered = order_issues(_issues(7, 2, 40, 3))
        assert [issue.id for issue in ordered] == [2, 3, 7, 40]

    def test_ties_keep_export_order(self) -> None:
        first = SourceIssue(id=5, title="first")
        second = SourceIssue(id=5, title="second")
        ordered = order_issues([SourceIssue(id=9, title="x"), first, second])
        assert ordered == [first, second, ordered[2]]
        assert ordered[2].id == 9


@pytest.mark.unit
class TestSkipMigrated:
    ten = _issues(*range(1, 11))

    def test_nothing_existing(self) -> None:
        assert skip_migrated(self.ten, 0) == self.ten

    def test_partial(self) -> None:
        assert skip_migrated(self.ten, 4) == self.ten[4:]
        assert [issue.id for issue in skip_migrated(self.ten, 4)] == [5, 6, 7, 8, 9, 10]

    def test_all_existing(self) -> None:
        assert skip_migrated(self.ten, 10) == []

    def test_more_existing_than_source(self) -> None:
        assert skip_migrated(self.ten, 15) == []

    def test_sparse_ids_are_skipped_by_position(self) -> None:
        ordered = _issues(3, 10, 11, 50)
        assert [issue.id for issue in skip_migrated(ordered, 2)] == [11, 50]

    def test_negative_count(self) -> None:
        with pytest.raises(ValueError, match="cannot be negative"):
            skip_migrated(self.ten, -1)
