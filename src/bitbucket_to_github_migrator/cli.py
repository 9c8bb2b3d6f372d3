"""
Command-line interface for the Bitbucket to GitHub migration tool.
"""

from __future__ import annotations

import argparse
import logging
import string
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Final, NoReturn

from . import github_utils as ghu
from .exceptions import ExportError, MigrationError
from .export import read_export
from .orchestrator import Migrator
from .utils import PassError, setup_logging

if TYPE_CHECKING:
    from collections.abc import Sequence

logger: logging.Logger = logging.getLogger(__name__)

EXIT_OK: Final[int] = 0
EXIT_USAGE: Final[int] = 1
EXIT_FATAL: Final[int] = 2

_EPILOG: Final[str] = """\
The archive is a Bitbucket issue export, which can be obtained from the
repository settings on Bitbucket by choosing "Import & export" in the issues
section.

Environment:
  GITHUB_TOKEN    GitHub access token (unless --github-pass-token is given)

Exit codes: 0 when the run completed (even if some issues failed),
1 on usage errors, 2 when the export or the destination could not be read.
"""


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports usage errors with EXIT_USAGE."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(EXIT_USAGE, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="bitbucket-to-github-migrator",
        description="Migrate issues from a Bitbucket issue export to a GitHub repository",
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # Positional arguments
    _ = parser.add_argument("archive", help="Path to the Bitbucket issue export (zip file)")
    _ = parser.add_argument("github_repo", help="GitHub repository path (owner/repo)")

    # Optional arguments with short forms
    _ = parser.add_argument(
        "--labels",
        "-l",
        action="append",
        help="Comma separated labels to apply to all imported issues. Can be specified multiple times.",
    )

    _ = parser.add_argument(
        "--relabel",
        action="append",
        help='Label translation pattern (format: "source_pattern:target_pattern"). Can be specified multiple times.',
    )

    _ = parser.add_argument(
        "--no-labels", action="store_true", help="Do not attach labels to created issues"
    )

    _ = parser.add_argument(
        "--no-attribution", action="store_true", help="Do not prefix issue bodies with the original reporter"
    )

    _ = parser.add_argument(
        "--template", help="Path to a string.Template file used to render issue bodies"
    )

    _ = parser.add_argument(
        "--github-pass-token", help="Path for GitHub token in pass utility (default: github/cli/token)"
    )

    _ = parser.add_argument(
        "--octocat", action="store_true", help="Have the octocat announce the final report"
    )

    _ = parser.add_argument(
        "--verbose", "-v", action="count", default=0, help="Increase verbosity (-v for info, -vv for debug)"
    )

    return parser


def _load_template(path: str | None) -> string.Template | None:
    if path is None:
        return None
    return string.Template(Path(path).read_text(encoding="utf-8"))


def main(argv: Sequence[str] | None = None) -> None:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    verbosity: int = args.verbose
    setup_logging(verbosity=verbosity)

    try:
        _ = ghu.parse_repo_path(args.github_repo)
        token = ghu.get_token(args.github_pass_token)
        template = _load_template(args.template)
    except (MigrationError, PassError, OSError) as e:
        logger.error(str(e))  # noqa: TRY400
        sys.exit(EXIT_USAGE)

    if not token:
        logger.error("GITHUB_TOKEN cannot be empty")
        parser.print_usage(sys.stderr)
        sys.exit(EXIT_USAGE)

    try:
        issues = read_export(args.archive)

        migrator = Migrator(
            ghu.GitHubTracker(ghu.get_client(token), args.github_repo),
            extra_labels=args.labels,
            label_translations=args.relabel,
            attach_labels=not args.no_labels,
            attribution=not args.no_attribution,
            template=template,
        )
        result = migrator.migrate(issues)
    except ExportError as e:
        logger.error(f"Could not read export: {e}")  # noqa: TRY400
        sys.exit(EXIT_FATAL)
    except MigrationError as e:
        logger.error(f"Migration failed: {e}")  # noqa: TRY400
        sys.exit(EXIT_FATAL)
    except Exception:
        logger.exception("Migration failed")
        sys.exit(EXIT_FATAL)

    report = result.tally.summary()
    if args.octocat:
        report = ghu.fetch_octocat(report, token) or report
    print(report, file=sys.stderr)
    sys.exit(EXIT_OK)
