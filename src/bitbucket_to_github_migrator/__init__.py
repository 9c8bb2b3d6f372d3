"""
Bitbucket to GitHub Migration Tool

Migrates the issues of a Bitbucket issue export to a GitHub repository,
keeping status, priority, kind, component and reporter as labels and body text.
"""

from __future__ import annotations

from .cli import main
from .exceptions import ExportError, MigrationError, TrackerAPIError
from .export import read_export
from .github_utils import GitHubTracker
from .labels import LabelTranslator
from .orchestrator import MigrationResult, Migrator, RunTally
from .utils import setup_logging

# Package version
__version__ = "0.1.0"

__all__ = [
    "ExportError",
    "GitHubTracker",
    "LabelTranslator",
    "MigrationError",
    "MigrationResult",
    "Migrator",
    "RunTally",
    "TrackerAPIError",
    "main",
    "read_export",
    "setup_logging",
]
