"""
Reading of Bitbucket issue exports.

The export is obtained from the repository settings on Bitbucket ("Import &
export" in the issues section). It is a zip archive holding a single JSON
document, ``db-1.0.json``, with the issues and their metadata.
"""

from __future__ import annotations

import json
import logging
import zipfile
from typing import TYPE_CHECKING, Any, Final

from .exceptions import ExportError
from .models import SourceIssue

if TYPE_CHECKING:
    from pathlib import Path

logger: logging.Logger = logging.getLogger(__name__)

EXPORT_MEMBER_NAME: Final[str] = "db-1.0.json"


def _find_export_member(archive: zipfile.ZipFile) -> zipfile.ZipInfo:
    json_members: list[zipfile.ZipInfo] = []
    for info in archive.infolist():
        if info.filename.rsplit("/", 1)[-1] == EXPORT_MEMBER_NAME:
            logger.debug(f"Found '{info.filename}'")
            return info
        if info.filename.endswith(".json"):
            json_members.append(info)
        else:
            logger.debug(f"Skipping file '{info.filename}'")

    if len(json_members) == 1:
        logger.debug(f"No {EXPORT_MEMBER_NAME} in archive, using '{json_members[0].filename}'")
        return json_members[0]
    msg = f"No {EXPORT_MEMBER_NAME} found in archive"
    raise ExportError(msg)


def decode_export(data: bytes) -> list[SourceIssue]:
    """Decode the export's JSON document into source issues, in export order.

    Raises:
        ExportError: If the document is not valid JSON or has no usable issues array
    """
    try:
        document: Any = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        msg = f"Error decoding JSON from archive: {e}"
        raise ExportError(msg) from e

    if not isinstance(document, dict):
        msg = "Export document must be a JSON object"
        raise ExportError(msg)

    records = document.get("issues", [])
    if not isinstance(records, list):
        msg = "Export 'issues' must be a list"
        raise ExportError(msg)

    issues: list[SourceIssue] = []
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            msg = f"Export issue at index {index} is not an object"
            raise ExportError(msg)
        try:
            issues.append(SourceIssue.from_export_record(record))
        except (KeyError, ValueError) as e:
            msg = f"Invalid export issue at index {index}: {e!r}"
            raise ExportError(msg) from e

    logger.info(f"Decoded {len(issues)} issues from export")
    return issues


def read_export(path: str | Path) -> list[SourceIssue]:
    """Read the issues from a Bitbucket export archive.

    Raises:
        ExportError: If the archive cannot be opened or its JSON decoded
    """
    try:
        with zipfile.ZipFile(path) as archive:
            # Bitbucket does not seem to set one, but log it if it does
            if archive.comment:
                logger.debug(f"Comment found in zip file: '{archive.comment.decode(errors='replace')}'")
            member = _find_export_member(archive)
            data = archive.read(member)
    except (OSError, zipfile.BadZipFile) as e:
        msg = f"Error opening '{path}': {e}"
        raise ExportError(msg) from e

    return decode_export(data)
