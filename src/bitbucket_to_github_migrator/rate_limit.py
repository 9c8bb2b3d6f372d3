"""
Pacing of GitHub API requests based on the Retry-After response header.

GitHub asks integrators to wait at least one second between requests:
https://docs.github.com/en/rest/using-the-rest-api/best-practices-for-using-the-rest-api
"""

from __future__ import annotations

import datetime as dt
import logging
import re
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Mapping

logger: logging.Logger = logging.getLogger(__name__)

MINIMUM_DELAY: Final[dt.timedelta] = dt.timedelta(seconds=1)

_UNIT_SECONDS: Final[dict[str, float]] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,  # micro sign
    "μs": 1e-6,  # greek mu
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_COMPONENT: Final[str] = r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)"
_DURATION_RE: Final[re.Pattern[str]] = re.compile(rf"\+?(?:{_COMPONENT})+")
_COMPONENT_RE: Final[re.Pattern[str]] = re.compile(_COMPONENT)


def parse_duration(value: str) -> dt.timedelta:
    """Parse a duration expression such as "2s", "1m30s" or "1.5h".

    Raises:
        ValueError: If the value is not a valid non-negative duration expression
    """
    if not _DURATION_RE.fullmatch(value):
        msg = f"Invalid duration: {value!r}"
        raise ValueError(msg)
    seconds = sum(float(amount) * _UNIT_SECONDS[unit] for amount, unit in _COMPONENT_RE.findall(value))
    return dt.timedelta(seconds=seconds)


def next_delay(retry_after: str | None, *, log: logging.Logger | None = None) -> dt.timedelta:
    """Compute how long to wait before the next request.

    The Retry-After value is tried as a plain number of seconds first (what
    GitHub documents), then as a duration with units (what it has been seen
    to send). Missing, unparseable or out-of-range values fall back to one
    second, and the result is never shorter than one second.
    """
    log = log or logger
    value = (retry_after or "").strip()
    if not value:
        return MINIMUM_DELAY

    digits = value.removeprefix("+")
    try:
        if digits.isascii() and digits.isdigit():
            delay = dt.timedelta(seconds=int(digits))
        else:
            delay = parse_duration(value)
    except (ValueError, OverflowError) as e:
        log.debug(f"Error parsing Retry-After value '{value}': {e}")
        return MINIMUM_DELAY

    return max(delay, MINIMUM_DELAY)


def retry_after_from_headers(headers: Mapping[str, str] | None) -> str | None:
    """Return the Retry-After header value from a response header mapping."""
    if not headers:
        return None
    for name, value in headers.items():
        if name.lower() == "retry-after":
            return value
    return None
