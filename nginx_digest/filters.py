"""Entry filters: HTTP error status and $time_local window."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Mapping

from nginx_digest.timeparse import TimeParseError, parse_time_local

logger = logging.getLogger(__name__)

# HTTP errors are 400-599
HTTP_ERROR_RANGE = range(400, 600)


def error_status(entry: Mapping[str, str]) -> int | None:
    """Return the entry's status as int if it lies in the HTTP error range."""
    raw = entry.get("status")
    if raw is None:
        return None
    if not (raw.isascii() and raw.isdigit()):
        return None
    status = int(raw)
    return status if status in HTTP_ERROR_RANGE else None


@dataclass(frozen=True)
class TimeWindow:
    """Inclusive [since, until] window; None leaves that side open.

    Bounds must be timezone-aware.
    """
    since: datetime | None = None
    until: datetime | None = None

    @property
    def bounded(self) -> bool:
        return self.since is not None or self.until is not None

    def contains(self, moment: datetime) -> bool:
        if self.since is not None and moment < self.since:
            return False
        if self.until is not None and moment > self.until:
            return False
        return True


def filter_by_window(entries: Iterable[Mapping[str, str]], window: TimeWindow) -> list[Mapping[str, str]]:
    """Keep entries whose $time_local falls inside the window.

    Entries without a ``time_local`` field are always kept. When the window
    has a bound, entries whose ``time_local`` cannot be parsed are logged and
    dropped.
    """
    if not window.bounded:
        return list(entries)

    kept = []
    rejected = 0
    for entry in entries:
        raw = entry.get("time_local")
        if raw is None:
            kept.append(entry)
            continue
        try:
            moment = parse_time_local(raw)
        except TimeParseError as exc:
            logger.warning("Excluding entry from time window: %s", exc)
            rejected += 1
            continue
        if window.contains(moment):
            kept.append(entry)

    if rejected:
        logger.warning("Excluded %d entries with an unparseable time_local", rejected)
    logger.debug("Time window kept %d entries", len(kept))
    return kept
