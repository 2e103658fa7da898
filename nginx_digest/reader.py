"""Log file reading, glob expansion, and pattern scanning."""

import glob
import gzip
import logging
import zlib
from typing import Iterable

from nginx_digest.filters import error_status
from nginx_digest.parser import LogPattern

logger = logging.getLogger(__name__)


class FileScanError(Exception):
    """Raised when a single log file cannot be read."""

    def __init__(self, path: str, cause: Exception):
        super().__init__(f"Failed to scan file {path}: {cause}")
        self.path = path
        self.cause = cause


def expand_paths(raw_paths: Iterable[str]) -> list[str]:
    """Expand globs and deduplicate, preserving the given order.

    Plain paths are kept whether or not they exist; reading reports them.
    """
    expanded = []
    seen = set()

    for raw in raw_paths:
        if any(c in raw for c in ("*", "?", "[")):
            matches = sorted(glob.glob(raw))
            if not matches:
                logger.warning("No log files match %s", raw)
        else:
            matches = [raw]
        for m in matches:
            if m not in seen:
                seen.add(m)
                expanded.append(m)

    return expanded


def read_text(path: str) -> str:
    """Read a whole log file; ``.gz`` files are decompressed."""
    try:
        if path.endswith(".gz"):
            with gzip.open(path, "rt", encoding="utf-8", errors="replace") as f:
                return f.read()
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            return f.read()
    except (OSError, EOFError, zlib.error) as exc:
        raise FileScanError(path, exc) from exc


def scan_file(pattern: LogPattern, path: str) -> list[dict[str, str]]:
    """Return entries from one file whose status is an HTTP error."""
    entries = []
    matched = 0
    for line in read_text(path).split("\n"):
        entry = pattern.match(line)
        if entry is None:
            continue
        matched += 1
        if error_status(entry) is not None:
            entries.append(entry)
    logger.debug("%s: %d matching lines, %d error entries", path, matched, len(entries))
    return entries


def scan(pattern: LogPattern, paths: Iterable[str]) -> list[dict[str, str]]:
    """Scan files sequentially; an unreadable file is logged and skipped."""
    entries = []
    for path in paths:
        try:
            entries.extend(scan_file(pattern, path))
        except FileScanError as exc:
            logger.error("%s", exc)
    logger.info("Collected %d error entries", len(entries))
    return entries
