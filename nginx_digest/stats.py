"""Top problems: group error entries by request and rank them."""

import logging
from collections import Counter
from dataclasses import dataclass
from itertools import islice
from typing import Iterable, Iterator, Mapping

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankingConfig:
    limit: int | None = None
    min_count: int | None = None

    def __post_init__(self):
        if self.limit is not None and self.limit < 0:
            raise ValueError(f"limit must be >= 0, got {self.limit}")
        if self.min_count is not None and self.min_count < 1:
            raise ValueError(f"min_count must be >= 1, got {self.min_count}")


@dataclass(frozen=True)
class ProblemRecord:
    request_uri: str
    total_count: int
    status_breakdown: tuple[tuple[int, int], ...]

    @property
    def breakdown(self) -> str:
        return format_breakdown(self.status_breakdown)


def format_breakdown(breakdown: Iterable[tuple[int, int]]) -> str:
    """Render [(500, 5), (502, 1)] as 'HTTP/500:5, HTTP/502:1'."""
    return ", ".join(f"HTTP/{code}:{count}" for code, count in breakdown)


def count_statuses(entries: Iterable[Mapping[str, str]]) -> tuple[tuple[int, int], ...]:
    """Count entries per integer status, ascending by status code."""
    counter = Counter(int(e["status"]) for e in entries)
    return tuple(sorted(counter.items()))


def group_by_request(entries: Iterable[Mapping[str, str]]) -> dict[str, list[Mapping[str, str]]]:
    """Group entries by exact ``request`` value, in order of first appearance."""
    groups: dict[str, list[Mapping[str, str]]] = {}
    for entry in entries:
        request = entry.get("request")
        if request is None:
            continue
        groups.setdefault(request, []).append(entry)
    return groups


def _qualifying(groups: dict[str, list[Mapping[str, str]]], min_count: int | None) -> Iterator[ProblemRecord]:
    # sorted() is stable: equal sizes keep discovery order
    for request, group in sorted(groups.items(), key=lambda kv: -len(kv[1])):
        if min_count is not None and len(group) < min_count:
            continue
        yield ProblemRecord(
            request_uri=request,
            total_count=len(group),
            status_breakdown=count_statuses(group),
        )


def rank_problems(entries: Iterable[Mapping[str, str]], config: RankingConfig) -> list[ProblemRecord]:
    """Return the most frequent problem requests, most frequent first.

    Groups smaller than ``min_count`` are skipped and do not use up a slot;
    at most ``limit`` records are returned, exactly ``limit`` when enough
    groups qualify.
    """
    groups = group_by_request(entries)
    records = _qualifying(groups, config.min_count)
    if config.limit is not None:
        records = islice(records, config.limit)
    ranked = list(records)
    logger.info("Ranked %d of %d request group(s)", len(ranked), len(groups))
    return ranked
