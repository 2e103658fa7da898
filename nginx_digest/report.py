"""Report assembly: the data handed to the renderer."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from nginx_digest.stats import ProblemRecord


@dataclass(frozen=True)
class ReportData:
    entries: tuple[Mapping[str, str], ...] = ()
    top_problems: tuple[ProblemRecord, ...] = ()
    passthrough: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def context(self) -> dict[str, Any]:
        """Template variables: passthrough settings plus the computed results."""
        ctx = dict(self.passthrough)
        ctx.update(
            entries=self.entries,
            problematic_entries=self.entries,
            top_problems=self.top_problems,
        )
        return ctx


def assemble_report(
    entries: Iterable[Mapping[str, str]],
    top_problems: Iterable[ProblemRecord],
    passthrough: Mapping[str, Any],
) -> ReportData:
    return ReportData(
        entries=tuple(MappingProxyType(dict(e)) for e in entries),
        top_problems=tuple(top_problems),
        passthrough=MappingProxyType(dict(passthrough)),
    )
