"""Format compiler: nginx log_format string -> line-matching pattern.

Every ``$name`` (or ``${name}``) token becomes a greedy capture slot; all other
characters of the format are escaped so they match literally.
"""

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(r"\$(?:\{([a-z0-9_-]+)\}|([a-z0-9_-]+))")

SLOT = "(.*)"


class PatternCompileError(Exception):
    """Raised when a log_format string cannot be turned into a LogPattern."""


@dataclass(frozen=True)
class LogPattern:
    source: str
    fields: tuple[str, ...]
    regex: re.Pattern

    def match(self, line: str) -> dict[str, str] | None:
        """Return field -> value for a matching line, or None.

        Slots are bound to field names by position. When a field name repeats,
        the value of its last slot wins.
        """
        m = self.regex.search(line)
        if not m:
            return None
        return dict(zip(self.fields, m.groups()))


def _literal(text: str, offset: int) -> str:
    if "$" in text:
        position = offset + text.index("$")
        raise PatternCompileError(f"Malformed variable at position {position}")
    return re.escape(text)


def compile_format(log_format: str) -> LogPattern:
    """Compile a log_format string into a LogPattern.

    Raises PatternCompileError when the format holds no variables or has a
    ``$`` that does not start a valid variable name.
    """
    parts = []
    fields = []
    pos = 0

    for m in TOKEN_PATTERN.finditer(log_format):
        parts.append(_literal(log_format[pos:m.start()], pos))
        parts.append(SLOT)
        fields.append(m.group(1) or m.group(2))
        pos = m.end()
    parts.append(_literal(log_format[pos:], pos))

    if not fields:
        raise PatternCompileError("Log format contains no $variables")

    duplicates = sorted({f for f in fields if fields.count(f) > 1})
    if duplicates:
        logger.warning("Log format repeats variable(s) %s; last occurrence wins", ", ".join(duplicates))

    try:
        regex = re.compile("".join(parts))
    except re.error as exc:
        raise PatternCompileError(f"Compiled pattern is invalid: {exc}") from exc

    logger.debug("Compiled log format with %d field(s): %s", len(fields), ", ".join(fields))
    return LogPattern(source=log_format, fields=tuple(fields), regex=regex)
