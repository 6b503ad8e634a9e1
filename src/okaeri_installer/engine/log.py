"""Per-operation merge log.

Each line is ``severity|message`` with severity one of ``i`` (info),
``e`` (error) or ``s`` (success). Lines are mirrored to the module logger.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Iterator

logger = logging.getLogger(__name__)


class LogSeverity(StrEnum):
    INFO = "i"
    ERROR = "e"
    SUCCESS = "s"


_LOG_LEVELS: dict[LogSeverity, int] = {
    LogSeverity.INFO: logging.INFO,
    LogSeverity.ERROR: logging.ERROR,
    LogSeverity.SUCCESS: logging.INFO,
}


@dataclass(frozen=True)
class LogLine:
    severity: LogSeverity
    message: str
    depth: int = 0

    def format(self) -> str:
        return f"{self.severity.value}|{chr(9) * self.depth}{self.message}"


@dataclass
class MergeLog:
    """Ordered log of one install or uninstall operation."""

    lines: list[LogLine] = field(default_factory=list)

    def add(self, severity: LogSeverity, message: str, depth: int = 0) -> LogLine:
        line = LogLine(severity, message, depth)
        self.lines.append(line)
        logger.log(_LOG_LEVELS[severity], "%s%s", "  " * depth, message)
        return line

    def info(self, message: str, depth: int = 0) -> LogLine:
        return self.add(LogSeverity.INFO, message, depth)

    def error(self, message: str, depth: int = 0) -> LogLine:
        return self.add(LogSeverity.ERROR, message, depth)

    def success(self, message: str, depth: int = 0) -> LogLine:
        return self.add(LogSeverity.SUCCESS, message, depth)

    @property
    def has_errors(self) -> bool:
        return any(line.severity is LogSeverity.ERROR for line in self.lines)

    def formatted(self) -> list[str]:
        return [line.format() for line in self.lines]

    def __iter__(self) -> Iterator[LogLine]:
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    def __str__(self) -> str:
        return "\n".join(self.formatted())


def parse_line(raw: str) -> LogLine:
    """Parse a ``severity|message`` line back into a :class:`LogLine`."""
    severity, sep, message = raw.partition("|")
    if not sep:
        raise ValueError(f"Not a merge log line: {raw!r}")
    stripped = message.lstrip("\t")
    return LogLine(LogSeverity(severity), stripped, len(message) - len(stripped))
