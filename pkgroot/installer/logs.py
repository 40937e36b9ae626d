"""Append-only audit log returned by every install/uninstall operation."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterator

from pkgroot.errors import format_error, format_warning, is_error_message

_logging = logging.getLogger(__name__)


class LogLevel(Enum):
    INFO = "information"
    WARNING = "warning"
    ERROR = "error"


_STDLIB_LEVELS = {
    LogLevel.INFO: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


@dataclass(frozen=True)
class LogEntry:
    level: LogLevel
    source_id: str
    message: str
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def is_error(self) -> bool:
        return is_error_message(self.message)

    def __str__(self) -> str:
        return f"[{self.level.value}] {self.source_id}: {self.message}"


class InstallLog:
    """Ordered audit trail of (level, source id, message) entries.

    Entries are never removed. Each append is mirrored to the stdlib logger
    so ``--debug`` shows the same trail live.
    """

    def __init__(self, source_id: str = "Installer"):
        self.source_id = source_id
        self._entries: list[LogEntry] = []

    def add(self, level: LogLevel, message: str, source_id: str | None = None) -> LogEntry:
        entry = LogEntry(level=level, source_id=source_id or self.source_id, message=message)
        self._entries.append(entry)
        _logging.log(_STDLIB_LEVELS[level], "%s: %s", entry.source_id, message)
        return entry

    def info(self, message: str) -> LogEntry:
        return self.add(LogLevel.INFO, message)

    def warning(self, message: str) -> LogEntry:
        """Append a ``Warning:`` line."""
        return self.add(LogLevel.WARNING, format_warning(message))

    def error(self, message: str) -> LogEntry:
        """Append an ``Error:`` line; callers count these as failures."""
        return self.add(LogLevel.ERROR, format_error(message))

    def extend(self, other: "InstallLog | list[LogEntry]") -> None:
        for entry in other:
            self._entries.append(entry)

    @property
    def entries(self) -> list[LogEntry]:
        return list(self._entries)

    @property
    def messages(self) -> list[str]:
        return [e.message for e in self._entries]

    @property
    def error_count(self) -> int:
        return sum(1 for e in self._entries if e.is_error)

    @property
    def has_errors(self) -> bool:
        return any(e.is_error for e in self._entries)

    def lines_starting_with(self, prefix: str) -> list[str]:
        return [m for m in self.messages if m.startswith(prefix)]

    def render(self) -> str:
        return "\n".join(str(e) for e in self._entries)

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> LogEntry:
        return self._entries[index]


__all__ = [
    "LogLevel",
    "LogEntry",
    "InstallLog",
]
