"""Bounded in-memory storage of log lines for the develop dashboard."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass

from raildev.code_runner import Color

MAX_LINES = 100_000


@dataclass(frozen=True)
class StoredLogLine:
    message: str
    color: Color


@dataclass(frozen=True)
class LogEntry:
    service_idx: int
    line: StoredLogLine


class ServiceLogBuffer:
    """The most recent lines of one service; the oldest are dropped first."""

    def __init__(self) -> None:
        self.lines: deque[StoredLogLine] = deque(maxlen=MAX_LINES)

    def push(self, line: StoredLogLine) -> None:
        self.lines.append(line)

    def __len__(self) -> int:
        return len(self.lines)


class LogStore:
    """Per-service buffers plus combined streams for local and image services."""

    def __init__(self, service_count: int) -> None:
        self.services: list[ServiceLogBuffer] = [
            ServiceLogBuffer() for _ in range(service_count)
        ]
        self.local_logs: deque[LogEntry] = deque(maxlen=MAX_LINES)
        self.image_logs: deque[LogEntry] = deque(maxlen=MAX_LINES)

    def push(self, service_idx: int, line: StoredLogLine, is_docker: bool) -> None:
        """Record a line for a service and in the local or image stream."""
        if 0 <= service_idx < len(self.services):
            self.services[service_idx].push(line)
        target = self.image_logs if is_docker else self.local_logs
        target.append(LogEntry(service_idx, line))

    def local_len(self) -> int:
        return len(self.local_logs)

    def image_len(self) -> int:
        return len(self.image_logs)

    def service_len(self, idx: int) -> int:
        """Number of lines stored for a service; 0 for an unknown index."""
        if 0 <= idx < len(self.services):
            return len(self.services[idx])
        return 0