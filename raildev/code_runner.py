"""Running code services as local processes and relaying their output."""

from __future__ import annotations

import asyncio
import contextlib
import os
import signal
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Mapping

_SHUTDOWN_GRACE_SECONDS = 5
_READ_LIMIT = 1 << 20


class Color(Enum):
    """Terminal colours used to tell services apart, with their ANSI codes."""

    CYAN = "36"
    GREEN = "32"
    YELLOW = "33"
    MAGENTA = "35"
    BLUE = "34"
    RED = "31"


COLORS: tuple[Color, ...] = (
    Color.CYAN,
    Color.GREEN,
    Color.YELLOW,
    Color.MAGENTA,
    Color.BLUE,
    Color.RED,
)


@dataclass(frozen=True)
class LogLine:
    service_name: str
    message: str
    is_stderr: bool
    color: Color


@dataclass
class _ManagedProcess:
    service_name: str
    process: asyncio.subprocess.Process
    color: Color
    readers: list[asyncio.Task] = field(default_factory=list)


def _strip_line_ending(text: str) -> str:
    if text.endswith("\n"):
        text = text[:-1]
        if text.endswith("\r"):
            text = text[:-1]
    return text


async def _stream_output(
    reader: asyncio.StreamReader,
    service_name: str,
    color: Color,
    is_stderr: bool,
    queue: asyncio.Queue,
) -> None:
    while True:
        try:
            raw = await reader.readline()
        except (ValueError, asyncio.LimitOverrunError, OSError):
            break
        if not raw:
            break
        message = _strip_line_ending(raw.decode("utf-8", errors="replace"))
        await queue.put(LogLine(service_name, message, is_stderr, color))


class ProcessManager:
    """Starts service commands through the shell and stops them together."""

    def __init__(self) -> None:
        self._processes: list[_ManagedProcess] = []

    def __len__(self) -> int:
        return len(self._processes)

    async def spawn_service(
        self,
        service_name: str,
        command: str,
        working_dir: os.PathLike | str,
        env_vars: Mapping[str, str],
        log_queue: asyncio.Queue,
    ) -> None:
        """Start a command and forward each output line to the queue."""
        color = COLORS[len(self._processes) % len(COLORS)]
        env = {**os.environ, **env_vars}
        if os.name == "nt":
            args = ("cmd", "/C", command)
            extra = {}
        else:
            args = ("sh", "-c", command)
            # A new session makes the child the leader of its own process group.
            extra = {"start_new_session": True}
        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                cwd=str(Path(working_dir)),
                env=env,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                limit=_READ_LIMIT,
                **extra,
            )
        except OSError as exc:
            raise RuntimeError(f"Failed to spawn '{command}'") from exc

        await log_queue.put(LogLine(service_name, f"$ {command}", False, color))

        managed = _ManagedProcess(service_name, process, color)
        managed.readers.append(
            asyncio.create_task(
                _stream_output(process.stdout, service_name, color, False, log_queue)
            )
        )
        managed.readers.append(
            asyncio.create_task(
                _stream_output(process.stderr, service_name, color, True, log_queue)
            )
        )
        self._processes.append(managed)

    async def shutdown(self) -> None:
        """Terminate every process, waiting briefly before killing what remains."""
        for managed in self._processes:
            if managed.process.returncode is not None:
                continue
            with contextlib.suppress(ProcessLookupError, PermissionError, OSError):
                if os.name == "nt":
                    managed.process.kill()
                else:
                    os.killpg(managed.process.pid, signal.SIGTERM)

        for managed in self._processes:
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(managed.process.wait(), _SHUTDOWN_GRACE_SECONDS)

        for managed in self._processes:
            if managed.process.returncode is None:
                with contextlib.suppress(ProcessLookupError, OSError):
                    managed.process.kill()
                with contextlib.suppress(asyncio.TimeoutError):
                    await asyncio.wait_for(managed.process.wait(), _SHUTDOWN_GRACE_SECONDS)
            for task in managed.readers:
                task.cancel()
            for task in managed.readers:
                with contextlib.suppress(asyncio.CancelledError, Exception):
                    await task

        self._processes.clear()


def _colors_enabled() -> bool:
    return "NO_COLOR" not in os.environ and os.environ.get("CLICOLOR") != "0"


def format_log_line(log: LogLine) -> str:
    """The line as printed: a coloured "[service]" prefix and the message."""
    prefix = f"[{log.service_name}]"
    if _colors_enabled():
        prefix = f"\x1b[{log.color.value}m{prefix}\x1b[0m"
    return f"{prefix} {log.message}"


def print_log_line(log: LogLine) -> None:
    """Print to stderr for stderr output, to stdout otherwise."""
    stream = sys.stderr if log.is_stderr else sys.stdout
    print(format_log_line(log), file=stream)