"""Following `docker compose logs` and attributing lines to services."""

from __future__ import annotations

import asyncio
import contextlib
import os
from pathlib import Path
from typing import Mapping, Optional

from raildev.code_runner import COLORS, Color, LogLine

# Maps slug to (display name, colour).
ServiceMapping = Mapping[str, tuple[str, Color]]

_READ_LIMIT = 1 << 20
_background_tasks: set[asyncio.Task] = set()


def parse_log_line(line: str, service_mapping: ServiceMapping) -> Optional[LogLine]:
    """Parse a "service-1  | message" line; None for proxy and unrecognised lines."""
    pipe_idx = line.find(" | ")
    if pipe_idx < 0:
        return None
    service_part = line[:pipe_idx].strip()
    if service_part.startswith("railway-proxy"):
        return None
    message = line[pipe_idx + 3 :]
    for slug, (display_name, color) in service_mapping.items():
        if (
            service_part == slug
            or service_part.startswith(f"{slug}-")
            or service_part.startswith(f"{slug}_")
        ):
            return LogLine(display_name, message, False, color)
    return LogLine(service_part, message, False, COLORS[0])


def _strip_line_ending(text: str) -> str:
    if text.endswith("\n"):
        text = text[:-1]
        if text.endswith("\r"):
            text = text[:-1]
    return text


async def _parse_docker_logs(
    reader: asyncio.StreamReader, service_mapping: ServiceMapping, queue: asyncio.Queue
) -> None:
    while True:
        try:
            raw = await reader.readline()
        except (ValueError, asyncio.LimitOverrunError, OSError):
            break
        if not raw:
            break
        text = _strip_line_ending(raw.decode("utf-8", errors="replace"))
        log = parse_log_line(text, service_mapping)
        if log is not None:
            await queue.put(log)


def _start(coro) -> None:
    task = asyncio.create_task(coro)
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)


async def spawn_docker_logs(
    compose_path: os.PathLike | str,
    service_mapping: ServiceMapping,
    queue: asyncio.Queue,
) -> asyncio.subprocess.Process:
    """Start following the compose logs, putting parsed lines on the queue."""
    mapping = dict(service_mapping)
    process = await asyncio.create_subprocess_exec(
        "docker",
        "compose",
        "-f",
        str(Path(compose_path)),
        "logs",
        "-f",
        "--no-color",
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        limit=_READ_LIMIT,
    )
    try:
        _start(_parse_docker_logs(process.stdout, mapping, queue))
        _start(_parse_docker_logs(process.stderr, mapping, queue))
    except BaseException:
        with contextlib.suppress(ProcessLookupError, OSError):
            process.kill()
        raise
    return process