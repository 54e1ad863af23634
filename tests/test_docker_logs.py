import asyncio
import sys
from pathlib import Path
from unittest import mock

import pytest

from raildev.code_runner import COLORS, Color, LogLine
from raildev.docker_logs import parse_log_line, spawn_docker_logs

MAPPING = {"api": ("API Server", Color.GREEN), "db": ("Postgres", Color.MAGENTA)}


def test_parse_known_service_with_instance_suffix():
    log = parse_log_line("api-1  | listening", MAPPING)
    assert log == LogLine("API Server", "listening", False, Color.GREEN)


def test_parse_exact_slug_and_underscore_suffix():
    assert parse_log_line("db | ready", MAPPING).service_name == "Postgres"
    assert parse_log_line("db_1 | ready", MAPPING).service_name == "Postgres"


def test_parse_unknown_service_uses_first_color():
    log = parse_log_line("worker-2 | hi", MAPPING)
    assert log == LogLine("worker-2", "hi", False, COLORS[0])


def test_slug_prefix_without_separator_does_not_match():
    log = parse_log_line("apiserver-1 | x", MAPPING)
    assert log.service_name == "apiserver-1"


def test_proxy_lines_are_skipped():
    assert parse_log_line("railway-proxy-1 | request", MAPPING) is None


def test_line_without_separator_is_ignored():
    assert parse_log_line("Attaching to api-1", MAPPING) is None


def test_message_keeps_later_separators():
    log = parse_log_line("api-1 | a | b", MAPPING)
    assert log.message == "a | b"


SCRIPT = (
    "import sys\n"
    "print('api-1  | hello')\n"
    "print('railway-proxy-1 | skipped')\n"
    "print('db-1 | oops', file=sys.stderr)\n"
)


@pytest.mark.asyncio
async def test_spawn_docker_logs_streams_parsed_lines():
    real_exec = asyncio.create_subprocess_exec
    calls = []

    async def fake_exec(*args, **kwargs):
        calls.append(args)
        return await real_exec(sys.executable, "-c", SCRIPT, **kwargs)

    queue = asyncio.Queue()
    with mock.patch("asyncio.create_subprocess_exec", fake_exec):
        process = await spawn_docker_logs(Path("compose.yml"), MAPPING, queue)
    await process.wait()

    received = set()
    for _ in range(2):
        log = await asyncio.wait_for(queue.get(), 5)
        received.add((log.service_name, log.message))

    assert received == {("API Server", "hello"), ("Postgres", "oops")}
    assert calls[0] == ("docker", "compose", "-f", "compose.yml", "logs", "-f", "--no-color")