import asyncio
import os
import time

import pytest

from raildev.code_runner import (
    COLORS,
    Color,
    LogLine,
    ProcessManager,
    format_log_line,
    print_log_line,
)


async def _collect(queue, count, timeout=10):
    lines = []
    for _ in range(count):
        lines.append(await asyncio.wait_for(queue.get(), timeout))
    return lines


@pytest.mark.asyncio
async def test_spawn_reports_command_then_output(tmp_path):
    queue = asyncio.Queue()
    manager = ProcessManager()
    try:
        await manager.spawn_service("api", "echo hello", tmp_path, {}, queue)
        first, second = await _collect(queue, 2)
    finally:
        await manager.shutdown()
    assert first == LogLine("api", "$ echo hello", False, Color.CYAN)
    assert second == LogLine("api", "hello", False, Color.CYAN)


@pytest.mark.asyncio
async def test_stderr_lines_are_marked(tmp_path):
    queue = asyncio.Queue()
    manager = ProcessManager()
    try:
        await manager.spawn_service("worker", "echo oops 1>&2", tmp_path, {}, queue)
        lines = await _collect(queue, 2)
    finally:
        await manager.shutdown()
    assert lines[1].message == "oops"
    assert lines[1].is_stderr is True
    assert lines[0].is_stderr is False


@pytest.mark.asyncio
async def test_env_vars_and_working_dir_are_applied(tmp_path):
    queue = asyncio.Queue()
    manager = ProcessManager()
    try:
        await manager.spawn_service(
            "api", 'echo "$GREETING"; pwd', tmp_path, {"GREETING": "howdy"}, queue
        )
        lines = await _collect(queue, 3)
    finally:
        await manager.shutdown()
    assert lines[1].message == "howdy"
    assert os.path.realpath(lines[2].message) == os.path.realpath(tmp_path)


@pytest.mark.asyncio
async def test_colors_rotate_between_services(tmp_path):
    queue = asyncio.Queue()
    manager = ProcessManager()
    try:
        await manager.spawn_service("a", "true", tmp_path, {}, queue)
        await manager.spawn_service("b", "true", tmp_path, {}, queue)
        assert len(manager) == 2
        lines = await _collect(queue, 2)
    finally:
        await manager.shutdown()
    colors = {line.service_name: line.color for line in lines}
    assert colors == {"a": COLORS[0], "b": COLORS[1]}


@pytest.mark.asyncio
async def test_spawn_failure_raises(tmp_path):
    manager = ProcessManager()
    with pytest.raises(RuntimeError, match="Failed to spawn 'echo hi'"):
        await manager.spawn_service(
            "api", "echo hi", tmp_path / "missing", {}, asyncio.Queue()
        )
    assert len(manager) == 0


@pytest.mark.asyncio
async def test_shutdown_stops_long_running_processes(tmp_path):
    queue = asyncio.Queue()
    manager = ProcessManager()
    await manager.spawn_service("sleeper", "sleep 30", tmp_path, {}, queue)
    started = time.monotonic()
    await manager.shutdown()
    assert time.monotonic() - started < 5
    assert len(manager) == 0


def test_format_without_color(monkeypatch):
    monkeypatch.setenv("NO_COLOR", "1")
    log = LogLine("api", "listening", False, Color.CYAN)
    assert format_log_line(log) == "[api] listening"


def test_format_with_color(monkeypatch):
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.delenv("CLICOLOR", raising=False)
    log = LogLine("api", "listening", False, Color.CYAN)
    assert format_log_line(log) == "\x1b[36m[api]\x1b[0m listening"


def test_print_routes_by_stream(monkeypatch, capsys):
    monkeypatch.setenv("NO_COLOR", "1")
    print_log_line(LogLine("api", "out line", False, Color.GREEN))
    print_log_line(LogLine("api", "err line", True, Color.GREEN))
    captured = capsys.readouterr()
    assert captured.out == "[api] out line\n"
    assert captured.err == "[api] err line\n"