"""Fetching and streaming build and deploy logs."""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int
    initial_delay_ms: int
    max_delay_ms: int
    backoff_multiplier: float


LOGS_RETRY_CONFIG = RetryConfig(
    max_attempts=12,
    initial_delay_ms=1000,
    max_delay_ms=8000,
    backoff_multiplier=1.5,
)


def take_last_n_logs(logs: Sequence[T], limit: Optional[int]) -> list[T]:
    """The last `limit` logs; the API returns one more than asked for."""
    logs = list(logs)
    if limit is not None and 0 <= limit < len(logs):
        return logs[len(logs) - limit :]
    return logs


def _timestamp(line: Any) -> str:
    if isinstance(line, Mapping):
        return line["timestamp"]
    return line.timestamp


async def stream_logs(
    subscribe: Callable[[], Any],
    on_log: Callable[[Any], None],
    config: RetryConfig = LOGS_RETRY_CONFIG,
) -> None:
    """Stream log batches, reconnecting with backoff when the stream fails.

    `subscribe` returns (or resolves to) an async iterable of log batches.
    Lines whose timestamp is not newer than the last delivered one are
    skipped, so reconnecting does not repeat output.
    """
    last_timestamp: Optional[str] = None
    attempt = 0
    delay_ms = config.initial_delay_ms

    while True:
        attempt += 1
        try:
            stream = subscribe()
            if inspect.isawaitable(stream):
                stream = await stream
            iterator = stream.__aiter__()
            while True:
                try:
                    batch = await iterator.__anext__()
                except StopAsyncIteration:
                    return
                for line in batch:
                    timestamp = _timestamp(line)
                    if last_timestamp is not None and timestamp <= last_timestamp:
                        continue
                    last_timestamp = timestamp
                    on_log(line)
        except Exception:
            if attempt >= config.max_attempts:
                raise
            await asyncio.sleep(delay_ms / 1000)
            delay_ms = min(int(delay_ms * config.backoff_multiplier), config.max_delay_ms)