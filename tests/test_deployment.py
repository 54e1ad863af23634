import pytest

from raildev.deployment import RetryConfig, stream_logs, take_last_n_logs

FAST = RetryConfig(max_attempts=3, initial_delay_ms=0, max_delay_ms=0, backoff_multiplier=1.5)


def test_take_last_n_logs_with_limit():
    logs = ["log1", "log2", "log3", "log4", "log5"]
    assert take_last_n_logs(logs, 3) == ["log3", "log4", "log5"]
    assert take_last_n_logs(logs, 2) == ["log4", "log5"]


def test_take_last_n_logs_limit_exceeds_size():
    assert take_last_n_logs(["log1", "log2", "log3"], 5) == ["log1", "log2", "log3"]


def test_take_last_n_logs_no_limit():
    assert take_last_n_logs(["log1", "log2", "log3"], None) == ["log1", "log2", "log3"]


def test_take_last_n_logs_empty_vec():
    assert take_last_n_logs([], 5) == []
    assert take_last_n_logs([], None) == []


def test_take_last_n_logs_limit_zero():
    assert take_last_n_logs(["log1", "log2", "log3"], 0) == []


def batches_stream(batches, error=None):
    async def gen():
        for batch in batches:
            yield batch
        if error is not None:
            raise error

    return gen()


@pytest.mark.asyncio
async def test_stream_logs_delivers_in_order():
    received = []
    batches = [[{"timestamp": "1", "m": "a"}], [{"timestamp": "2", "m": "b"}]]
    await stream_logs(lambda: batches_stream(batches), received.append, FAST)
    assert [line["m"] for line in received] == ["a", "b"]


@pytest.mark.asyncio
async def test_stream_logs_dedupes_after_reconnect():
    received = []
    attempts = []

    def subscribe():
        attempts.append(1)
        if len(attempts) == 1:
            return batches_stream(
                [[{"timestamp": "1", "m": "a"}, {"timestamp": "2", "m": "b"}]],
                error=ConnectionError("dropped"),
            )
        return batches_stream(
            [[{"timestamp": "1", "m": "a"}, {"timestamp": "2", "m": "b"},
              {"timestamp": "3", "m": "c"}]]
        )

    await stream_logs(subscribe, received.append, FAST)
    assert [line["m"] for line in received] == ["a", "b", "c"]
    assert len(attempts) == 2


@pytest.mark.asyncio
async def test_stream_logs_accepts_awaitable_subscription():
    received = []

    async def subscribe():
        return batches_stream([[{"timestamp": "5", "m": "x"}]])

    await stream_logs(subscribe, received.append, FAST)
    assert received == [{"timestamp": "5", "m": "x"}]


@pytest.mark.asyncio
async def test_stream_logs_gives_up_after_max_attempts():
    attempts = []

    def subscribe():
        attempts.append(1)
        return batches_stream([], error=ConnectionError("down"))

    with pytest.raises(ConnectionError, match="down"):
        await stream_logs(subscribe, lambda line: None, FAST)
    assert len(attempts) == FAST.max_attempts


@pytest.mark.asyncio
async def test_stream_logs_uses_timestamp_attribute():
    class Line:
        def __init__(self, timestamp):
            self.timestamp = timestamp

    received = []
    lines = [Line("2"), Line("1"), Line("3")]
    await stream_logs(lambda: batches_stream([lines]), received.append, FAST)
    assert [line.timestamp for line in received] == ["2", "3"]