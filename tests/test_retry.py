"""Unit tests for ircwire/utils/retry.py."""

import pytest

from ircwire.errors import NetworkError, RegistrationError
from ircwire.utils.retry import RetryExhaustedError, retry_connect


class RecordingSleep:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.mark.asyncio
async def test_success_first_attempt():
    """Test successful connection on the first attempt."""
    sleep = RecordingSleep()

    async def operation():
        return "session"

    assert await retry_connect(operation, sleep=sleep) == "session"
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_backoff_doubles_up_to_max():
    """Test exponential backoff between failed attempts."""
    sleep = RecordingSleep()
    calls = 0

    async def operation():
        nonlocal calls
        calls += 1
        if calls < 6:
            raise ConnectionRefusedError("refused")
        return "session"

    result = await retry_connect(
        operation, initial_delay=2, max_delay=10, max_attempts=0, sleep=sleep
    )
    assert result == "session"
    assert calls == 6
    assert sleep.delays == [2, 4, 8, 10, 10]


@pytest.mark.asyncio
async def test_registration_errors_are_retried():
    sleep = RecordingSleep()
    calls = 0

    async def operation():
        nonlocal calls
        calls += 1
        if calls == 1:
            raise RegistrationError("Nickname is already in use")
        return "session"

    assert await retry_connect(operation, sleep=sleep) == "session"
    assert len(sleep.delays) == 1


@pytest.mark.asyncio
async def test_exhausted_attempts():
    """Test that max attempts are not exceeded."""
    sleep = RecordingSleep()
    calls = 0

    async def operation():
        nonlocal calls
        calls += 1
        raise NetworkError("cannot connect")

    with pytest.raises(RetryExhaustedError) as exc_info:
        await retry_connect(operation, max_attempts=3, sleep=sleep)
    assert calls == 3
    assert exc_info.value.attempts == 3
    assert isinstance(exc_info.value.final_exception, NetworkError)
    assert len(sleep.delays) == 2


@pytest.mark.asyncio
async def test_other_errors_propagate_immediately():
    sleep = RecordingSleep()

    async def operation():
        raise ValueError("bad address")

    with pytest.raises(ValueError, match="bad address"):
        await retry_connect(operation, max_attempts=5, sleep=sleep)
    assert sleep.delays == []
