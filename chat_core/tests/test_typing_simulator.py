import asyncio

import pytest

from chat_core.domain.exceptions import SessionBusyError
from chat_core.engine.typing_simulator import TypingSimulator


def test_duration_is_per_character():
    ts = TypingSimulator(interval_ms=15)
    assert ts.duration_for(10) == pytest.approx(0.15)
    assert ts.duration_for(0) == 0
    assert ts.duration_for(-3) == 0


def test_negative_interval_rejected():
    with pytest.raises(ValueError):
        TypingSimulator(interval_ms=-1)


def test_delay_uses_injected_sleep():
    slept = []

    async def fake_sleep(seconds):
        slept.append(seconds)

    async def scenario():
        ts = TypingSimulator(interval_ms=15, sleep=fake_sleep)
        await ts.delay(4)
        assert not ts.pending

    asyncio.run(scenario())
    assert slept == [pytest.approx(0.06)]


def test_second_delay_while_pending_is_rejected():
    async def scenario():
        ts = TypingSimulator(interval_ms=1000)
        ts.delay(100)
        assert ts.pending
        with pytest.raises(SessionBusyError):
            ts.delay(1)
        assert ts.cancel() is True
        assert not ts.pending
        assert ts.cancel() is False
        # 已完成的延迟不能再被取消
        done = ts.delay(0)
        await done
        assert ts.cancel() is False
        # 取消后可以重新开始
        task = ts.delay(0)
        await task

    asyncio.run(scenario())


def test_delay_needs_running_loop():
    ts = TypingSimulator()
    with pytest.raises(RuntimeError):
        ts.delay(1)
