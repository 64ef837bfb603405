"""模拟打字延迟。

回复内容在决定之后并不会立即可见，而是等待 len(text) 个 tick，
每个 tick 固定 interval_ms 毫秒。引擎不会逐字暴露部分文本，
延迟结束后完整答案一次性可用。
"""

import asyncio
from typing import Awaitable, Callable, Optional

from chat_core.domain.exceptions import SessionBusyError


Sleep = Callable[[float], Awaitable[None]]


class TypingSimulator:
    """一次只允许一个待完成延迟的可取消计时器。"""

    def __init__(self, interval_ms: float = 15.0, sleep: Optional[Sleep] = None):
        if interval_ms < 0:
            raise ValueError("interval_ms must be >= 0")
        self._interval_ms = interval_ms
        self._sleep = sleep or asyncio.sleep
        self._task: Optional[asyncio.Task] = None

    @property
    def interval_ms(self) -> float:
        return self._interval_ms

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def duration_for(self, text_length: int) -> float:
        """返回 text_length 个 tick 的总时长（秒）。"""

        return max(0, text_length) * self._interval_ms / 1000.0

    def delay(self, text_length: int) -> "asyncio.Task[None]":
        """启动一次延迟，返回延迟结束时完成的 Task。必须在运行中的事件循环里调用。"""

        if self.pending:
            raise SessionBusyError(code="TYPING_IN_PROGRESS", message="a typing delay is already outstanding")
        self._task = asyncio.get_running_loop().create_task(self._wait(self.duration_for(text_length)))
        return self._task

    async def _wait(self, seconds: float) -> None:
        await self._sleep(seconds)

    def cancel(self) -> bool:
        """取消尚未完成的延迟，返回是否真的取消了。"""

        task = self._task
        if task is None or task.done():
            return False
        task.cancel()
        self._task = None
        return True
