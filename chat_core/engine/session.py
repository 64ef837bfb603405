"""会话状态机。

ConversationSession 负责把一次用户输入串起来：

    send(query) -> 追加 user 消息 -> 匹配 / 兜底 -> 模拟打字延迟 -> 追加 bot 消息

状态只有两个：Idle 与 AwaitingReply（pending=True）。同一会话同一时间只允许
一个待完成的回复，pending 期间的 send() 直接忽略。每次消息日志变化都会立即
把完整日志写入 PersistenceStore；写入失败只发出 StorageWarning，内存中的状态
仍然是权威数据。
"""

import asyncio
import logging
import warnings
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

from chat_core.domain.exceptions import StorageError, StorageWarning
from chat_core.domain.models import DEFAULT_THEME, THEMES, Message
from chat_core.domain.store import THEME_KEY, PersistenceStore
from chat_core.engine.typing_simulator import TypingSimulator
from chat_core.infrastructure.logging.logger import logger
from chat_core.knowledge.fallback import FallbackSelector
from chat_core.knowledge.matcher import FuzzyMatcher


class ConversationSession:
    def __init__(
        self,
        matcher: FuzzyMatcher,
        fallback: FallbackSelector,
        store: PersistenceStore,
        typing_simulator: Optional[TypingSimulator] = None,
        default_theme: str = DEFAULT_THEME,
    ):
        self._matcher = matcher
        self._fallback = fallback
        self._store = store
        self._typing = typing_simulator or TypingSimulator()
        self._log_ctx: Dict[str, Any] = {"session_id": f"s-{uuid4().hex}"}

        messages, dark_mode = store.load()
        self._messages: List[Message] = list(messages)
        self._dark_mode = dark_mode
        self._theme = _resolve_theme(store.load_value(THEME_KEY, default_theme))
        self._pending = False
        self._reply_task: Optional[asyncio.Task] = None
        self._log(logging.INFO, "Session started", restored_messages=len(self._messages))

    # ---- 展示层接口 ----

    def send(self, text: str) -> Optional["asyncio.Task[Message]"]:
        """接受一条用户输入。

        空白输入或已有待完成回复时返回 None 且不改变状态；否则立即追加 user 消息，
        并返回一个在 bot 回复追加后完成的 Task（结果为该 bot 消息）。
        必须在运行中的事件循环里调用。
        """

        if not text or not text.strip():
            return None
        if self._pending:
            self._log(logging.WARNING, "Ignored query while a reply is pending", query=text)
            return None
        loop = asyncio.get_running_loop()

        self._messages.append(Message(role="user", text=text))
        self._pending = True
        self._persist()

        answer = self._resolve_answer(text)
        self._reply_task = loop.create_task(self._deliver_reply(answer))
        return self._reply_task

    def clear(self, confirmed: bool) -> bool:
        """清空会话。confirmed 由调用方（例如确认对话框）决定，False 时不做任何事。"""

        if not confirmed:
            return False
        if self._reply_task is not None and not self._reply_task.done():
            self._reply_task.cancel()
        self._typing.cancel()
        self._reply_task = None
        self._pending = False
        dropped = len(self._messages)
        self._messages = []
        try:
            self._store.clear()
        except StorageError as e:
            self._warn_storage(e)
        self._log(logging.INFO, "Session cleared", dropped_messages=dropped)
        return True

    def current_messages(self) -> Tuple[Message, ...]:
        return tuple(self._messages)

    def is_pending(self) -> bool:
        return self._pending

    async def wait_idle(self) -> None:
        """等待当前待完成的回复（如果有）。被 clear() 取消的回复不会抛出。"""

        task = self._reply_task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise

    # ---- 暗色模式与主题 ----

    @property
    def dark_mode(self) -> bool:
        return self._dark_mode

    def set_dark_mode(self, flag: bool) -> None:
        self._dark_mode = bool(flag)
        try:
            self._store.save_dark_mode(self._dark_mode)
        except StorageError as e:
            self._warn_storage(e)

    def toggle_dark_mode(self) -> bool:
        self.set_dark_mode(not self._dark_mode)
        return self._dark_mode

    @property
    def theme(self) -> str:
        return self._theme

    def set_theme(self, name: str) -> str:
        """切换主题，未知主题名回退为默认主题。返回实际生效的主题名。"""

        self._theme = _resolve_theme(name)
        try:
            self._store.save_value(THEME_KEY, self._theme)
        except StorageError as e:
            self._warn_storage(e)
        return self._theme

    # ---- 内部实现 ----

    def _resolve_answer(self, query: str) -> str:
        match = self._matcher.lookup(query)
        if match is not None:
            self._log(
                logging.INFO,
                "Matched knowledge entry",
                query=query,
                entry_index=match.entry_index,
                score=round(match.score, 4),
            )
            return match.answer
        self._log(logging.INFO, "No confident match, using fallback", query=query)
        return self._fallback.pick(query)

    async def _deliver_reply(self, answer: str) -> Message:
        await self._typing.delay(len(answer))
        reply = Message(role="bot", text=answer)
        self._messages.append(reply)
        self._pending = False
        self._reply_task = None
        self._persist()
        self._log(logging.INFO, "Delivered reply", message_count=len(self._messages))
        return reply

    def _persist(self) -> None:
        try:
            self._store.save(self._messages)
        except StorageError as e:
            self._warn_storage(e)

    def _warn_storage(self, error: StorageError) -> None:
        self._log(logging.WARNING, "Persistence write failed", code=error.code, error=error.message)
        warnings.warn(f"{error.code}: {error.message}", StorageWarning, stacklevel=3)

    def _log(self, level: int, message: str, **fields: Any) -> None:
        payload = dict(self._log_ctx)
        payload.update(fields)
        logger.log(level, message, extra={"extra": payload})


def _resolve_theme(name: Optional[str]) -> str:
    return name if name in THEMES else DEFAULT_THEME
