from typing import List, Optional, Protocol, Sequence, Tuple

from .models import Message


class PersistenceStore(Protocol):
    """会话状态的持久化协议。

    每次写入相互独立且立即生效，不存在跨 key 的事务。
    load 在记录缺失或损坏时必须回退到空日志/默认值，而不是抛出异常。
    """

    def load(self) -> Tuple[List[Message], bool]:
        ...

    def save(self, messages: Sequence[Message]) -> None:
        ...

    def save_dark_mode(self, flag: bool) -> None:
        ...

    def clear(self) -> None:
        ...

    def load_value(self, key: str, default: Optional[str] = None) -> Optional[str]:
        ...

    def save_value(self, key: str, value: str) -> None:
        ...


# 持久化 key，与前端 localStorage 使用的名称一致
MESSAGES_KEY = "chatMessages"
DARK_MODE_KEY = "darkMode"
THEME_KEY = "chatTheme"
