import json
import os
import re
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple
from uuid import uuid4

from chat_core.config.settings import settings
from chat_core.domain.exceptions import BusinessError, StorageError
from chat_core.domain.models import Message
from chat_core.domain.store import DARK_MODE_KEY, MESSAGES_KEY, PersistenceStore
from chat_core.infrastructure.logging.logger import logger


_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


class JsonKeyValueStore:
    """以“一个 key 一个 JSON 文件”的方式保存字符串键值对。

    每次写入先落到临时文件再 os.replace，保证不会留下半截文件。
    """

    def __init__(self, root: str | Path | None = None):
        self._root = Path(root or settings.storage_root).resolve()
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def get(self, key: str) -> Optional[Any]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise StorageError(code="STORE_READ_ERROR", message=str(e), key=key)

    def set(self, key: str, value: Any) -> None:
        path = self._path(key)
        tmp_path = self._root / f"{key}.{uuid4().hex}.json.tmp"
        try:
            tmp_path.write_text(json.dumps(value, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as e:
            tmp_path.unlink(missing_ok=True)
            raise StorageError(code="STORE_WRITE_ERROR", message=str(e), key=key)

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(code="STORE_DELETE_ERROR", message=str(e), key=key)

    def _path(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise BusinessError(code="INVALID_STORE_KEY", message=key)
        return self._root / f"{key}.json"


class JsonChatStateStore(PersistenceStore):
    """会话历史、暗色模式与主题名的本地持久化实现。"""

    def __init__(self, root: str | Path | None = None, kv: Optional[JsonKeyValueStore] = None):
        self._kv = kv or JsonKeyValueStore(root)

    def load(self) -> Tuple[List[Message], bool]:
        return self._load_messages(), self._load_dark_mode()

    def save(self, messages: Sequence[Message]) -> None:
        self._kv.set(MESSAGES_KEY, [m.to_dict() for m in messages])

    def save_dark_mode(self, flag: bool) -> None:
        self._kv.set(DARK_MODE_KEY, bool(flag))

    def clear(self) -> None:
        self._kv.delete(MESSAGES_KEY)

    def load_value(self, key: str, default: Optional[str] = None) -> Optional[str]:
        try:
            value = self._kv.get(key)
        except StorageError as e:
            self._discard(key, e.message)
            return default
        if not isinstance(value, str):
            return default
        return value

    def save_value(self, key: str, value: str) -> None:
        self._kv.set(key, value)

    def _load_messages(self) -> List[Message]:
        try:
            raw = self._kv.get(MESSAGES_KEY)
        except StorageError as e:
            self._discard(MESSAGES_KEY, e.message)
            return []
        if raw is None:
            return []
        if not isinstance(raw, list):
            self._discard(MESSAGES_KEY, "history is not a list")
            return []
        try:
            return [Message.from_dict(item) for item in raw]
        except (AttributeError, ValueError) as e:
            self._discard(MESSAGES_KEY, str(e))
            return []

    def _load_dark_mode(self) -> bool:
        try:
            raw = self._kv.get(DARK_MODE_KEY)
        except StorageError as e:
            self._discard(DARK_MODE_KEY, e.message)
            return False
        if isinstance(raw, bool):
            return raw
        # 兼容以字符串形式保存的旧值
        return str(raw).lower() == "true"

    @staticmethod
    def _discard(key: str, reason: str) -> None:
        logger.warning("Discarded corrupt persisted entry", extra={"extra": {"key": key, "reason": reason}})
