import json
import tempfile
from pathlib import Path

import pytest

from chat_core.domain.exceptions import BusinessError, StorageError
from chat_core.domain.models import Message
from chat_core.domain.store import THEME_KEY
from chat_core.infrastructure.storage.json_store import JsonChatStateStore, JsonKeyValueStore


def test_save_and_load_messages():
    with tempfile.TemporaryDirectory() as d:
        store = JsonChatStateStore(root=Path(d) / ".storage")
        msgs = [Message(role="user", text="سلام"), Message(role="bot", text="hi {x}")]
        store.save(msgs)
        loaded, dark = store.load()
        assert loaded == msgs
        assert dark is False

        store.save([])
        assert store.load()[0] == []


def test_load_absent_state():
    with tempfile.TemporaryDirectory() as d:
        store = JsonChatStateStore(root=Path(d) / ".storage")
        assert store.load() == ([], False)
        assert store.load_value(THEME_KEY, "blue") == "blue"


def test_corrupt_history_is_discarded():
    with tempfile.TemporaryDirectory() as d:
        root = Path(d) / ".storage"
        store = JsonChatStateStore(root=root)
        (root / "chatMessages.json").write_text("[{not json", encoding="utf-8")
        (root / "darkMode.json").write_text("???", encoding="utf-8")
        assert store.load() == ([], False)

        (root / "chatMessages.json").write_text(json.dumps([{"role": "admin", "text": "x"}]), encoding="utf-8")
        assert store.load()[0] == []

        (root / "chatMessages.json").write_text(json.dumps({"role": "user"}), encoding="utf-8")
        assert store.load()[0] == []


def test_legacy_type_field_is_accepted():
    with tempfile.TemporaryDirectory() as d:
        root = Path(d) / ".storage"
        store = JsonChatStateStore(root=root)
        (root / "chatMessages.json").write_text(
            json.dumps([{"type": "user", "text": "q"}, {"type": "bot", "text": "a"}]),
            encoding="utf-8",
        )
        (root / "darkMode.json").write_text(json.dumps("true"), encoding="utf-8")
        msgs, dark = store.load()
        assert [m.role for m in msgs] == ["user", "bot"]
        assert dark is True


def test_dark_mode_and_clear():
    with tempfile.TemporaryDirectory() as d:
        store = JsonChatStateStore(root=Path(d) / ".storage")
        store.save([Message(role="user", text="q")])
        store.save_dark_mode(True)
        store.clear()
        assert store.load() == ([], True)
        # 清空两次不报错
        store.clear()


def test_theme_value_round_trip():
    with tempfile.TemporaryDirectory() as d:
        store = JsonChatStateStore(root=Path(d) / ".storage")
        store.save_value(THEME_KEY, "purple")
        assert store.load_value(THEME_KEY) == "purple"


def test_write_failure_raises_storage_error(monkeypatch):
    with tempfile.TemporaryDirectory() as d:
        root = Path(d) / ".storage"
        kv = JsonKeyValueStore(root=root)

        def boom(*a, **kw):
            raise OSError("disk full")

        monkeypatch.setattr("chat_core.infrastructure.storage.json_store.os.replace", boom)
        with pytest.raises(StorageError) as exc:
            kv.set("chatMessages", [])
        assert exc.value.code == "STORE_WRITE_ERROR"
        assert list(root.glob("*.tmp")) == []


def test_invalid_key_is_rejected():
    with tempfile.TemporaryDirectory() as d:
        kv = JsonKeyValueStore(root=d)
        with pytest.raises(BusinessError):
            kv.set("../escape", 1)
