import asyncio

import pytest

from chat_core.api import service
from chat_core.config.settings import Settings
from chat_core.domain.exceptions import ConfigurationError


@pytest.fixture
def configured(monkeypatch, tmp_path):
    kb = tmp_path / "kb.yaml"
    kb.write_text(
        "entries:\n  - keywords: [hours]\n    answer: '9-5'\nquick_replies: [hours]\n",
        encoding="utf-8",
    )
    s = Settings(
        corpus_path=str(kb),
        storage_root=str(tmp_path / ".storage"),
        typing_interval_ms=0,
        random_seed=1,
    )
    monkeypatch.setattr("chat_core.api.service.settings", s)
    monkeypatch.setattr("chat_core.api.service._corpus", None)
    monkeypatch.setattr("chat_core.api.service._session", None)
    return s


def test_run_chat_round_trip(configured):
    result = asyncio.run(service.run_chat("hours"))
    assert result["user_message"] == {"role": "user", "text": "hours"}
    assert result["bot_message"] == {"role": "bot", "text": "9-5"}
    assert result["pending"] is False
    assert service.list_messages() == [
        {"role": "user", "text": "hours"},
        {"role": "bot", "text": "9-5"},
    ]
    assert service.get_quick_replies() == ["hours"]


def test_blank_input_is_ignored(configured):
    result = asyncio.run(service.run_chat("  "))
    assert result == {"user_message": None, "bot_message": None, "pending": False}


def test_clear_history(configured):
    asyncio.run(service.run_chat("hours"))
    assert service.clear_history(False) is False
    assert len(service.list_messages()) == 2
    assert service.clear_history(True) is True
    assert service.list_messages() == []


def test_session_is_singleton(configured):
    assert service.get_default_session() is service.get_default_session()


def test_missing_corpus_fails_startup(configured, monkeypatch, tmp_path):
    monkeypatch.setattr(
        "chat_core.api.service.settings",
        Settings(corpus_path=str(tmp_path / "nope.yaml"), storage_root=str(tmp_path)),
    )
    with pytest.raises(ConfigurationError):
        service.get_default_session()


def test_empty_fallback_templates_fail_startup(configured, monkeypatch):
    configured.fallback_templates = []
    with pytest.raises(ConfigurationError):
        service.get_default_session()
