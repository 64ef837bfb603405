"""对外 API 服务模块。

提供简化的函数接口供展示层（终端、GUI、Web 前端）调用。
"""

import random
from typing import Any, Dict, List, Optional

from chat_core.config.settings import settings
from chat_core.engine.session import ConversationSession
from chat_core.engine.typing_simulator import TypingSimulator
from chat_core.infrastructure.logging.logger import logger
from chat_core.infrastructure.storage.json_store import JsonChatStateStore
from chat_core.knowledge.corpus import Corpus, load_corpus
from chat_core.knowledge.fallback import FallbackSelector
from chat_core.knowledge.matcher import FuzzyMatcher


_corpus: Optional[Corpus] = None
_session: Optional[ConversationSession] = None


def get_corpus() -> Corpus:
    """获取进程级共享的知识库（只加载一次）。"""
    global _corpus
    if _corpus is None:
        _corpus = load_corpus(settings.corpus_path)
        logger.info("Corpus loaded", extra={"extra": {
            "entries": len(_corpus),
            "path": settings.corpus_path or "<bundled>",
        }})
    return _corpus


def get_default_session() -> ConversationSession:
    """获取默认会话实例（单例）。"""
    global _session
    if _session is None:
        corpus = get_corpus()
        rng = random.Random(settings.random_seed) if settings.random_seed is not None else None
        _session = ConversationSession(
            matcher=FuzzyMatcher(
                corpus,
                threshold=settings.match_threshold,
                accept_below=settings.accept_threshold,
                distance=settings.match_distance,
            ),
            fallback=FallbackSelector(settings.fallback_templates, rng=rng),
            store=JsonChatStateStore(root=settings.storage_root),
            typing_simulator=TypingSimulator(interval_ms=settings.typing_interval_ms),
            default_theme=settings.default_theme,
        )
    return _session


async def run_chat(user_input: str) -> Dict[str, Any]:
    """发送一条消息并等待回复。

    Args:
        user_input: 用户输入内容

    Returns:
        包含 user_message、bot_message 和 pending 的字典；
        输入被忽略（空白或已有待完成回复）时两个消息字段都为 None。
    """
    session = get_default_session()
    task = session.send(user_input)
    if task is None:
        return {"user_message": None, "bot_message": None, "pending": session.is_pending()}
    try:
        reply = await task
    except Exception as e:
        logger.error(f"Chat failed: {e}", extra={"extra": {"error": str(e)}})
        raise
    return {
        "user_message": {"role": "user", "text": user_input},
        "bot_message": reply.to_dict(),
        "pending": session.is_pending(),
    }


def list_messages() -> List[Dict[str, Any]]:
    """列出当前会话的全部消息。"""
    return [m.to_dict() for m in get_default_session().current_messages()]


def clear_history(confirmed: bool) -> bool:
    """清空会话历史，confirmed 为调用方的确认结果。"""
    return get_default_session().clear(confirmed)


def get_quick_replies() -> List[str]:
    """返回知识库中配置的快捷提问。"""
    return list(get_corpus().quick_replies)
