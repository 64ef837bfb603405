"""Chat Core 顶层包。

该包提供基于静态知识库的问答会话引擎，
包括配置加载、领域模型、模糊匹配、兜底回复、
模拟打字延迟、会话状态机与本地持久化存储等能力。
"""

from chat_core.engine.session import ConversationSession
from chat_core.knowledge.corpus import Corpus, load_corpus

__all__ = ["ConversationSession", "Corpus", "load_corpus"]
