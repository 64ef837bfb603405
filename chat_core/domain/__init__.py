"""领域层模型与协议。

包含：
- models: Message / KnowledgeEntry / MatchResult 等基础数据结构。
- store: 会话状态持久化的 PersistenceStore 抽象。
- exceptions: 业务异常类型定义。
"""
