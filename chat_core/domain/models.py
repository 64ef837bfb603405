"""统一的会话与知识库数据模型。

本模块定义了引擎内部共享的标准数据结构：

- Message: 会话日志中的一条消息（user/bot）。
- KnowledgeEntry: 知识库中的一条问答条目。
- MatchResult: 匹配器返回的最佳命中结果。

所有结构都是不可变的，追加到会话日志之后不会再被修改。
"""

from dataclasses import dataclass
from typing import Any, Dict, Literal, Tuple


# 消息角色类型（与持久化记录中的 role 字段对应）
Role = Literal["user", "bot"]

ROLES: Tuple[str, ...] = ("user", "bot")


@dataclass(frozen=True)
class Message:
    """一条会话消息。

    - role: 消息角色，"user" 表示用户输入，"bot" 表示机器人回复。
    - text: 纯文本内容，保持用户输入的原样（不做 trim）。
    """

    role: Role
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"role": self.role, "text": self.text}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Message":
        """从持久化记录还原消息。

        兼容旧版本使用 "type" 字段保存角色的记录。
        """

        role = data.get("role", data.get("type"))
        text = data.get("text")
        if role not in ROLES or not isinstance(text, str):
            raise ValueError(f"Invalid message record: {data!r}")
        return cls(role=role, text=text)


@dataclass(frozen=True)
class KnowledgeEntry:
    """知识库条目。条目在 Corpus 中的位置即为其身份（用于平分裁决）。"""

    keywords: Tuple[str, ...]
    answer: str


@dataclass(frozen=True)
class MatchResult:
    """一次成功匹配的结果。

    score 为 [0, 1] 区间的距离型分数，0 表示完全匹配。
    """

    entry_index: int
    answer: str
    score: float


# 展示层可选的主题名；未知主题回退到第一个
THEMES: Tuple[str, ...] = ("blue", "green", "purple")
DEFAULT_THEME = "blue"
