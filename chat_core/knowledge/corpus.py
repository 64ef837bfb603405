"""知识库加载工具。

知识库文件是一个 YAML（或 .json 后缀的 JSON）文档，格式为：

    entries:
      - keywords: ["ساعت کاری", "hours"]
        answer: "..."
    quick_replies:
      - "..."

也接受直接以条目列表作为顶层结构的文件。加载只在启动时进行一次，
任何缺失或格式错误都作为 ConfigurationError 抛出，引擎不能在没有知识库的情况下运行。
"""

import json
from pathlib import Path
from typing import Any, Iterator, List, Optional, Sequence, Tuple

import yaml

from chat_core.domain.exceptions import ConfigurationError
from chat_core.domain.models import KnowledgeEntry


DATA_DIR = Path(__file__).resolve().parents[1] / "data"
DEFAULT_CORPUS_PATH = DATA_DIR / "knowledge_base.yaml"


class Corpus(Sequence[KnowledgeEntry]):
    """不可变、按顺序排列的知识库条目集合。"""

    def __init__(self, entries: Sequence[KnowledgeEntry], quick_replies: Sequence[str] = ()):
        self._entries: Tuple[KnowledgeEntry, ...] = tuple(entries)
        self._quick_replies: Tuple[str, ...] = tuple(quick_replies)

    @classmethod
    def from_records(cls, records: Any, quick_replies: Any = None) -> "Corpus":
        if not isinstance(records, list):
            raise ConfigurationError(code="CORPUS_INVALID", message="corpus entries must be a list")
        entries = [_parse_entry(i, rec) for i, rec in enumerate(records)]
        return cls(entries, _parse_quick_replies(quick_replies))

    @property
    def quick_replies(self) -> Tuple[str, ...]:
        return self._quick_replies

    def __getitem__(self, index):
        return self._entries[index]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[KnowledgeEntry]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"Corpus(entries={len(self._entries)}, quick_replies={len(self._quick_replies)})"


def load_corpus(path: str | Path | None = None) -> Corpus:
    """从文件加载知识库，path 为空时使用包内自带的默认知识库。"""

    source = Path(path).expanduser() if path else DEFAULT_CORPUS_PATH
    try:
        text = source.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(code="CORPUS_NOT_FOUND", message=str(e), path=str(source))
    try:
        data = json.loads(text) if source.suffix.lower() == ".json" else yaml.safe_load(text)
    except (ValueError, yaml.YAMLError) as e:
        raise ConfigurationError(code="CORPUS_INVALID", message=str(e), path=str(source))

    if isinstance(data, dict):
        return Corpus.from_records(data.get("entries"), data.get("quick_replies"))
    return Corpus.from_records(data)


def _parse_entry(index: int, record: Any) -> KnowledgeEntry:
    if not isinstance(record, dict):
        raise ConfigurationError(code="CORPUS_INVALID", message=f"entry {index} is not a mapping")
    keywords = record.get("keywords")
    answer = record.get("answer")
    if (
        not isinstance(keywords, list)
        or not keywords
        or not all(isinstance(k, str) and k.strip() for k in keywords)
    ):
        raise ConfigurationError(
            code="CORPUS_INVALID",
            message=f"entry {index} needs a non-empty list of non-empty keywords",
        )
    if not isinstance(answer, str) or not answer.strip():
        raise ConfigurationError(code="CORPUS_INVALID", message=f"entry {index} needs a non-empty answer")
    return KnowledgeEntry(keywords=tuple(keywords), answer=answer)


def _parse_quick_replies(raw: Optional[Any]) -> List[str]:
    if raw is None:
        return []
    if not isinstance(raw, list) or not all(isinstance(r, str) and r.strip() for r in raw):
        raise ConfigurationError(code="CORPUS_INVALID", message="quick_replies must be a list of strings")
    return list(raw)
