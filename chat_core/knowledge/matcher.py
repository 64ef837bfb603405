"""知识库模糊匹配器。

对每个条目，取其所有关键词中与查询对齐得最好的一个作为条目得分：

- 先对查询和关键词做归一化（小写、非字母数字替换为空格、合并空白）。
- 用 rapidfuzz.fuzz.partial_ratio_alignment 把较短的字符串对齐到较长字符串中，
  编辑误差 = 1 - 相似度/100，位置偏移 = 对齐在较长字符串中的起点。
- 关键词得分 = 编辑误差 + 偏移 / distance，截断到 [0, 1]；
  误差超过 threshold 或偏移超过 distance 的对齐直接拒绝。

得分最低的条目胜出；分数相同时关键词与查询长度更接近的胜出，
仍相同则 Corpus 中靠前的条目胜出；
只有得分严格小于 accept_below 时才返回结果。
"""

from typing import List, Optional, Tuple

from rapidfuzz import fuzz, utils

from chat_core.domain.models import MatchResult
from chat_core.knowledge.corpus import Corpus


def normalize(text: str) -> str:
    return " ".join(utils.default_process(text).split())


class FuzzyMatcher:
    def __init__(
        self,
        corpus: Corpus,
        *,
        threshold: float = 0.4,
        accept_below: float = 0.5,
        distance: int = 100,
    ):
        if distance < 1:
            raise ValueError("distance must be >= 1")
        self._corpus = corpus
        self._threshold = threshold
        self._accept_below = accept_below
        self._distance = distance
        # 归一化后的关键词索引只在构造时建立一次
        self._index: List[Tuple[str, ...]] = [
            tuple(k for k in (normalize(kw) for kw in entry.keywords) if k)
            for entry in corpus
        ]

    @property
    def corpus(self) -> Corpus:
        return self._corpus

    def lookup(self, query: str) -> Optional[MatchResult]:
        """返回最佳命中；没有足够可信的命中时返回 None。"""

        q = normalize(query)
        if not q:
            return None
        best: Optional[Tuple[Tuple[float, int], int]] = None
        for idx, keywords in enumerate(self._index):
            rank = self._rank_entry(q, keywords)
            # 严格小于：排序键完全相同时保留先出现的条目
            if rank is not None and (best is None or rank < best[0]):
                best = (rank, idx)
        if best is None or best[0][0] >= self._accept_below:
            return None
        (score, _), idx = best
        return MatchResult(entry_index=idx, answer=self._corpus[idx].answer, score=score)

    def _rank_entry(self, query: str, keywords: Tuple[str, ...]) -> Optional[Tuple[float, int]]:
        """条目排序键：(得分, 关键词与查询的长度差)。

        较短一侧对齐进较长一侧，"hello" 对 "hello world" 同样得 0 分；
        长度差让与查询等长的关键词排在前面。
        """

        ranks = []
        for kw in keywords:
            score = self.score_keyword(query, kw)
            if score is not None:
                ranks.append((score, abs(len(kw) - len(query))))
        return min(ranks) if ranks else None

    def score_keyword(self, query: str, keyword: str) -> Optional[float]:
        """计算已归一化的查询与单个关键词的得分，被拒绝时返回 None。"""

        if not query or not keyword:
            return None
        cutoff = round((1.0 - self._threshold) * 100.0, 6)
        alignment = fuzz.partial_ratio_alignment(keyword, query, score_cutoff=cutoff)
        if alignment is None or alignment.score < cutoff:
            return None
        # src 对应 keyword，dest 对应 query；偏移取较长一侧的起点
        offset = alignment.dest_start if len(keyword) <= len(query) else alignment.src_start
        if offset > self._distance:
            return None
        error = 1.0 - alignment.score / 100.0
        return min(1.0, max(0.0, error + offset / self._distance))
