"""未命中时的兜底回复。"""

import random
from typing import Optional, Sequence, Tuple

from chat_core.domain.exceptions import ConfigurationError


PLACEHOLDER = "{query}"


class FallbackSelector:
    """从固定的模板集合中均匀随机选择一条，并把 {query} 替换为原始问题。

    随机源通过构造参数注入，测试中传入固定种子的 random.Random 即可复现选择。
    """

    def __init__(self, templates: Sequence[str], rng: Optional[random.Random] = None):
        if not templates:
            raise ConfigurationError(code="FALLBACK_EMPTY", message="fallback template set is empty")
        for i, t in enumerate(templates):
            if not isinstance(t, str) or PLACEHOLDER not in t:
                raise ConfigurationError(
                    code="FALLBACK_INVALID",
                    message=f"fallback template {i} must contain {PLACEHOLDER}",
                )
        self._templates: Tuple[str, ...] = tuple(templates)
        self._rng = rng or random.Random()

    @property
    def templates(self) -> Tuple[str, ...]:
        return self._templates

    def pick(self, query: str) -> str:
        template = self._templates[self._rng.randrange(len(self._templates))]
        # 问题文本可能包含花括号，不能走 str.format
        return template.replace(PLACEHOLDER, query)
