"""知识库相关组件。

- corpus: 知识库加载与校验。
- matcher: 基于 rapidfuzz 的模糊匹配器。
- fallback: 未命中时的模板兜底回复。
"""
