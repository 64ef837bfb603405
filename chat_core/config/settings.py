"""配置管理模块。

支持从 .env、config.yaml 以及环境变量加载配置。
"""

import os
import warnings
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from chat_core.domain.models import THEMES


DEFAULT_FALLBACK_TEMPLATES: List[str] = [
    "متاسفانه پاسخ دقیقی برای \"{query}\" در دیتابیس من وجود ندارد، اما می‌توانم به شما کمک کنم تا آن را جستجو کنید.",
    "سؤال خوبی درباره \"{query}\" پرسیدید! من در حال یادگیری هستم و به زودی بتوانم پاسخ بهتری بدهم.",
    "در مورد \"{query}\" می‌توانم بگویم که این موضوع بسیار جالب است.",
]


def _load_config_from_yaml() -> Dict[str, Any]:
    """从 config.yaml 加载配置（若存在）。"""
    candidates = []
    explicit = os.getenv("CHAT_CONFIG_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.extend([
        Path.cwd() / "config.yaml",
        Path(__file__).resolve().parents[2] / "config.yaml",
    ])

    seen: set[Path] = set()
    for path in candidates:
        if not path or path in seen:
            continue
        seen.add(path)
        try:
            if path.exists():
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
                if isinstance(data, dict):
                    return data
                warnings.warn(f"Config file {path} is not a mapping, ignored")
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(f"Failed to read config file {path}: {exc}")
    return {}


class Settings(BaseSettings):
    """配置设置（使用 Pydantic）。"""

    # ---- 知识库与匹配 ----
    corpus_path: Optional[str] = Field(
        default=None,
        description="知识库文件路径（YAML/JSON），为空时使用包内自带的 knowledge_base.yaml",
    )
    match_threshold: float = Field(
        default=0.4,
        gt=0.0,
        le=1.0,
        description="候选预筛阈值：编辑误差超过该值的对齐不参与比较",
    )
    accept_threshold: float = Field(
        default=0.5,
        gt=0.0,
        le=1.0,
        description="最终接受阈值：得分严格小于该值才视为命中",
    )
    match_distance: int = Field(default=100, ge=1, description="位置窗口，偏移超过该值的对齐被拒绝")

    # ---- 兜底回复 ----
    fallback_templates: List[str] = Field(
        default_factory=lambda: list(DEFAULT_FALLBACK_TEMPLATES),
        description="兜底模板，{query} 会被替换为原始问题",
    )
    random_seed: Optional[int] = Field(default=None, description="兜底随机源种子，便于复现")

    # ---- 会话 ----
    typing_interval_ms: float = Field(default=15.0, ge=0.0, description="模拟打字时每个字符的耗时（毫秒）")
    default_theme: str = Field(default="blue", description="默认主题名")

    # ---- 存储与日志 ----
    storage_root: str = Field(default=".storage", description="存储根目录")
    log_dir: str = Field(default="logs", description="日志目录")
    log_redact_content: bool = Field(default=False, description="是否脱敏日志内容")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @staticmethod
    def _config_source() -> Dict[str, Any]:
        return _load_config_from_yaml()

    @field_validator("default_theme")
    @classmethod
    def validate_theme(cls, v: str) -> str:
        if v not in THEMES:
            raise ValueError(f"Unknown theme {v!r}, expected one of {THEMES}")
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls._config_source,
            file_secret_settings,
        )


settings = Settings()
