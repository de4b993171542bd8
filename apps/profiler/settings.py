"""画像服务配置，支持环境变量与 ``.env`` 覆盖。"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

UNBOUNDED_TIMEOUT_TOKENS = frozenset({"", "none", "null"})
"""表示不设超时的环境变量取值。"""


class ProfilerSettings(BaseSettings):
    """画像会话的运行参数。

    所有字段均可通过 ``PROFILER_`` 前缀的环境变量覆盖，例如
    ``PROFILER_EXECUTION_TIMEOUT=10``。
    """

    model_config = SettingsConfigDict(
        env_prefix="PROFILER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    execution_timeout: Optional[float] = Field(
        default=30.0,
        description=(
            "单次执行等待可识别输出的秒数；环境变量取空字符串、None 或 null "
            "（不区分大小写）时表示无限等待。"
        ),
        gt=0,
    )
    stop_on_error: bool = Field(
        default=True,
        description="提交代码时是否在首个错误处停止执行。",
    )
    strict_identifiers: bool = Field(
        default=False,
        description="是否在拼接代码前校验数据集名并转义列名。",
    )
    head_rows: int = Field(default=5, description="列示例默认行数。", ge=1)
    nominal_top_n: int = Field(default=5, description="类别图表默认取值个数。", ge=1)
    quant_max_bins: int = Field(default=5, description="数值图表默认最大分箱数。", ge=1)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="apps.profiler 日志级别。",
    )

    @field_validator("execution_timeout", mode="before")
    @classmethod
    def _parse_unbounded_timeout(cls, value: object) -> object:
        """把空串、None、null 文本解析为无超时。"""

        if isinstance(value, str) and value.strip().lower() in UNBOUNDED_TIMEOUT_TOKENS:
            return None
        return value


@lru_cache
def get_settings() -> ProfilerSettings:
    """提供进程级配置实例。"""

    return ProfilerSettings()
