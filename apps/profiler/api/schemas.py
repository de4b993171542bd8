"""API 请求与响应模型。"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from apps.profiler.contracts.columns import DatasetCatalog


class ApiModel(BaseModel):
    """统一约束的 API 模型基类，强制禁止额外字段。"""

    model_config = ConfigDict(extra="forbid")


class KernelStatusResponse(ApiModel):
    """内核连接状态。"""

    ready: bool = Field(description="会话是否已连接内核。")
    name: Optional[str] = Field(default=None, description="内核通道名称。")
    language: Optional[str] = Field(default=None, description="内核语言。")


class CatalogResponse(ApiModel):
    """数据集目录快照响应。"""

    catalog: DatasetCatalog = Field(description="最近一次发布的目录快照。")


class ShapeResponse(ApiModel):
    """数据集 shape 响应。"""

    dataset: str = Field(description="数据集名称。", min_length=1)
    shape: List[float] = Field(description="各维度大小。")


class ColumnSampleResponse(ApiModel):
    """列示例取值响应。"""

    dataset: str = Field(description="数据集名称。", min_length=1)
    column: str = Field(description="列名。", min_length=1)
    values: List[str] = Field(description="按行顺序排列的示例取值文本。")


class ErrorPayload(ApiModel):
    """查询失败时的错误描述。"""

    error_code: str = Field(description="稳定的错误编码。")
    error_message: str = Field(description="错误信息。")
