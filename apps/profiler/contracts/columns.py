"""列描述与数据集目录契约。"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List

from pydantic import Field, model_validator

from apps.profiler.contracts.metadata import ContractModel, ensure_utc


class ColumnDescriptor(ContractModel):
    """单列的名称与内核声明的 dtype。"""

    @classmethod
    def schema_name(cls) -> str:
        """返回列描述契约的 Schema 名称。"""

        return "column_descriptor"

    name: str = Field(description="列名，取自 dtypes 打印的首个字段。", min_length=1)
    declared_type: str = Field(
        description="内核打印的 dtype 文本，例如 int64、object。",
        min_length=1,
    )


DatasetColumnMap = Dict[str, List[ColumnDescriptor]]
"""数据集名称到有序列描述的映射。"""


class DatasetCatalog(ContractModel):
    """某一时刻内核中全部表格型变量的不可变快照。"""

    @classmethod
    def schema_name(cls) -> str:
        """返回目录快照契约的 Schema 名称。"""

        return "dataset_catalog"

    datasets: Dict[str, List[ColumnDescriptor]] = Field(
        default_factory=dict,
        description="数据集名称到列描述的映射，顺序与内核列出变量的顺序一致。",
    )
    refreshed_at: datetime = Field(description="快照生成时间（UTC）。")
    warnings: List[str] = Field(
        default_factory=list,
        description="刷新过程中单个数据集失败时记录的告警。",
    )

    @model_validator(mode="after")
    def validate_catalog(self) -> "DatasetCatalog":
        """校验快照时间为 UTC。"""

        ensure_utc(dt=self.refreshed_at, field_name="refreshed_at")
        return self

    def column_names(self, dataset: str) -> List[str]:
        """返回指定数据集的列名列表，不存在时立即失败。"""

        if dataset not in self.datasets:
            raise KeyError(f"dataset={dataset} 不在当前快照中。")
        return [column.name for column in self.datasets[dataset]]
