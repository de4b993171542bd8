"""列级摘要统计契约。

统计值保持内核打印的原始文本（如 ``nan``、``1.5e+03``），不转换为数值，
保证调用方看到的格式与内核一致。
"""

from __future__ import annotations

from pydantic import Field

from apps.profiler.contracts.metadata import ContractModel


class QuantitativeSummary(ContractModel):
    """数值列的均值、中位数与缺失数。"""

    @classmethod
    def schema_name(cls) -> str:
        """返回数值摘要契约的 Schema 名称。"""

        return "quantitative_summary"

    mean: str = Field(description="均值的原始打印文本。")
    median: str = Field(description="中位数的原始打印文本。")
    null_count: str = Field(description="缺失值数量的原始打印文本。")


class NominalSummary(ContractModel):
    """类别列的唯一值数与缺失数。"""

    @classmethod
    def schema_name(cls) -> str:
        """返回类别摘要契约的 Schema 名称。"""

        return "nominal_summary"

    unique_count: str = Field(description="唯一值数量的原始打印文本。")
    null_count: str = Field(description="缺失值数量的原始打印文本。")
