"""图表数据契约，供前端直接绑定到可视化规范。"""

from __future__ import annotations

from typing import Dict, List, Optional, Union

from pydantic import Field, model_validator

from apps.profiler.contracts.metadata import ContractModel


class NominalChartDatum(ContractModel):
    """单个类别取值及其计数。"""

    @classmethod
    def schema_name(cls) -> str:
        """返回类别数据点契约的 Schema 名称。"""

        return "nominal_chart_datum"

    value: str = Field(description="类别取值，来自 value_counts 的键。")
    count: int = Field(description="该取值出现的次数。", ge=0)


class NominalChartData(ContractModel):
    """类别列的 Top-N 计数序列。"""

    @classmethod
    def schema_name(cls) -> str:
        """返回类别图表数据契约的 Schema 名称。"""

        return "nominal_chart_data"

    column: str = Field(description="统计的列名。", min_length=1)
    data: List[NominalChartDatum] = Field(
        default_factory=list,
        description="按内核返回顺序排列的取值计数。",
    )

    def to_records(self) -> List[Dict[str, Union[str, int]]]:
        """转换为以列名为键的记录列表。

        Returns
        -------
        List[Dict[str, Union[str, int]]]
            形如 ``[{<column>: "a", "count": 3}]`` 的列表。
        """

        return [{self.column: datum.value, "count": datum.count} for datum in self.data]


class QuantBinDatum(ContractModel):
    """一个数值分箱的上下界与计数。"""

    @classmethod
    def schema_name(cls) -> str:
        """返回分箱数据点契约的 Schema 名称。"""

        return "quant_bin_datum"

    bin_0: float = Field(description="分箱下界。")
    bin_1: float = Field(description="分箱上界。")
    count: int = Field(description="落入该分箱的记录数。", ge=0)


class QuantChartData(ContractModel):
    """数值列的分箱计数及箱宽。"""

    @classmethod
    def schema_name(cls) -> str:
        """返回数值图表数据契约的 Schema 名称。"""

        return "quant_chart_data"

    binned_data: List[QuantBinDatum] = Field(
        default_factory=list,
        description="按内核返回顺序排列的分箱。",
    )
    bin_size: Optional[float] = Field(
        default=None,
        description="首个分箱的宽度，假定所有分箱等宽；无分箱时为空。",
    )

    @model_validator(mode="after")
    def validate_bin_size(self) -> "QuantChartData":
        """无分箱时不允许声明箱宽。"""

        if not self.binned_data and self.bin_size is not None:
            raise ValueError("binned_data 为空时 bin_size 必须为空。")
        return self
