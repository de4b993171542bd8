"""数据契约模型包。

查询层返回给调用方的全部值对象都在此定义，均为不可变模型，
并可导出带 `$id` 元数据的 JSONSchema。
"""

from apps.profiler.contracts.chart_data import (
    NominalChartData,
    NominalChartDatum,
    QuantBinDatum,
    QuantChartData,
)
from apps.profiler.contracts.columns import ColumnDescriptor, DatasetCatalog, DatasetColumnMap
from apps.profiler.contracts.summaries import NominalSummary, QuantitativeSummary

__all__ = [
    "ColumnDescriptor",
    "DatasetCatalog",
    "DatasetColumnMap",
    "NominalChartData",
    "NominalChartDatum",
    "NominalSummary",
    "QuantBinDatum",
    "QuantChartData",
    "QuantitativeSummary",
]
