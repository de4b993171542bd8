"""画像查询：组合执行网关与文本解析，返回不可变的契约对象。"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from apps.profiler.contracts.chart_data import (
    NominalChartData,
    NominalChartDatum,
    QuantBinDatum,
    QuantChartData,
)
from apps.profiler.contracts.columns import ColumnDescriptor, DatasetCatalog, DatasetColumnMap
from apps.profiler.contracts.summaries import NominalSummary, QuantitativeSummary
from apps.profiler.errors import ChannelFailure, ParseError, ProfilerError
from apps.profiler.infra.clock import Clock
from apps.profiler.kernel.code_builder import CodeBuilder
from apps.profiler.kernel.gateway import ExecutionGateway
from apps.profiler.parsing.extractors import (
    extract_boolean_flags,
    extract_column_descriptors,
    extract_head_rows,
    extract_interval_bounds,
    extract_jsonish,
    extract_name_list,
    extract_scalar_lines,
    extract_shape,
)

LOGGER = logging.getLogger(__name__)


def _as_count(key: str, value: object) -> int:
    """将 value_counts JSON 中的计数转换为整数。"""

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ParseError(f"键 {key!r} 的计数不是数值: {value!r}")
    return int(value)


class KernelProfileQueries:
    """面向单个内核通道的数据集画像查询集合。

    每个查询都遵循“构造代码 → 执行 → 解析”三步；同一通道上的多次
    调用按内核自身顺序排队执行。
    """

    def __init__(
        self,
        gateway: ExecutionGateway,
        *,
        code_builder: Optional[CodeBuilder] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """初始化查询集合。

        Parameters
        ----------
        gateway: ExecutionGateway
            执行网关。
        code_builder: Optional[CodeBuilder]
            代码构造器，默认不做转义。
        timeout: Optional[float]
            每次执行等待输出的秒数，为空表示无限等待。
        """

        self._gateway = gateway
        self._code = code_builder or CodeBuilder()
        self._timeout = timeout

    @property
    def timeout(self) -> Optional[float]:
        """单次执行的等待秒数，None 表示无限等待。"""

        return self._timeout

    async def _run(self, code: str) -> List[str]:
        lines = await self._gateway.execute(code, timeout=self._timeout)
        if lines is None:
            raise ChannelFailure("内核执行失败，未返回结果。", code_snippet=code)
        return lines

    async def list_variables(self) -> List[str]:
        """列出内核命名空间中的变量名，顺序与内核一致。"""

        lines = await self._run(self._code.list_variables())
        return extract_name_list(lines)

    async def classify_tabular(self, names: Sequence[str]) -> List[str]:
        """逐个判断变量是否为 DataFrame，返回与 ``names`` 对齐的 ``True``/``False``。"""

        if not names:
            return []
        lines = await self._run(self._code.classify_tabular(names))
        return extract_boolean_flags(lines, expected_count=len(names))

    async def get_columns(self, dataset: str) -> List[ColumnDescriptor]:
        """返回数据集的列名与 dtype。"""

        lines = await self._run(self._code.column_dtypes(dataset))
        return extract_column_descriptors(lines)

    async def list_tabular_names(self) -> List[str]:
        """返回内核中全部 DataFrame 变量名，保持列出顺序。"""

        names = await self.list_variables()
        flags = await self.classify_tabular(names)
        tabular = [name for name, flag in zip(names, flags) if flag == "True"]
        LOGGER.info("内核中的 DataFrame 变量", extra={"datasets": tabular})
        return tabular

    async def _collect_columns(self) -> tuple[DatasetColumnMap, List[str]]:
        column_map: DatasetColumnMap = {}
        warnings: List[str] = []
        for dataset in await self.list_tabular_names():
            try:
                column_map[dataset] = await self.get_columns(dataset)
            except ProfilerError as error:
                # 单个数据集失败只影响自身，保留空列表继续后续数据集。
                LOGGER.warning(
                    "获取数据集列信息失败",
                    extra={"dataset": dataset, "error_code": error.code.value},
                )
                column_map[dataset] = []
                warnings.append(f"{dataset}: {error.code.value} {error}")
        return column_map, warnings

    async def list_all_tabular_datasets(self) -> DatasetColumnMap:
        """返回全部 DataFrame 及其列描述。

        列信息按数据集逐个顺序获取；单个数据集失败时以空列表占位，
        不影响其余数据集。
        """

        column_map, _ = await self._collect_columns()
        return column_map

    async def build_catalog(self, clock: Clock) -> DatasetCatalog:
        """生成带时间戳与告警的目录快照。"""

        column_map, warnings = await self._collect_columns()
        return DatasetCatalog(datasets=column_map, refreshed_at=clock.now(), warnings=warnings)

    async def get_shape(self, dataset: str) -> List[float]:
        """返回数据集的 shape。"""

        lines = await self._run(self._code.shape(dataset))
        return extract_shape(lines)

    async def get_column_sample(self, dataset: str, column: str, n: int = 5) -> List[str]:
        """返回列的前 ``n`` 个取值文本。"""

        lines = await self._run(self._code.column_head(dataset, column, n))
        return extract_head_rows(lines)

    async def get_quantitative_summary(self, dataset: str, column: str) -> QuantitativeSummary:
        """返回数值列的均值、中位数与缺失数。"""

        lines = await self._run(self._code.quantitative_summary(dataset, column))
        values = extract_scalar_lines(lines, labels=("mean", "median", "null_count"))
        return QuantitativeSummary(**values)

    async def get_nominal_summary(self, dataset: str, column: str) -> NominalSummary:
        """返回类别列的唯一值数与缺失数。"""

        lines = await self._run(self._code.nominal_summary(dataset, column))
        values = extract_scalar_lines(lines, labels=("unique_count", "null_count"))
        return NominalSummary(**values)

    async def get_nominal_chart_data(self, dataset: str, column: str, n: int = 5) -> NominalChartData:
        """返回类别列出现次数最多的 ``n`` 个取值及计数。"""

        lines = await self._run(self._code.value_counts_json(dataset, column, n))
        payload = extract_jsonish(lines)
        data = [
            NominalChartDatum(value=str(key), count=_as_count(key, value))
            for key, value in payload.items()
        ]
        return NominalChartData(column=column, data=data)

    async def get_quant_binned_chart_data(
        self,
        dataset: str,
        column: str,
        max_bins: int = 5,
    ) -> QuantChartData:
        """返回数值列的分箱计数。

        分箱数取 ``max_bins`` 与唯一值数的较小者；箱宽取首个分箱的
        ``|bin_1 - bin_0|``，假定所有分箱等宽。
        """

        lines = await self._run(self._code.binned_counts_json(dataset, column, max_bins))
        payload = extract_jsonish(lines)
        binned: List[QuantBinDatum] = []
        for key, value in payload.items():
            low, high = extract_interval_bounds(key)
            binned.append(QuantBinDatum(bin_0=low, bin_1=high, count=_as_count(key, value)))
        bin_size = abs(binned[0].bin_1 - binned[0].bin_0) if binned else None
        return QuantChartData(binned_data=binned, bin_size=bin_size)

