"""可执行代码片段的唯一构造入口。

默认模式下名称按原样拼接进代码，调用方被视为可信；开启
``strict_identifiers`` 后，数据集名必须是合法的 Python 标识符，
列名中的反斜杠与双引号会被转义。
"""

from __future__ import annotations

from typing import Iterable

from apps.profiler.errors import InvalidIdentifier


class CodeBuilder:
    """为查询层生成发送给内核的代码文本。"""

    def __init__(self, *, strict_identifiers: bool = False) -> None:
        self._strict = strict_identifiers

    def dataset(self, name: str) -> str:
        """返回可直接作为表达式使用的数据集名称。"""

        if self._strict and not name.isidentifier():
            raise InvalidIdentifier(f"数据集名称 {name!r} 不是合法的 Python 标识符。")
        return name

    def column(self, name: str) -> str:
        """返回可放入双引号字符串字面量中的列名。"""

        if not self._strict:
            return name
        if "\n" in name or "\r" in name:
            raise InvalidIdentifier(f"列名 {name!r} 不能包含换行符。")
        return name.replace("\\", "\\\\").replace('"', '\\"')

    def series(self, dataset: str, column: str) -> str:
        return f'{self.dataset(dataset)}["{self.column(column)}"]'

    def list_variables(self) -> str:
        return "%who_ls"

    def classify_tabular(self, names: Iterable[str]) -> str:
        code_lines = ["import pandas as pd"]
        for name in names:
            code_lines.append(f"print(type({self.dataset(name)}) == pd.DataFrame)")
        return "\n".join(code_lines)

    def column_dtypes(self, dataset: str) -> str:
        return f"print({self.dataset(dataset)}.dtypes)"

    def shape(self, dataset: str) -> str:
        return f"print({self.dataset(dataset)}.shape)"

    def column_head(self, dataset: str, column: str, n: int) -> str:
        return f"print({self.series(dataset, column)}.head({int(n)}))"

    def quantitative_summary(self, dataset: str, column: str) -> str:
        series = self.series(dataset, column)
        return "\n".join(
            [
                f"print({series}.mean())",
                f"print({series}.median())",
                f"print({series}.isna().sum())",
            ],
        )

    def nominal_summary(self, dataset: str, column: str) -> str:
        series = self.series(dataset, column)
        return "\n".join(
            [
                f"print({series}.nunique())",
                f"print({series}.isna().sum())",
            ],
        )

    def value_counts_json(self, dataset: str, column: str, n: int) -> str:
        return f"print({self.series(dataset, column)}.value_counts()[:{int(n)}].to_json())"

    def binned_counts_json(self, dataset: str, column: str, max_bins: int) -> str:
        series = self.series(dataset, column)
        return (
            f"print({series}.value_counts(bins=min({int(max_bins)}, {series}.nunique()), "
            "sort=False).to_json())"
        )
