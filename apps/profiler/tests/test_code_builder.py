"""代码构造器测试。"""

from __future__ import annotations

import pytest

from apps.profiler.errors import InvalidIdentifier
from apps.profiler.kernel import CodeBuilder


def test_default_mode_interpolates_names_verbatim() -> None:
    """默认模式不做任何转义。"""

    builder = CodeBuilder()
    assert builder.column_head("df", 'we"ird', 5) == 'print(df["we"ird"].head(5))'
    assert builder.shape("frames[0]") == "print(frames[0].shape)"


def test_classify_tabular_prints_one_line_per_name() -> None:
    """每个变量对应一条 print 语句。"""

    code = CodeBuilder().classify_tabular(["a", "b"])
    assert code.splitlines() == [
        "import pandas as pd",
        "print(type(a) == pd.DataFrame)",
        "print(type(b) == pd.DataFrame)",
    ]


def test_binned_counts_caps_bins_by_unique_count() -> None:
    """分箱数取 max_bins 与唯一值数的较小者。"""

    code = CodeBuilder().binned_counts_json("df", "age", 5)
    assert code == (
        'print(df["age"].value_counts(bins=min(5, df["age"].nunique()), sort=False).to_json())'
    )


def test_summary_snippets_print_each_statistic() -> None:
    """摘要代码逐行打印统计量。"""

    builder = CodeBuilder()
    assert builder.quantitative_summary("df", "x").splitlines() == [
        'print(df["x"].mean())',
        'print(df["x"].median())',
        'print(df["x"].isna().sum())',
    ]
    assert builder.nominal_summary("df", "x").splitlines() == [
        'print(df["x"].nunique())',
        'print(df["x"].isna().sum())',
    ]
    assert builder.value_counts_json("df", "x", 3) == 'print(df["x"].value_counts()[:3].to_json())'


def test_strict_mode_escapes_column_and_validates_dataset() -> None:
    """严格模式转义列名并校验数据集名。"""

    builder = CodeBuilder(strict_identifiers=True)
    assert builder.series("df", 'a"b\\c') == 'df["a\\"b\\\\c"]'
    with pytest.raises(InvalidIdentifier):
        builder.dataset("df.head()")
    with pytest.raises(InvalidIdentifier):
        builder.column("line\nbreak")
    with pytest.raises(ValueError):
        builder.classify_tabular(["ok", "not ok"])
