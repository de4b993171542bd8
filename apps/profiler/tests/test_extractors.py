"""内核打印文本解析测试。"""

from __future__ import annotations

import pytest

from apps.profiler.contracts.columns import ColumnDescriptor
from apps.profiler.errors import ParseError
from apps.profiler.parsing import (
    extract_boolean_flags,
    extract_column_descriptors,
    extract_head_rows,
    extract_interval_bounds,
    extract_jsonish,
    extract_name_list,
    extract_scalar_lines,
    extract_shape,
)


def test_name_list_keeps_order_of_quoted_tokens() -> None:
    """单引号列表应按原顺序解析。"""

    assert extract_name_list(["['a', 'b', 'c']"]) == ["a", "b", "c"]
    assert extract_name_list(["['zeta', 'alpha']"]) == ["zeta", "alpha"]


def test_name_list_handles_empty_and_wrapped_listing() -> None:
    """空列表与折行打印都应可解析。"""

    assert extract_name_list(["[]"]) == []
    assert extract_name_list(["['first_frame',", " 'second_frame']"]) == ["first_frame", "second_frame"]


@pytest.mark.parametrize("line", ["", "not a list", "['a', 'b'", "{'a': 1}", "[1, 2]"])
def test_name_list_rejects_malformed_rendering(line: str) -> None:
    """非列表打印应抛出 ParseError。"""

    with pytest.raises(ParseError):
        extract_name_list([line])


def test_boolean_flags_match_variable_count() -> None:
    """布尔标记数量与变量数一致时原样返回。"""

    assert extract_boolean_flags(["True", "False", "True"], expected_count=3) == ["True", "False", "True"]


def test_boolean_flags_reject_length_mismatch() -> None:
    """数量不一致时不允许静默截断。"""

    with pytest.raises(ParseError):
        extract_boolean_flags(["True"], expected_count=2)
    with pytest.raises(ParseError):
        extract_boolean_flags(["True", "False", "True"], expected_count=2)


def test_boolean_flags_are_case_sensitive() -> None:
    """只接受 True/False 字面量。"""

    with pytest.raises(ParseError):
        extract_boolean_flags(["true"], expected_count=1)


def test_column_descriptors_drop_dtype_footer() -> None:
    """dtype 汇总行被过滤，其余保持顺序。"""

    columns = extract_column_descriptors(["colA int64", "colB object", "dtype: object"])
    assert columns == [
        ColumnDescriptor(name="colA", declared_type="int64"),
        ColumnDescriptor(name="colB", declared_type="object"),
    ]


def test_column_descriptors_split_on_whitespace_runs_and_drop_incomplete_lines() -> None:
    """多空格对齐的打印应正确切分，缺字段的行被丢弃。"""

    lines = ["price      float64", "lonely", "", "created    datetime64[ns]", "dtype: object"]
    columns = extract_column_descriptors(lines)
    assert [(column.name, column.declared_type) for column in columns] == [
        ("price", "float64"),
        ("created", "datetime64[ns]"),
    ]


def test_shape_parses_tuple_rendering() -> None:
    """shape 元组解析为浮点数列表。"""

    assert extract_shape(["(100, 4)"]) == [100.0, 4.0]
    assert extract_shape(["(7,)"]) == [7.0]


@pytest.mark.parametrize("line", ["100, 4", "(100, 4", "[100, 4]", "(a, b)"])
def test_shape_rejects_malformed_bracketing(line: str) -> None:
    """括号缺失或含非数值字段时抛出 ParseError。"""

    with pytest.raises(ParseError):
        extract_shape([line])


def test_head_rows_drop_footer_and_index() -> None:
    """保留第二个字段并去掉尾注行。"""

    lines = ["0 5", "1 7", "2 9", "Name: col, dtype: int64"]
    assert extract_head_rows(lines) == ["5", "7", "9"]


def test_head_rows_index_only_line_yields_empty_value() -> None:
    """只有索引的行对应空字符串。"""

    assert extract_head_rows(["0    a", "1", "Name: col, dtype: object"]) == ["a", ""]


def test_jsonish_strips_single_quotes_before_parsing() -> None:
    """单引号被整体去除后按 JSON 解析。"""

    assert extract_jsonish(["{\"a\":3,\"b\":'2'}"]) == {"a": 3, "b": 2}


def test_jsonish_apostrophe_in_value_is_lost() -> None:
    """取值中的撇号会被删除，这是已知的解析限制。"""

    assert extract_jsonish(['{"O\'Brien":2}']) == {"OBrien": 2}


def test_jsonish_rejects_non_object() -> None:
    """非 JSON 对象抛出 ParseError。"""

    with pytest.raises(ParseError):
        extract_jsonish(["[1, 2]"])
    with pytest.raises(ParseError):
        extract_jsonish(["not json"])


def test_interval_bounds_and_bin_size() -> None:
    """区间键解析为上下界。"""

    low, high = extract_interval_bounds("[22.0, 50.0)")
    assert (low, high) == (22.0, 50.0)
    assert abs(high - low) == 28.0
    assert extract_interval_bounds("(-0.001, 10.5]") == (-0.001, 10.5)


def test_interval_bounds_reject_malformed_key() -> None:
    """缺少逗号或非数值边界抛出 ParseError。"""

    with pytest.raises(ParseError):
        extract_interval_bounds("[22.0]")
    with pytest.raises(ParseError):
        extract_interval_bounds("[low, high)")


def test_scalar_lines_require_enough_lines() -> None:
    """标量行不足时抛出 ParseError。"""

    assert extract_scalar_lines(["1.5", "nan"], labels=("mean", "median")) == {"mean": "1.5", "median": "nan"}
    with pytest.raises(ParseError):
        extract_scalar_lines(["1.5"], labels=("mean", "median"))


def test_column_descriptors_of_columnless_frame_yield_placeholder_column() -> None:
    """无列 DataFrame 的 dtypes 打印不是汇总行，会被解析为一条伪列。"""

    columns = extract_column_descriptors(["Series([], dtype: object)"])
    assert columns == [ColumnDescriptor(name="Series([],", declared_type="dtype:")]
