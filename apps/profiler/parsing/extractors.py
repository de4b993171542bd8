"""内核打印文本的解析函数。

每个函数对应一种内核默认打印格式，输入为执行网关返回的行列表，
格式不符时抛出 :class:`~apps.profiler.errors.ParseError`，不做静默截断。
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Sequence, Tuple

from apps.profiler.contracts.columns import ColumnDescriptor
from apps.profiler.errors import ParseError

DTYPE_FOOTER = "dtype: object"
"""``print(df.dtypes)`` 末尾追加的汇总行。"""

BOOLEAN_TOKENS = frozenset({"True", "False"})

_INTERVAL_BRACKETS = re.compile(r"[\])}[{(]")


def _first_line(lines: Sequence[str], what: str) -> str:
    if not lines:
        raise ParseError(f"{what} 输出为空。", lines=list(lines))
    return lines[0]


def extract_name_list(lines: Sequence[str]) -> List[str]:
    """解析 ``%who_ls`` 的列表打印，例如 ``['a', 'b']``。

    单引号替换为双引号后包装为 ``{"names": ...}`` 按 JSON 解析。长列表
    可能被折行打印，因此先按换行拼接全部行。
    """

    text = "\n".join(lines).strip()
    if not text:
        raise ParseError("变量列表输出为空。", lines=list(lines))
    document = '{"names": ' + text.replace("'", '"') + "}"
    try:
        names = json.loads(document)["names"]
    except json.JSONDecodeError as error:
        raise ParseError(f"变量列表格式无法解析: {text!r}", lines=list(lines)) from error
    if not isinstance(names, list) or not all(isinstance(name, str) for name in names):
        raise ParseError(f"变量列表必须是字符串列表: {text!r}", lines=list(lines))
    return names


def extract_boolean_flags(lines: Sequence[str], expected_count: int) -> List[str]:
    """解析逐行打印的 ``True``/``False``，数量必须与查询的变量数一致。"""

    flags = list(lines)
    if len(flags) != expected_count:
        raise ParseError(
            f"期望 {expected_count} 个布尔标记，实际收到 {len(flags)} 行。",
            lines=flags,
        )
    for flag in flags:
        if flag not in BOOLEAN_TOKENS:
            raise ParseError(f"无法识别的布尔标记: {flag!r}", lines=flags)
    return flags


def extract_column_descriptors(lines: Sequence[str]) -> List[ColumnDescriptor]:
    """解析 ``print(df.dtypes)`` 的输出。

    跳过 ``dtype: object`` 汇总行，其余每行按空白切分，前两个字段分别为
    列名与类型；缺少任一字段的行被丢弃。

    只按整行精确匹配过滤汇总行。没有列的 DataFrame 打印为
    ``Series([], dtype: object)``，会被解析成名为 ``Series([],`` 的伪列，
    这是已知的解析限制。
    """

    columns: List[ColumnDescriptor] = []
    for line in lines:
        if line == DTYPE_FOOTER:
            continue
        tokens = line.split()
        if len(tokens) < 2:
            continue
        columns.append(ColumnDescriptor(name=tokens[0], declared_type=tokens[1]))
    return columns


def extract_shape(lines: Sequence[str]) -> List[float]:
    """解析 ``(d0, d1, ...)`` 形式的 shape 打印。"""

    text = _first_line(lines, "shape").strip()
    if len(text) < 2 or not text.startswith("(") or not text.endswith(")"):
        raise ParseError(f"shape 必须以括号包裹: {text!r}", lines=list(lines))
    dimensions: List[float] = []
    for token in text[1:-1].split(","):
        token = token.strip()
        # 单元素元组打印为 (5,)，末尾为空字段。
        if not token:
            continue
        try:
            dimensions.append(float(token))
        except ValueError as error:
            raise ParseError(f"shape 含有非数值字段: {token!r}", lines=list(lines)) from error
    return dimensions


def extract_head_rows(lines: Sequence[str]) -> List[str]:
    """解析带行索引的 Series 打印，只保留取值列。

    最后一行是 ``Name: col, dtype: ...`` 尾注，直接丢弃；仅有索引的行
    对应空字符串取值。
    """

    if not lines:
        raise ParseError("列示例输出为空。", lines=list(lines))
    values: List[str] = []
    for line in lines[:-1]:
        tokens = line.split()
        values.append(tokens[1] if len(tokens) > 1 else "")
    return values


def extract_jsonish(lines: Sequence[str]) -> Dict[str, Any]:
    """解析单引号包裹的 JSON 对象。

    直接删除全部单引号后按 JSON 解析，取值本身含有撇号时会被破坏。
    """

    text = _first_line(lines, "图表数据").replace("'", "")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as error:
        raise ParseError(f"图表数据不是合法 JSON: {text!r}", lines=list(lines)) from error
    if not isinstance(payload, dict):
        raise ParseError(f"图表数据必须是 JSON 对象: {text!r}", lines=list(lines))
    return payload


def extract_interval_bounds(key: str) -> Tuple[float, float]:
    """解析区间键，例如 ``[22.0, 50.0)`` 解析为 ``(22.0, 50.0)``。"""

    parts = _INTERVAL_BRACKETS.sub("", key).split(",")
    if len(parts) != 2:
        raise ParseError(f"区间键格式错误: {key!r}", lines=[key])
    try:
        return float(parts[0]), float(parts[1])
    except ValueError as error:
        raise ParseError(f"区间边界不是数值: {key!r}", lines=[key]) from error


def extract_scalar_lines(lines: Sequence[str], labels: Sequence[str]) -> Dict[str, str]:
    """把逐行打印的标量按顺序映射到标签。"""

    if len(lines) < len(labels):
        raise ParseError(
            f"期望至少 {len(labels)} 行标量输出，实际收到 {len(lines)} 行。",
            lines=list(lines),
        )
    return {label: lines[index] for index, label in enumerate(labels)}
