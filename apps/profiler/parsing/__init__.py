"""内核输出文本解析。"""

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

__all__ = [
    "extract_boolean_flags",
    "extract_column_descriptors",
    "extract_head_rows",
    "extract_interval_bounds",
    "extract_jsonish",
    "extract_name_list",
    "extract_scalar_lines",
    "extract_shape",
]
