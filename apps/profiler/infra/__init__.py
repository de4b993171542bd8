"""基础设施组件导出。"""

from apps.profiler.infra.clock import Clock, UtcClock

__all__ = [
    "Clock",
    "UtcClock",
]
