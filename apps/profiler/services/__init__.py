"""服务层导出。"""

from apps.profiler.services.queries import KernelProfileQueries
from apps.profiler.services.session import CELL_RUN_CHANGE, ProfileSession

__all__ = [
    "CELL_RUN_CHANGE",
    "KernelProfileQueries",
    "ProfileSession",
]
