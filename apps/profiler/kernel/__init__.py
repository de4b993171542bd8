"""内核通道协议、代码构造与执行网关。"""

from apps.profiler.kernel.channel import ExecutionHandle, ExecutionReply, KernelChannel, OutputEvent
from apps.profiler.kernel.code_builder import CodeBuilder
from apps.profiler.kernel.gateway import ExecutionGateway, ExecutionRequest, RequestState, lines_from_event

__all__ = [
    "CodeBuilder",
    "ExecutionGateway",
    "ExecutionHandle",
    "ExecutionReply",
    "ExecutionRequest",
    "KernelChannel",
    "OutputEvent",
    "RequestState",
    "lines_from_event",
]
