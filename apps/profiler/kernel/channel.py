"""内核通道协议。

通道由外部持有（会话建立与销毁不在本包范围内），画像代码只通过
``submit`` 提交代码。每次提交返回一个执行句柄：

* ``on_output``：回调槽位，执行期间可被调用零次或多次，参数为 :class:`OutputEvent`。
* ``done``：终止信号，只完成一次，结果为 :class:`ExecutionReply`；
  也可以以异常结束。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Protocol, runtime_checkable

RESULT_EVENT_TYPES = frozenset({"execute_result", "display_data", "update_display_data"})
"""携带 ``data['text/plain']`` 的结果类事件。"""

STREAM_EVENT_TYPE = "stream"
"""标准输出流事件，携带 ``text``。"""

TEXT_MIME_TYPE = "text/plain"


@dataclass(frozen=True)
class OutputEvent:
    """执行过程中内核推送的一条输出消息。"""

    msg_type: str
    content: Mapping[str, Any] = field(default_factory=dict)

    @property
    def recognized(self) -> bool:
        """是否属于画像关心的四类事件。"""

        return self.msg_type in RESULT_EVENT_TYPES or self.msg_type == STREAM_EVENT_TYPE


@dataclass(frozen=True)
class ExecutionReply:
    """执行终止时的状态。"""

    status: str

    @property
    def ok(self) -> bool:
        return self.status == "ok"


OutputHandler = Callable[[OutputEvent], None]


@runtime_checkable
class ExecutionHandle(Protocol):
    """单次执行的句柄。

    ``done`` 可以是 ``asyncio.Future`` 或 ``concurrent.futures.Future``，
    只要求支持 ``add_done_callback``。
    """

    on_output: Optional[OutputHandler]
    done: Any


@runtime_checkable
class KernelChannel(Protocol):
    """与远端内核交互所需的最小能力集合。"""

    name: str

    async def wait_ready(self) -> None:
        """等待通道可用，在首次提交前调用。"""
        ...

    async def language(self) -> str:
        """返回内核语言名称，例如 python。"""
        ...

    def submit(self, code: str, *, stop_on_error: bool) -> ExecutionHandle:
        """提交代码并立即返回执行句柄。"""
        ...
