"""执行网关：把“提交代码、异步收到若干输出”转换为单次解析的协程调用。

每次提交对应一个 :class:`ExecutionRequest` 状态机：

========================  ==================================  ================
当前状态                    输入                                 下一状态
========================  ==================================  ================
PENDING                   结果类事件（含 text/plain）或 stream    EVENT_OBSERVED
PENDING                   其他事件                              PENDING
EVENT_OBSERVED            任意事件                              EVENT_OBSERVED
EVENT_OBSERVED            终止成功                              RESOLVED
PENDING/EVENT_OBSERVED    终止失败                              FAILED
PENDING                   终止成功                              PENDING
========================  ==================================  ================

只有首个可识别事件决定结果，之后的事件仅计数不合并。终止失败时若结果
尚未交付，则以 ``None`` 交付。终止成功但从未收到可识别事件的请求会一直
挂起，调用方需要通过 ``timeout`` 自行兜底。

stream 事件不区分 stdout 与 stderr：若代码先向 stderr 打印警告（例如 pandas
的 FutureWarning），该警告文本即成为结果，真正的 stdout 输出被忽略。
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, List, Optional, Tuple

from apps.profiler.errors import UnresolvedRequest
from apps.profiler.kernel.channel import (
    RESULT_EVENT_TYPES,
    TEXT_MIME_TYPE,
    ExecutionReply,
    KernelChannel,
    OutputEvent,
)

LOGGER = logging.getLogger(__name__)


class RequestState(str, Enum):
    """单次执行请求的生命周期状态。"""

    PENDING = "pending"
    EVENT_OBSERVED = "event_observed"
    RESOLVED = "resolved"
    FAILED = "failed"


def lines_from_event(event: OutputEvent) -> Optional[List[str]]:
    """从输出事件中提取按行切分的文本。

    Parameters
    ----------
    event: OutputEvent
        内核推送的输出事件。

    Returns
    -------
    Optional[List[str]]
        结果类事件返回 ``text/plain`` 按换行切分的列表；stream 事件返回
        ``text`` 切分后的列表，并去掉末尾换行产生的空元素；其余事件或
        缺少文本表示时返回 ``None``。
    """

    if not event.recognized:
        return None
    if event.msg_type in RESULT_EVENT_TYPES:
        data = event.content.get("data") or {}
        text = data.get(TEXT_MIME_TYPE)
        if text is None:
            return None
        return str(text).split("\n")
    text = event.content.get("text")
    if text is None:
        return None
    lines = str(text).split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


class ExecutionRequest:
    """一次代码提交的结果关联状态机。"""

    def __init__(self, code: str, result: "asyncio.Future[Optional[List[str]]]") -> None:
        self.code = code
        self.state = RequestState.PENDING
        self.lines: Optional[List[str]] = None
        self.failure_reason: Optional[str] = None
        self.ignored_events = 0
        self.completed = False
        self._result = result

    @property
    def result(self) -> "asyncio.Future[Optional[List[str]]]":
        """交付给调用方的一次性结果。"""

        return self._result

    def handle_output(self, event: OutputEvent) -> None:
        """处理一条输出事件。"""

        if self.state is not RequestState.PENDING:
            self.ignored_events += 1
            LOGGER.debug(
                "结果已确定，忽略后续输出事件",
                extra={"msg_type": event.msg_type, "state": self.state.value},
            )
            return
        lines = lines_from_event(event)
        if lines is None:
            LOGGER.debug("忽略无法识别的输出事件", extra={"msg_type": event.msg_type})
            return
        self.lines = lines
        self.state = RequestState.EVENT_OBSERVED
        LOGGER.debug(
            "代码执行返回输出",
            extra={"code_snippet": self.code, "msg_type": event.msg_type, "line_count": len(lines)},
        )
        self._deliver(lines)

    def handle_completion(
        self,
        reply: Optional[ExecutionReply],
        error: Optional[BaseException] = None,
    ) -> None:
        """处理终止信号，只生效一次。"""

        if self.completed:
            return
        self.completed = True
        if error is None and reply is not None and reply.ok:
            if self.state is RequestState.EVENT_OBSERVED:
                self.state = RequestState.RESOLVED
            elif self.state is RequestState.PENDING:
                LOGGER.warning(
                    "执行已完成但未收到可识别输出，请求保持挂起",
                    extra={"code_snippet": self.code},
                )
            return
        if error is not None:
            reason = f"{error.__class__.__name__}: {error}"
        elif reply is None:
            reason = "missing reply"
        else:
            reason = f"status={reply.status}"
        self.failure_reason = reason
        self.state = RequestState.FAILED
        LOGGER.error("代码执行失败", extra={"code_snippet": self.code, "reason": reason})
        self._deliver(None)

    def _deliver(self, value: Optional[List[str]]) -> None:
        if not self._result.done():
            self._result.set_result(value)


def _read_completion(future: Any) -> Tuple[Optional[ExecutionReply], Optional[BaseException]]:
    """从已完成的终止句柄中读取回复或异常。"""

    if future.cancelled():
        return None, asyncio.CancelledError("execution cancelled")
    error = future.exception()
    if error is not None:
        return None, error
    reply = future.result()
    if isinstance(reply, ExecutionReply):
        return reply, None
    # 兼容直接返回 {"status": ...} 的适配器。
    status = reply.get("status") if isinstance(reply, dict) else getattr(reply, "status", None)
    if status is None:
        return None, None
    return ExecutionReply(status=str(status)), None


class ExecutionGateway:
    """包装内核通道，提供 ``execute(code) -> 行列表`` 的异步接口。"""

    def __init__(self, channel: KernelChannel, *, stop_on_error: bool = True) -> None:
        """初始化网关。

        Parameters
        ----------
        channel: KernelChannel
            外部持有的内核通道。
        stop_on_error: bool
            提交时是否在首个错误处停止。
        """

        self._channel = channel
        self._stop_on_error = stop_on_error

    def submit(self, code: str) -> ExecutionRequest:
        """提交代码并返回绑定好回调的请求状态机。

        必须在事件循环内调用。通道回调可能来自其他线程，统一经
        ``call_soon_threadsafe`` 切回事件循环后再驱动状态机。
        """

        loop = asyncio.get_running_loop()
        request = ExecutionRequest(code=code, result=loop.create_future())
        handle = self._channel.submit(code, stop_on_error=self._stop_on_error)

        def on_output(event: OutputEvent) -> None:
            if loop.is_closed():
                return
            loop.call_soon_threadsafe(request.handle_output, event)

        def on_done(future: Any) -> None:
            if loop.is_closed():
                return
            reply, error = _read_completion(future)
            loop.call_soon_threadsafe(request.handle_completion, reply, error)

        handle.on_output = on_output
        handle.done.add_done_callback(on_done)
        return request

    async def execute(self, code: str, *, timeout: Optional[float] = None) -> Optional[List[str]]:
        """执行代码并返回首个可识别输出的行列表。

        Parameters
        ----------
        code: str
            需要执行的代码。
        timeout: Optional[float]
            等待秒数；为空时无限等待。

        Returns
        -------
        Optional[List[str]]
            输出行列表；终止失败时为 ``None``。

        Raises
        ------
        UnresolvedRequest
            超时前未收到可识别输出。
        """

        request = self.submit(code)
        if timeout is None:
            return await request.result
        try:
            return await asyncio.wait_for(request.result, timeout)
        except asyncio.TimeoutError as error:
            LOGGER.warning(
                "等待执行输出超时",
                extra={"code_snippet": code, "timeout": timeout, "state": request.state.value},
            )
            raise UnresolvedRequest(code_snippet=code, timeout=timeout) from error
