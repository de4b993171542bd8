"""内存内的脚本化内核通道。

按代码文本预先登记输出事件与终止状态，用于在没有真实内核的情况下
验证网关、查询层与会话行为。事件在 ``submit`` 返回之后的下一轮事件
循环中推送，与真实通道的异步时序一致。
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Union

from apps.profiler.kernel.channel import ExecutionReply, OutputEvent, OutputHandler


def stream(text: str, *, name: str = "stdout") -> OutputEvent:
    """构造 stream 事件。"""

    return OutputEvent(msg_type="stream", content={"name": name, "text": text})


def execute_result(text: str, *, msg_type: str = "execute_result") -> OutputEvent:
    """构造携带 text/plain 的结果类事件。"""

    return OutputEvent(msg_type=msg_type, content={"data": {"text/plain": text}})


def error_event(ename: str, evalue: str) -> OutputEvent:
    """构造内核错误事件，网关会忽略此类事件。"""

    return OutputEvent(msg_type="error", content={"ename": ename, "evalue": evalue, "traceback": []})


@dataclass
class ScriptedExecution:
    """一次执行的预设输出。

    Attributes
    ----------
    events: List[OutputEvent]
        按顺序推送的输出事件。
    status: str
        终止回复的状态。
    error: Optional[BaseException]
        若给定，终止句柄以该异常结束。
    complete: bool
        为 False 时终止句柄永不完成，用于模拟挂起的请求。
    """

    events: List[OutputEvent] = field(default_factory=list)
    status: str = "ok"
    error: Optional[BaseException] = None
    complete: bool = True


class ScriptedHandle:
    """脚本通道返回的执行句柄。"""

    def __init__(self, done: "asyncio.Future[ExecutionReply]") -> None:
        self.on_output: Optional[OutputHandler] = None
        self.done = done


Responder = Callable[[str], Optional[ScriptedExecution]]


class ScriptedChannel:
    """根据代码文本回放预设输出的通道。"""

    def __init__(
        self,
        script: Union[Dict[str, ScriptedExecution], Responder, None] = None,
        *,
        name: str = "scripted-kernel",
        language: str = "python",
    ) -> None:
        self.name = name
        self._language = language
        self._script: Dict[str, ScriptedExecution] = {}
        self._responder: Optional[Responder] = None
        if callable(script):
            self._responder = script
        elif script:
            self._script.update(script)
        self.submitted: List[str] = []
        self.stop_on_error_flags: List[bool] = []
        self.ready_waits = 0

    def respond(self, code: str, *events: OutputEvent, status: str = "ok") -> None:
        """登记某段代码的输出事件。"""

        self._script[code] = ScriptedExecution(events=list(events), status=status)

    def register(self, code: str, execution: ScriptedExecution) -> None:
        self._script[code] = execution

    async def wait_ready(self) -> None:
        self.ready_waits += 1

    async def language(self) -> str:
        return self._language

    def submit(self, code: str, *, stop_on_error: bool) -> ScriptedHandle:
        """记录提交并在下一轮事件循环推送预设输出。"""

        loop = asyncio.get_running_loop()
        self.submitted.append(code)
        self.stop_on_error_flags.append(stop_on_error)
        handle = ScriptedHandle(done=loop.create_future())
        execution = self._lookup(code)
        loop.call_soon(self._play, handle, execution)
        return handle

    def _lookup(self, code: str) -> ScriptedExecution:
        execution: Optional[ScriptedExecution] = None
        if self._responder is not None:
            execution = self._responder(code)
        if execution is None:
            execution = self._script.get(code)
        if execution is None:
            # 未登记的代码按内核 NameError 处理。
            execution = ScriptedExecution(
                events=[error_event("NameError", f"unscripted code: {code!r}")],
                status="error",
            )
        return execution

    @staticmethod
    def _play(handle: ScriptedHandle, execution: ScriptedExecution) -> None:
        for event in execution.events:
            if handle.on_output is not None:
                handle.on_output(event)
        if not execution.complete:
            return
        if execution.error is not None:
            handle.done.set_exception(execution.error)
            return
        handle.done.set_result(ExecutionReply(status=execution.status))
