"""画像查询的错误分类。

所有异常均派生自 :class:`ProfilerError`，并携带稳定的 :class:`ErrorCode`，
便于 API 层映射状态码、调用方按类型降级处理：

* ``ChannelFailure``：内核通道报告终止失败，或执行结果缺失。
* ``ParseError``：输出文本与预期的打印格式不匹配。
* ``UnresolvedRequest``：在调用方给定的超时内未收到任何可识别输出。
* ``InvalidIdentifier``：严格模式下数据集或列名无法安全拼接进代码。
* ``SessionNotReady``：会话尚未连接内核。
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """错误编码，与 API 响应中的 ``error_code`` 字段保持一致。"""

    CHANNEL_FAILURE = "CHANNEL_FAILURE"
    PARSE_ERROR = "PARSE_ERROR"
    UNRESOLVED_REQUEST = "UNRESOLVED_REQUEST"
    INVALID_IDENTIFIER = "INVALID_IDENTIFIER"
    SESSION_NOT_READY = "SESSION_NOT_READY"


class ProfilerError(Exception):
    """画像查询异常基类。"""

    code: ErrorCode = ErrorCode.CHANNEL_FAILURE


class ChannelFailure(ProfilerError):
    """内核执行失败或未返回结果。"""

    code = ErrorCode.CHANNEL_FAILURE

    def __init__(self, message: str, *, code_snippet: Optional[str] = None) -> None:
        super().__init__(message)
        self.code_snippet = code_snippet


class ParseError(ProfilerError):
    """输出文本无法按预期格式解析。"""

    code = ErrorCode.PARSE_ERROR

    def __init__(self, message: str, *, lines: Optional[list[str]] = None) -> None:
        super().__init__(message)
        self.lines = list(lines) if lines is not None else []


class UnresolvedRequest(ProfilerError):
    """请求在超时前没有得到任何可识别的输出事件。"""

    code = ErrorCode.UNRESOLVED_REQUEST

    def __init__(self, code_snippet: str, timeout: float) -> None:
        message = f"执行在 {timeout} 秒内未产生可识别的输出。"
        super().__init__(message)
        self.code_snippet = code_snippet
        self.timeout = timeout


class InvalidIdentifier(ProfilerError, ValueError):
    """名称无法安全拼接进可执行代码。"""

    code = ErrorCode.INVALID_IDENTIFIER


class SessionNotReady(ProfilerError):
    """会话尚未连接内核。"""

    code = ErrorCode.SESSION_NOT_READY
