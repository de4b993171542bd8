"""统一的 UTC 时钟，快照时间戳均由此获取。"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    """时间来源协议，测试中可替换为返回固定时间的实现。"""

    def now(self) -> datetime:
        ...


class UtcClock:
    """返回带时区信息的当前时间。"""

    def now(self) -> datetime:
        """返回当前 UTC 时间。

        Returns
        -------
        datetime
            带有 UTC 时区信息的当前时间。
        """

        return datetime.now(timezone.utc)
