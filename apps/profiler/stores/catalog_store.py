"""数据集目录快照 Store，由调用方持有并决定失效策略。"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from apps.profiler.contracts.columns import DatasetCatalog

LOGGER = logging.getLogger(__name__)

CatalogListener = Callable[[DatasetCatalog], None]


@dataclass
class DatasetCatalogStore:
    """保存最近一次发布的目录快照，并通知订阅者。"""

    _catalog: Optional[DatasetCatalog] = None
    _listeners: List[CatalogListener] = field(default_factory=list)

    def publish(self, catalog: DatasetCatalog) -> None:
        """替换当前快照并依次通知订阅者。

        Parameters
        ----------
        catalog: DatasetCatalog
            新生成的目录快照。
        """

        self._catalog = catalog
        LOGGER.debug(
            "目录快照已更新",
            extra={"datasets": len(catalog.datasets), "refreshed_at": catalog.refreshed_at.isoformat()},
        )
        for listener in list(self._listeners):
            listener(catalog)

    def current(self) -> Optional[DatasetCatalog]:
        """返回当前快照，尚未发布时为 None。"""

        return self._catalog

    def require(self) -> DatasetCatalog:
        """读取当前快照，不存在时立即失败。"""

        if self._catalog is None:
            message = "尚未生成数据集目录，请先连接内核并刷新。"
            raise KeyError(message)
        return self._catalog

    def subscribe(self, listener: CatalogListener) -> Callable[[], None]:
        """注册快照监听器。

        若已有快照，会立即以当前快照调用一次监听器。

        Returns
        -------
        Callable[[], None]
            取消订阅的函数。
        """

        self._listeners.append(listener)
        if self._catalog is not None:
            listener(self._catalog)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
