"""画像会话：连接内核通道，并在单元格执行后刷新目录快照。"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Set

from apps.profiler.contracts.columns import DatasetCatalog
from apps.profiler.errors import ProfilerError, SessionNotReady
from apps.profiler.infra.clock import Clock
from apps.profiler.kernel.channel import KernelChannel
from apps.profiler.kernel.code_builder import CodeBuilder
from apps.profiler.kernel.gateway import ExecutionGateway
from apps.profiler.services.queries import KernelProfileQueries
from apps.profiler.settings import ProfilerSettings
from apps.profiler.stores.catalog_store import DatasetCatalogStore

LOGGER = logging.getLogger(__name__)

CELL_RUN_CHANGE = "cell run"
"""笔记本“单元格已执行”通知，收到后刷新目录。"""


class ProfileSession:
    """持有内核通道与查询集合，负责把目录快照发布到 Store。

    通道本身由外部创建与销毁，本类只通过它提交代码。
    """

    def __init__(
        self,
        *,
        store: DatasetCatalogStore,
        settings: ProfilerSettings,
        clock: Clock,
    ) -> None:
        self._store = store
        self._settings = settings
        self._clock = clock
        self._channel: Optional[KernelChannel] = None
        self._queries: Optional[KernelProfileQueries] = None
        self._ready = False
        self._refresh_tasks: Set[asyncio.Task] = set()

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def name(self) -> Optional[str]:
        if self._channel is None:
            return None
        return self._channel.name

    @property
    def store(self) -> DatasetCatalogStore:
        return self._store

    async def language(self) -> Optional[str]:
        """返回内核语言名称，未连接时为 None。"""

        if self._channel is None:
            return None
        return await self._channel.language()

    async def connect(self, channel: KernelChannel) -> Optional[DatasetCatalog]:
        """绑定通道，等待其就绪后执行首次刷新。

        Parameters
        ----------
        channel: KernelChannel
            外部持有的内核通道，重复调用会替换当前通道。

        Returns
        -------
        Optional[DatasetCatalog]
            首次刷新得到的快照，失败时为 None。
        """

        LOGGER.info("连接内核通道", extra={"channel": channel.name})
        self._ready = False
        self._channel = channel
        await channel.wait_ready()
        gateway = ExecutionGateway(channel, stop_on_error=self._settings.stop_on_error)
        self._queries = KernelProfileQueries(
            gateway,
            code_builder=CodeBuilder(strict_identifiers=self._settings.strict_identifiers),
            timeout=self._settings.execution_timeout,
        )
        self._ready = True
        return await self.refresh()

    def require_queries(self) -> KernelProfileQueries:
        """返回查询集合，未连接时立即失败。"""

        if not self._ready or self._queries is None:
            raise SessionNotReady("画像会话尚未连接内核。")
        return self._queries

    async def refresh(self) -> Optional[DatasetCatalog]:
        """重新生成目录快照并发布。

        失败时记录日志并保留上一次快照，不向调用方抛出查询错误。
        """

        queries = self.require_queries()
        try:
            catalog = await queries.build_catalog(clock=self._clock)
        except ProfilerError as error:
            LOGGER.warning(
                "刷新数据集目录失败，保留上一次快照",
                extra={"error_code": error.code.value, "error_message": str(error)},
            )
            return None
        self._store.publish(catalog)
        LOGGER.info(
            "数据集目录刷新完成",
            extra={"datasets": list(catalog.datasets), "warnings": len(catalog.warnings)},
        )
        return catalog

    def notify(self, change: str) -> Optional["asyncio.Task[Optional[DatasetCatalog]]"]:
        """处理笔记本变更通知，单元格执行后异步刷新。

        Returns
        -------
        Optional[asyncio.Task]
            已调度的刷新任务；通知被忽略时为 None。
        """

        if change != CELL_RUN_CHANGE or not self._ready:
            return None
        task = asyncio.get_running_loop().create_task(self.refresh())
        self._refresh_tasks.add(task)
        task.add_done_callback(self._refresh_tasks.discard)
        return task

    async def wait_refreshes(self) -> None:
        """等待所有已调度的刷新任务结束。"""

        if self._refresh_tasks:
            await asyncio.gather(*list(self._refresh_tasks))
