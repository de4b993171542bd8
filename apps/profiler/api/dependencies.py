"""FastAPI 依赖注入配置。

宿主进程负责创建内核通道，并调用 ``await get_profile_session().connect(channel)``
完成绑定；在此之前查询接口返回 503。
"""

from __future__ import annotations

from functools import lru_cache

from apps.profiler.infra.clock import UtcClock
from apps.profiler.services.session import ProfileSession
from apps.profiler.settings import ProfilerSettings, get_settings
from apps.profiler.stores import DatasetCatalogStore


@lru_cache
def get_clock() -> UtcClock:
    """提供全局 UTC 时钟实例。"""

    return UtcClock()


@lru_cache
def get_catalog_store() -> DatasetCatalogStore:
    """提供目录快照 Store。"""

    return DatasetCatalogStore()


@lru_cache
def get_profile_session() -> ProfileSession:
    """提供进程级画像会话。"""

    settings: ProfilerSettings = get_settings()
    return ProfileSession(
        store=get_catalog_store(),
        settings=settings,
        clock=get_clock(),
    )
