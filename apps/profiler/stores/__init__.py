"""Store 层导出。"""

from apps.profiler.stores.catalog_store import DatasetCatalogStore

__all__ = [
    "DatasetCatalogStore",
]
