"""测试前置配置。"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Iterator

import pytest


def pytest_configure() -> None:
    """确保仓库根目录位于 Python 模块搜索路径。"""

    root = Path(__file__).resolve().parents[3]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """屏蔽宿主环境中的 PROFILER_ 变量，并在用例前后清理配置缓存与依赖覆盖。"""

    from apps.profiler.api.app import app
    from apps.profiler.settings import get_settings

    for key in list(os.environ):
        if key.startswith("PROFILER_"):
            monkeypatch.delenv(key)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    app.dependency_overrides.clear()
