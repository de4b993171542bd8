"""FastAPI 应用工厂。"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from apps.profiler.api.routes import router
from apps.profiler.settings import get_settings


def create_app() -> FastAPI:
    """构建 FastAPI 应用实例。"""

    settings = get_settings()
    logging.getLogger("apps.profiler").setLevel(settings.log_level)
    app = FastAPI(
        title="Kernel Profiler API",
        version="0.1.0",
    )
    app.include_router(router)
    return app


app = create_app()
