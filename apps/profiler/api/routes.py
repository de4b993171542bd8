"""FastAPI 路由定义。"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Dict, Optional, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Query, status

from apps.profiler.api.dependencies import get_catalog_store, get_profile_session
from apps.profiler.api.schemas import (
    CatalogResponse,
    ColumnSampleResponse,
    ErrorPayload,
    KernelStatusResponse,
    ShapeResponse,
)
from apps.profiler.contracts.chart_data import NominalChartData, QuantChartData
from apps.profiler.contracts.summaries import NominalSummary, QuantitativeSummary
from apps.profiler.errors import ErrorCode, ProfilerError
from apps.profiler.services.session import ProfileSession
from apps.profiler.settings import ProfilerSettings, get_settings
from apps.profiler.stores import DatasetCatalogStore

LOGGER = logging.getLogger(__name__)

router = APIRouter()

T = TypeVar("T")

STATUS_BY_ERROR_CODE: Dict[ErrorCode, int] = {
    ErrorCode.SESSION_NOT_READY: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.INVALID_IDENTIFIER: status.HTTP_400_BAD_REQUEST,
    ErrorCode.PARSE_ERROR: 422,
    ErrorCode.CHANNEL_FAILURE: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.UNRESOLVED_REQUEST: status.HTTP_504_GATEWAY_TIMEOUT,
}


def _to_http_exception(endpoint: str, error: ProfilerError) -> HTTPException:
    """把画像错误映射为 HTTP 异常并记录日志。"""

    status_code = STATUS_BY_ERROR_CODE.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    LOGGER.warning(
        "API 调用失败",
        extra={
            "endpoint": endpoint,
            "error_type": error.__class__.__name__,
            "status_code": status_code,
        },
    )
    payload = ErrorPayload(error_code=error.code.value, error_message=str(error))
    return HTTPException(status_code=status_code, detail=payload.model_dump())


async def _guarded(endpoint: str, call: Callable[[], Awaitable[T]]) -> T:
    """执行查询，统一处理画像错误与未预期错误。"""

    try:
        return await call()
    except HTTPException:
        raise
    except ProfilerError as error:
        raise _to_http_exception(endpoint=endpoint, error=error) from error
    except Exception:  # noqa: BLE001 - 统一记录后继续抛出
        LOGGER.exception("画像查询出现未预期错误", extra={"endpoint": endpoint})
        raise


@router.get("/api/kernel/status", response_model=KernelStatusResponse)
async def kernel_status(
    session: ProfileSession = Depends(get_profile_session),
) -> KernelStatusResponse:
    """返回内核连接状态。"""

    language = await session.language() if session.ready else None
    return KernelStatusResponse(ready=session.ready, name=session.name, language=language)


@router.get("/api/datasets", response_model=CatalogResponse)
async def get_catalog(
    store: DatasetCatalogStore = Depends(get_catalog_store),
) -> CatalogResponse:
    """返回最近一次发布的目录快照。"""

    catalog = store.current()
    if catalog is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="尚未生成数据集目录。",
        )
    return CatalogResponse(catalog=catalog)


@router.post("/api/datasets/refresh", response_model=CatalogResponse)
async def refresh_catalog(
    session: ProfileSession = Depends(get_profile_session),
) -> CatalogResponse:
    """立即刷新目录快照。"""

    async def call() -> CatalogResponse:
        catalog = await session.refresh()
        if catalog is None:
            catalog = session.store.current()
        if catalog is None:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="目录刷新失败且没有可用快照。",
            )
        return CatalogResponse(catalog=catalog)

    return await _guarded("datasets.refresh", call)


@router.get("/api/datasets/{dataset}/shape", response_model=ShapeResponse)
async def get_shape(
    dataset: str,
    session: ProfileSession = Depends(get_profile_session),
) -> ShapeResponse:
    """返回数据集 shape。"""

    async def call() -> ShapeResponse:
        shape = await session.require_queries().get_shape(dataset)
        return ShapeResponse(dataset=dataset, shape=shape)

    return await _guarded("datasets.shape", call)


@router.get("/api/datasets/{dataset}/columns/{column}/sample", response_model=ColumnSampleResponse)
async def get_column_sample(
    dataset: str,
    column: str,
    n: Optional[int] = Query(default=None, ge=1),
    session: ProfileSession = Depends(get_profile_session),
    settings: ProfilerSettings = Depends(get_settings),
) -> ColumnSampleResponse:
    """返回列的前 n 个取值。"""

    rows = n or settings.head_rows

    async def call() -> ColumnSampleResponse:
        values = await session.require_queries().get_column_sample(dataset, column, n=rows)
        return ColumnSampleResponse(dataset=dataset, column=column, values=values)

    return await _guarded("columns.sample", call)


@router.get(
    "/api/datasets/{dataset}/columns/{column}/summary/quantitative",
    response_model=QuantitativeSummary,
)
async def get_quantitative_summary(
    dataset: str,
    column: str,
    session: ProfileSession = Depends(get_profile_session),
) -> QuantitativeSummary:
    """返回数值列摘要。"""

    return await _guarded(
        "columns.summary.quantitative",
        lambda: session.require_queries().get_quantitative_summary(dataset, column),
    )


@router.get(
    "/api/datasets/{dataset}/columns/{column}/summary/nominal",
    response_model=NominalSummary,
)
async def get_nominal_summary(
    dataset: str,
    column: str,
    session: ProfileSession = Depends(get_profile_session),
) -> NominalSummary:
    """返回类别列摘要。"""

    return await _guarded(
        "columns.summary.nominal",
        lambda: session.require_queries().get_nominal_summary(dataset, column),
    )


@router.get(
    "/api/datasets/{dataset}/columns/{column}/chart/nominal",
    response_model=NominalChartData,
)
async def get_nominal_chart(
    dataset: str,
    column: str,
    n: Optional[int] = Query(default=None, ge=1),
    session: ProfileSession = Depends(get_profile_session),
    settings: ProfilerSettings = Depends(get_settings),
) -> NominalChartData:
    """返回类别列 Top-N 计数。"""

    top_n = n or settings.nominal_top_n
    return await _guarded(
        "columns.chart.nominal",
        lambda: session.require_queries().get_nominal_chart_data(dataset, column, n=top_n),
    )


@router.get(
    "/api/datasets/{dataset}/columns/{column}/chart/quantitative",
    response_model=QuantChartData,
)
async def get_quantitative_chart(
    dataset: str,
    column: str,
    max_bins: Optional[int] = Query(default=None, ge=1),
    session: ProfileSession = Depends(get_profile_session),
    settings: ProfilerSettings = Depends(get_settings),
) -> QuantChartData:
    """返回数值列分箱计数。"""

    bins = max_bins or settings.quant_max_bins
    return await _guarded(
        "columns.chart.quantitative",
        lambda: session.require_queries().get_quant_binned_chart_data(dataset, column, max_bins=bins),
    )
