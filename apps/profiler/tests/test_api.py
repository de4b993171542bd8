"""FastAPI 路由测试，使用脚本化内核通道替换真实会话。"""

from __future__ import annotations

import asyncio
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from apps.profiler.api.app import app
from apps.profiler.api.dependencies import get_catalog_store, get_profile_session
from apps.profiler.infra.clock import UtcClock
from apps.profiler.kernel import CodeBuilder
from apps.profiler.kernel.testing import ScriptedChannel, execute_result, stream
from apps.profiler.services.session import ProfileSession
from apps.profiler.settings import ProfilerSettings, get_settings
from apps.profiler.stores import DatasetCatalogStore

CODE = CodeBuilder()
SETTINGS = ProfilerSettings(execution_timeout=2.0, head_rows=2, nominal_top_n=2, quant_max_bins=2)


def _kernel() -> ScriptedChannel:
    channel = ScriptedChannel(name="python3")
    channel.respond(CODE.list_variables(), execute_result("['sales']"))
    channel.respond(CODE.classify_tabular(["sales"]), stream("True\n"))
    channel.respond(CODE.column_dtypes("sales"), stream("city     object\nprice    float64\ndtype: object\n"))
    channel.respond(CODE.shape("sales"), stream("(10, 2)\n"))
    channel.respond(CODE.column_head("sales", "city", 2), stream("0    Paris\n1     Oslo\nName: city, dtype: object\n"))
    channel.respond(CODE.quantitative_summary("sales", "price"), stream("12.5\n11.0\n0\n"))
    channel.respond(CODE.nominal_summary("sales", "city"), stream("3\n1\n"))
    channel.respond(CODE.value_counts_json("sales", "city", 2), stream('{"Paris":6,"Oslo":3}\n'))
    channel.respond(
        CODE.binned_counts_json("sales", "price", 2),
        stream('{"(-0.001, 10.0]":4,"(10.0, 20.0]":6}\n'),
    )
    # 形状输出缺少括号，用于验证解析失败映射。
    channel.respond(CODE.shape("broken"), stream("not a shape\n"))
    return channel


def _install(session: ProfileSession) -> None:
    app.dependency_overrides[get_profile_session] = lambda: session
    app.dependency_overrides[get_catalog_store] = lambda: session.store
    app.dependency_overrides[get_settings] = lambda: SETTINGS


@pytest.fixture()
def idle_client() -> Iterator[TestClient]:
    session = ProfileSession(store=DatasetCatalogStore(), settings=SETTINGS, clock=UtcClock())
    _install(session)
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture()
def client() -> Iterator[TestClient]:
    session = ProfileSession(store=DatasetCatalogStore(), settings=SETTINGS, clock=UtcClock())
    asyncio.run(session.connect(_kernel()))
    _install(session)
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


def test_unconnected_session_reports_not_ready(idle_client: TestClient) -> None:
    """未连接时状态接口可用，查询接口返回 503，目录接口返回 404。"""

    status = idle_client.get("/api/kernel/status")
    assert status.status_code == 200
    assert status.json() == {"ready": False, "name": None, "language": None}

    response = idle_client.get("/api/datasets/sales/shape")
    assert response.status_code == 503
    assert response.json()["detail"]["error_code"] == "SESSION_NOT_READY"

    assert idle_client.get("/api/datasets").status_code == 404


def test_status_and_catalog_after_connect(client: TestClient) -> None:
    """连接后返回内核信息与首次刷新的目录。"""

    status = client.get("/api/kernel/status").json()
    assert status == {"ready": True, "name": "python3", "language": "python"}

    catalog = client.get("/api/datasets").json()["catalog"]
    assert list(catalog["datasets"]) == ["sales"]
    assert catalog["datasets"]["sales"][1] == {"name": "price", "declared_type": "float64"}

    refreshed = client.post("/api/datasets/refresh")
    assert refreshed.status_code == 200
    assert list(refreshed.json()["catalog"]["datasets"]) == ["sales"]


def test_profile_routes_use_configured_defaults(client: TestClient) -> None:
    """未显式传参时使用配置中的默认行数与分箱数。"""

    assert client.get("/api/datasets/sales/shape").json() == {"dataset": "sales", "shape": [10.0, 2.0]}

    sample = client.get("/api/datasets/sales/columns/city/sample").json()
    assert sample["values"] == ["Paris", "Oslo"]

    quant = client.get("/api/datasets/sales/columns/price/summary/quantitative").json()
    assert quant == {"mean": "12.5", "median": "11.0", "null_count": "0"}

    nominal = client.get("/api/datasets/sales/columns/city/summary/nominal").json()
    assert nominal == {"unique_count": "3", "null_count": "1"}

    chart = client.get("/api/datasets/sales/columns/city/chart/nominal").json()
    assert chart["data"] == [{"value": "Paris", "count": 6}, {"value": "Oslo", "count": 3}]

    bins = client.get("/api/datasets/sales/columns/price/chart/quantitative").json()
    assert [item["count"] for item in bins["binned_data"]] == [4, 6]
    assert bins["bin_size"] == pytest.approx(10.001)


def test_profile_errors_map_to_status_codes(client: TestClient) -> None:
    """解析失败返回 422，执行失败返回 502。"""

    parse_failure = client.get("/api/datasets/broken/shape")
    assert parse_failure.status_code == 422
    assert parse_failure.json()["detail"]["error_code"] == "PARSE_ERROR"

    channel_failure = client.get("/api/datasets/missing/columns/x/summary/nominal")
    assert channel_failure.status_code == 502
    assert channel_failure.json()["detail"]["error_code"] == "CHANNEL_FAILURE"


def test_invalid_query_parameter_is_rejected(client: TestClient) -> None:
    """非正数的 n 被请求校验拒绝。"""

    assert client.get("/api/datasets/sales/columns/city/sample", params={"n": 0}).status_code == 422
