"""Telemetry wiring tests."""

from __future__ import annotations

from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from opentelemetry.sdk.metrics.export import InMemoryMetricReader
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from app.api.routes.analytics import router as analytics_router
from app.config import AppSettings
from app.core.telemetry import setup_telemetry, shutdown_telemetry


def _settings(**overrides) -> AppSettings:
    return AppSettings(_env_file=None, **overrides)


def _app() -> FastAPI:
    app = FastAPI()
    app.include_router(analytics_router, prefix="/analytics", tags=["analytics"])
    return app


def _data_points(reader: InMemoryMetricReader) -> dict:
    points: dict = {}
    data = reader.get_metrics_data()
    for resource_metrics in data.resource_metrics:
        for scope_metrics in resource_metrics.scope_metrics:
            for metric in scope_metrics.metrics:
                points.setdefault(metric.name, []).extend(metric.data.data_points)
    return points


def test_disabled_telemetry_is_a_no_op():
    assert setup_telemetry(_app(), _settings(telemetry_enabled=False)) is False


async def test_enabled_telemetry_records_spans_and_ledger_metrics():
    settings = _settings(
        telemetry_enabled=True,
        telemetry_logs_enabled=False,
        telemetry_service_name="ledger-analytics-test",
    )
    app = _app()
    span_exporter = InMemorySpanExporter()
    reader = InMemoryMetricReader()
    assert setup_telemetry(app, settings, span_exporter=span_exporter, metric_reader=reader) is True

    cost_basis_payload = {
        "events": [
            {"kind": "buy", "timestamp": 1, "quantity": 1, "unitPrice": 10.0},
            {"kind": "deposit", "timestamp": 2, "quantity": 1, "unitPrice": 50.0},
            {"kind": "sell", "timestamp": 3, "quantity": 1, "unitPrice": 30.0},
        ],
        "currentPrice": 60.0,
        "currentBalance": 1,
    }
    asset_payload = {
        "asset": {"symbol": "BTC", "balance": 1, "price": 30.0},
        "transactions": [
            {"id": "1", "symbol": "BTCUSDT", "side": "buy", "price": 20.0, "amount": 1, "timestamp": 1_000},
        ],
        "nowMs": 2_000,
    }
    try:
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            assert (await client.post("/analytics/cost-basis", json=cost_basis_payload)).status_code == 200
            assert (await client.post("/analytics/asset", json=asset_payload)).status_code == 200
        points = _data_points(reader)
    finally:
        shutdown_telemetry()

    replayed = [p for p in points["ledger.events"] if p.attributes.get("ledger.operation") == "cost_basis"]
    assert len(replayed) == 1
    assert replayed[0].count == 1
    assert replayed[0].sum == 3

    estimated = points["ledger.basis.estimated"]
    assert [(p.attributes["ledger.operation"], p.value) for p in estimated] == [("cost_basis", 1)]

    signals = {p.attributes["ledger.dca_signal"]: p.value for p in points["ledger.dca.signals"]}
    assert signals == {"TRIM": 1}

    spans = {span.name: span for span in span_exporter.get_finished_spans()}
    assert "ledger.cost_basis" in spans
    asset_span = spans["ledger.asset_analytics"]
    assert asset_span.attributes["ledger.symbol"] == "BTC"
    assert asset_span.attributes["ledger.dca_signal"] == "TRIM"
    assert asset_span.parent is not None
    assert asset_span.resource.attributes["service.name"] == "ledger-analytics-test"
