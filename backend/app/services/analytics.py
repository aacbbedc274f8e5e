"""Service glue between the HTTP schemas and the ledger analytics core."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any

from app.config import AppSettings
from app.core.telemetry import get_instruments, get_tracer
from app.schemas.analytics import (
    AssetAnalyticsRequest,
    AssetAnalyticsSchema,
    CostBasisRequest,
    CostBasisSnapshotSchema,
    LedgerEventSchema,
    LedgerEventsRequest,
    PortfolioAnalyticsRequest,
    PortfolioAnalyticsSchema,
)
from ledger_analytics import (
    AssetAnalytics,
    BasisConfidence,
    build_ledger_events,
    calculate_asset_analytics,
    calculate_portfolio_analytics,
    compute_cost_basis_snapshot,
)

logger = logging.getLogger(__name__)


def _asset_payload(analytics: AssetAnalytics) -> dict[str, Any]:
    payload = asdict(analytics)
    payload["dca_signal"] = {"signal": analytics.dca_signal, "text": analytics.dca_signal.label}
    return payload


def _record_asset(analytics: AssetAnalytics, operation: str) -> None:
    instruments = get_instruments()
    instruments.dca_signals.add(1, {"ledger.dca_signal": analytics.dca_signal.value})
    if analytics.basis_confidence is BasisConfidence.ESTIMATED:
        instruments.estimated_snapshots.add(1, {"ledger.operation": operation})


def ledger_events(request: LedgerEventsRequest, settings: AppSettings) -> list[LedgerEventSchema]:
    with get_tracer(__name__).start_as_current_span("ledger.build_events") as span:
        span.set_attribute("ledger.symbol", request.symbol)
        events = build_ledger_events(
            request.symbol,
            [tx.to_domain() for tx in request.transactions],
            [tr.to_domain() for tr in request.transfers],
            from_ms=request.from_ms,
            to_ms=request.to_ms,
            deposit_basis_price=request.deposit_basis_price or 0.0,
        )
        span.set_attribute("ledger.event_count", len(events))
    get_instruments().events_replayed.record(len(events), {"ledger.operation": "build_events"})
    logger.debug("Built %d ledger events for %s", len(events), request.symbol)
    return [LedgerEventSchema.model_validate(event) for event in events]


def cost_basis(request: CostBasisRequest, settings: AppSettings) -> CostBasisSnapshotSchema:
    with get_tracer(__name__).start_as_current_span("ledger.cost_basis") as span:
        span.set_attribute("ledger.event_count", len(request.events))
        snapshot = compute_cost_basis_snapshot(
            [event.to_domain() for event in request.events],
            request.current_price,
            request.current_balance,
            dust=settings.lot_dust_threshold,
        )
        span.set_attribute("ledger.basis_confidence", snapshot.basis_confidence.value)

    instruments = get_instruments()
    instruments.events_replayed.record(len(request.events), {"ledger.operation": "cost_basis"})
    if snapshot.basis_confidence is BasisConfidence.ESTIMATED:
        instruments.estimated_snapshots.add(1, {"ledger.operation": "cost_basis"})
    return CostBasisSnapshotSchema.model_validate(snapshot)


def asset_analytics(request: AssetAnalyticsRequest, settings: AppSettings) -> AssetAnalyticsSchema:
    with get_tracer(__name__).start_as_current_span("ledger.asset_analytics") as span:
        span.set_attribute("ledger.symbol", request.asset.symbol)
        span.set_attribute("ledger.transaction_count", len(request.transactions))
        span.set_attribute("ledger.transfer_count", len(request.transfers))
        analytics = calculate_asset_analytics(
            request.asset.to_domain(),
            [tx.to_domain() for tx in request.transactions],
            transfers=[tr.to_domain() for tr in request.transfers],
            from_ms=request.from_ms,
            to_ms=request.to_ms,
            deposit_basis_price=request.deposit_basis_price,
            now_ms=request.now_ms,
            dust=settings.lot_dust_threshold,
        )
        span.set_attribute("ledger.dca_signal", analytics.dca_signal.value)
    _record_asset(analytics, "asset_analytics")
    return AssetAnalyticsSchema.model_validate(_asset_payload(analytics))


def portfolio_analytics(request: PortfolioAnalyticsRequest, settings: AppSettings) -> PortfolioAnalyticsSchema:
    basis_by_symbol = {symbol.upper(): price for symbol, price in request.deposit_basis_price_by_symbol.items()}

    with get_tracer(__name__).start_as_current_span("ledger.portfolio_analytics") as span:
        span.set_attribute("ledger.asset_count", len(request.assets))
        span.set_attribute("ledger.transaction_count", len(request.transactions))
        summary = calculate_portfolio_analytics(
            [asset.to_domain() for asset in request.assets],
            [tx.to_domain() for tx in request.transactions],
            transfers=[tr.to_domain() for tr in request.transfers],
            from_ms=request.from_ms,
            to_ms=request.to_ms,
            deposit_basis_price_by_symbol=basis_by_symbol,
            now_ms=request.now_ms,
            dust=settings.lot_dust_threshold,
        )
        span.set_attribute("ledger.total_trades", summary.total_trades)
    for item in summary.assets:
        _record_asset(item, "portfolio_analytics")
    logger.info(
        "Computed portfolio analytics for %d assets (%d trades)",
        summary.asset_count,
        summary.total_trades,
    )
    return PortfolioAnalyticsSchema(
        total_cost_basis=summary.total_cost_basis,
        total_realized_pnl=summary.total_realized_pnl,
        total_unrealized_pnl=summary.total_unrealized_pnl,
        total_trades=summary.total_trades,
        win_rate=summary.win_rate,
        total_fees_usd=summary.total_fees_usd,
        asset_count=summary.asset_count,
        assets=[AssetAnalyticsSchema.model_validate(_asset_payload(item)) for item in summary.assets],
    )


__all__ = ["ledger_events", "cost_basis", "asset_analytics", "portfolio_analytics"]
