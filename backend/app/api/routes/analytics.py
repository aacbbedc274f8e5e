"""Ledger and cost-basis analytics endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.config import AppSettings, get_settings
from app.schemas import (
    AssetAnalyticsRequest,
    AssetAnalyticsSchema,
    CostBasisRequest,
    CostBasisSnapshotSchema,
    LedgerEventSchema,
    LedgerEventsRequest,
    PortfolioAnalyticsRequest,
    PortfolioAnalyticsSchema,
)
from app.services import analytics as analytics_service

router = APIRouter()


@router.post("/ledger-events", response_model=list[LedgerEventSchema])
async def post_ledger_events(
    payload: LedgerEventsRequest,
    settings: AppSettings = Depends(get_settings),
) -> list[LedgerEventSchema]:
    """Normalize trades and transfers for one symbol into ordered ledger events."""

    return analytics_service.ledger_events(payload, settings)


@router.post("/cost-basis", response_model=CostBasisSnapshotSchema)
async def post_cost_basis(
    payload: CostBasisRequest,
    settings: AppSettings = Depends(get_settings),
) -> CostBasisSnapshotSchema:
    """Replay ledger events through the FIFO engine."""

    return analytics_service.cost_basis(payload, settings)


@router.post("/asset", response_model=AssetAnalyticsSchema)
async def post_asset_analytics(
    payload: AssetAnalyticsRequest,
    settings: AppSettings = Depends(get_settings),
) -> AssetAnalyticsSchema:
    return analytics_service.asset_analytics(payload, settings)


@router.post("/portfolio", response_model=PortfolioAnalyticsSchema)
async def post_portfolio_analytics(
    payload: PortfolioAnalyticsRequest,
    settings: AppSettings = Depends(get_settings),
) -> PortfolioAnalyticsSchema:
    return analytics_service.portfolio_analytics(payload, settings)


__all__ = ["router"]
