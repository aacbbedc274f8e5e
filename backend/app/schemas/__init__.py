"""Pydantic schema exports."""

from .analytics import (
    AssetAnalyticsRequest,
    AssetAnalyticsSchema,
    CostBasisRequest,
    CostBasisSnapshotSchema,
    DcaSignalSchema,
    LedgerEventSchema,
    LedgerEventsRequest,
    PortfolioAnalyticsRequest,
    PortfolioAnalyticsSchema,
    PortfolioAssetSchema,
    TransactionSchema,
    TransferSchema,
)

__all__ = [
    "AssetAnalyticsRequest",
    "AssetAnalyticsSchema",
    "CostBasisRequest",
    "CostBasisSnapshotSchema",
    "DcaSignalSchema",
    "LedgerEventSchema",
    "LedgerEventsRequest",
    "PortfolioAnalyticsRequest",
    "PortfolioAnalyticsSchema",
    "PortfolioAssetSchema",
    "TransactionSchema",
    "TransferSchema",
]
