"""Core package for the ledger analytics engine."""

from .analytics import calculate_asset_analytics, calculate_portfolio_analytics, classify_dca_signal
from .cost_basis import compute_cost_basis_snapshot
from .ledger import build_ledger_events
from .models import (
    AssetAnalytics,
    BasisConfidence,
    CostBasisSnapshot,
    DcaSignal,
    LedgerEvent,
    LedgerEventKind,
    PortfolioAnalyticsSummary,
    PortfolioAsset,
    Transaction,
    Transfer,
)
from .symbols import normalize_symbol

__all__ = [
    "AssetAnalytics",
    "BasisConfidence",
    "CostBasisSnapshot",
    "DcaSignal",
    "LedgerEvent",
    "LedgerEventKind",
    "PortfolioAnalyticsSummary",
    "PortfolioAsset",
    "Transaction",
    "Transfer",
    "build_ledger_events",
    "compute_cost_basis_snapshot",
    "calculate_asset_analytics",
    "calculate_portfolio_analytics",
    "classify_dca_signal",
    "normalize_symbol",
]
