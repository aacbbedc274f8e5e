"""Domain models used by the ledger analytics engine."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class LedgerEventKind(str, Enum):
    BUY = "buy"
    SELL = "sell"
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"

    @property
    def is_acquisition(self) -> bool:
        return self in (LedgerEventKind.BUY, LedgerEventKind.DEPOSIT)


class BasisConfidence(str, Enum):
    EXACT = "exact"
    ESTIMATED = "estimated"


class DcaSignal(str, Enum):
    STRONG_BUY = "STRONG_BUY"
    BUY = "BUY"
    HOLD = "HOLD"
    TRIM = "TRIM"
    SELL = "SELL"

    @property
    def label(self) -> str:
        return _DCA_LABELS[self]


_DCA_LABELS = {
    DcaSignal.STRONG_BUY: "Strong Buy",
    DcaSignal.BUY: "Buy Zone",
    DcaSignal.HOLD: "Hold",
    DcaSignal.TRIM: "Trim",
    DcaSignal.SELL: "Take Profit",
}


@dataclass(frozen=True)
class Transaction:
    """A trade fill reported by an exchange or wallet connector."""

    id: str
    symbol: str
    side: str
    price: Optional[float]
    amount: Optional[float]
    timestamp: Optional[int]
    exchange: Optional[str] = None
    connection_id: Optional[str] = None
    fee: Optional[float] = None
    fee_usd: Optional[float] = None
    fee_currency: Optional[str] = None
    fee_type: Optional[str] = None
    estimated_basis: bool = False

    def normalized_side(self) -> str:
        """Return the lower-cased side for consistent comparisons."""

        return (self.side or "").strip().lower()


@dataclass(frozen=True)
class Transfer:
    """A deposit or withdrawal of an asset into or out of a tracked account."""

    id: str
    type: str
    amount: Optional[float]
    timestamp: Optional[int]
    asset: Optional[str] = None
    symbol: Optional[str] = None
    status: Optional[str] = None
    connection_id: Optional[str] = None
    fee_usd: Optional[float] = None
    is_internal_transfer: bool = False

    @property
    def resolved_symbol(self) -> str:
        return self.symbol or self.asset or ""

    @property
    def is_withdrawal(self) -> bool:
        return "with" in (self.type or "").lower()

    @property
    def is_internal(self) -> bool:
        return self.is_internal_transfer or (self.type or "").strip().lower() == "internal"


@dataclass(frozen=True)
class PortfolioAsset:
    """Live holding of one asset as reported by the portfolio snapshot."""

    symbol: str
    balance: float = 0.0
    value_usd: Optional[float] = None
    price: Optional[float] = None
    price_change_24h: Optional[float] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class LedgerEvent:
    """A normalized, single-symbol movement consumed by the cost-basis engine."""

    kind: LedgerEventKind
    timestamp: int
    quantity: float
    unit_price: float
    fee_usd: float = 0.0
    source_id: Optional[str] = None
    event_id: Optional[str] = None
    symbol: str = ""
    estimated_basis: bool = False
    internal: bool = False


@dataclass(frozen=True)
class CostBasisSnapshot:
    """FIFO accounting state for one symbol after replaying its events."""

    avg_buy_price_current: float = 0.0
    avg_buy_price_lifetime: float = 0.0
    avg_sell_price: float = 0.0
    total_bought: float = 0.0
    total_sold: float = 0.0
    total_cost: float = 0.0
    total_proceeds: float = 0.0
    realized_pnl: float = 0.0
    cost_basis: float = 0.0
    unrealized_pnl: float = 0.0
    net_position: float = 0.0
    first_buy_date: int = 0
    last_buy_date: int = 0
    last_sell_date: int = 0
    buy_count: int = 0
    sell_count: int = 0
    basis_confidence: BasisConfidence = BasisConfidence.EXACT
    total_fees_usd: float = 0.0
    deposit_count: int = 0
    withdrawal_count: int = 0
    open_lot_count: int = 0
    unmatched_sell_quantity: float = 0.0


@dataclass(frozen=True)
class AssetAnalytics:
    """Per-asset dashboard metrics derived from the full and range snapshots."""

    symbol: str
    avg_buy_price: float
    avg_buy_price_lifetime: float
    avg_buy_price_range: float
    avg_sell_price: float
    total_bought: float
    total_cost: float
    total_sold: float
    total_proceeds: float
    realized_pnl: float
    unrealized_pnl: float
    unrealized_pnl_percent: float
    days_held: int
    first_buy_date: int
    last_buy_date: int
    last_sell_date: int
    price_distance: float
    buy_count: int
    sell_count: int
    net_position: float
    cost_basis: float
    dca_signal: DcaSignal
    basis_confidence: BasisConfidence
    total_fees_usd: float
    range_snapshot: CostBasisSnapshot = field(default_factory=CostBasisSnapshot)


@dataclass(frozen=True)
class PortfolioAnalyticsSummary:
    """Portfolio-wide totals folded from per-asset analytics."""

    total_cost_basis: float = 0.0
    total_realized_pnl: float = 0.0
    total_unrealized_pnl: float = 0.0
    total_trades: int = 0
    win_rate: float = 0.0
    total_fees_usd: float = 0.0
    asset_count: int = 0
    assets: tuple[AssetAnalytics, ...] = ()
