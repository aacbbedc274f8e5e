"""Pydantic schemas for the ledger analytics endpoints."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from ledger_analytics import (
    BasisConfidence,
    DcaSignal,
    LedgerEvent,
    LedgerEventKind,
    PortfolioAsset,
    Transaction,
    Transfer,
)
from ledger_analytics.numeric import finite


class CamelModel(BaseModel):
    """Base model accepting both snake_case and the dashboard's camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class TransactionSchema(CamelModel):
    id: str | int = ""
    symbol: str = ""
    side: str = ""
    price: Optional[float] = None
    amount: Optional[float] = None
    timestamp: Optional[float] = None
    exchange: Optional[str] = None
    connection_id: Optional[str] = None
    fee: Optional[float] = None
    fee_usd: Optional[float] = None
    fee_currency: Optional[str] = None
    fee_type: Optional[str] = None
    estimated_basis: bool = False

    def to_domain(self) -> Transaction:
        return Transaction(
            id=str(self.id),
            symbol=self.symbol,
            side=self.side,
            price=self.price,
            amount=self.amount,
            timestamp=int(finite(self.timestamp)),
            exchange=self.exchange,
            connection_id=self.connection_id,
            fee=self.fee,
            fee_usd=self.fee_usd,
            fee_currency=self.fee_currency,
            fee_type=self.fee_type,
            estimated_basis=self.estimated_basis,
        )


class TransferSchema(CamelModel):
    id: str | int = ""
    type: str = Field(default="Deposit", examples=["Deposit", "Withdraw"])
    asset: Optional[str] = None
    symbol: Optional[str] = None
    amount: Optional[float] = None
    timestamp: Optional[float] = None
    status: Optional[str] = None
    connection_id: Optional[str] = None
    fee_usd: Optional[float] = None
    is_internal_transfer: bool = False

    def to_domain(self) -> Transfer:
        return Transfer(
            id=str(self.id),
            type=self.type,
            amount=self.amount,
            timestamp=int(finite(self.timestamp)),
            asset=self.asset,
            symbol=self.symbol,
            status=self.status,
            connection_id=self.connection_id,
            fee_usd=self.fee_usd,
            is_internal_transfer=self.is_internal_transfer,
        )


class PortfolioAssetSchema(CamelModel):
    symbol: str = Field(..., examples=["BTC"])
    balance: float = 0.0
    value_usd: Optional[float] = None
    price: Optional[float] = None
    price_change_24h: Optional[float] = None
    name: Optional[str] = None

    def to_domain(self) -> PortfolioAsset:
        return PortfolioAsset(
            symbol=self.symbol,
            balance=self.balance,
            value_usd=self.value_usd,
            price=self.price,
            price_change_24h=self.price_change_24h,
            name=self.name,
        )


class LedgerEventSchema(CamelModel):
    kind: LedgerEventKind
    timestamp: int
    quantity: float
    unit_price: float = 0.0
    fee_usd: float = 0.0
    source_id: Optional[str] = None
    event_id: Optional[str] = None
    symbol: str = ""
    estimated_basis: bool = False
    internal: bool = False

    def to_domain(self) -> LedgerEvent:
        return LedgerEvent(
            kind=self.kind,
            timestamp=self.timestamp,
            quantity=self.quantity,
            unit_price=self.unit_price,
            fee_usd=self.fee_usd,
            source_id=self.source_id,
            event_id=self.event_id,
            symbol=self.symbol,
            estimated_basis=self.estimated_basis,
            internal=self.internal,
        )


class _RangeRequest(CamelModel):
    from_ms: Optional[int] = Field(default=None, ge=0)
    to_ms: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _check_range(self) -> "_RangeRequest":
        if self.from_ms is not None and self.to_ms is not None and self.from_ms > self.to_ms:
            raise ValueError("fromMs cannot be after toMs")
        return self


class LedgerEventsRequest(_RangeRequest):
    symbol: str = Field(..., min_length=1, examples=["BTC"])
    transactions: list[TransactionSchema] = Field(default_factory=list)
    transfers: list[TransferSchema] = Field(default_factory=list)
    deposit_basis_price: Optional[float] = None


class CostBasisRequest(CamelModel):
    events: list[LedgerEventSchema] = Field(default_factory=list)
    current_price: float = 0.0
    current_balance: float = 0.0


class AssetAnalyticsRequest(_RangeRequest):
    asset: PortfolioAssetSchema
    transactions: list[TransactionSchema] = Field(default_factory=list)
    transfers: list[TransferSchema] = Field(default_factory=list)
    deposit_basis_price: Optional[float] = None
    now_ms: Optional[int] = None


class PortfolioAnalyticsRequest(_RangeRequest):
    assets: list[PortfolioAssetSchema] = Field(default_factory=list)
    transactions: list[TransactionSchema] = Field(default_factory=list)
    transfers: list[TransferSchema] = Field(default_factory=list)
    deposit_basis_price_by_symbol: dict[str, float] = Field(default_factory=dict)
    now_ms: Optional[int] = None


class CostBasisSnapshotSchema(CamelModel):
    avg_buy_price_current: float
    avg_buy_price_lifetime: float
    avg_sell_price: float
    total_bought: float
    total_sold: float
    total_cost: float
    total_proceeds: float
    realized_pnl: float
    cost_basis: float
    unrealized_pnl: float
    net_position: float
    first_buy_date: int
    last_buy_date: int
    last_sell_date: int
    buy_count: int
    sell_count: int
    basis_confidence: BasisConfidence
    total_fees_usd: float
    deposit_count: int
    withdrawal_count: int
    open_lot_count: int
    unmatched_sell_quantity: float


class DcaSignalSchema(CamelModel):
    signal: DcaSignal
    text: str


class AssetAnalyticsSchema(CamelModel):
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
    dca_signal: DcaSignalSchema
    basis_confidence: BasisConfidence
    total_fees_usd: float
    range_snapshot: CostBasisSnapshotSchema


class PortfolioAnalyticsSchema(CamelModel):
    total_cost_basis: float
    total_realized_pnl: float
    total_unrealized_pnl: float
    total_trades: int
    win_rate: float
    total_fees_usd: float
    asset_count: int
    assets: list[AssetAnalyticsSchema]


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
