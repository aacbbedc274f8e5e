"""Per-asset and portfolio analytics built on the FIFO cost-basis engine."""
from __future__ import annotations

import math
import time
from typing import Mapping, Optional, Sequence

from .cost_basis import DEFAULT_DUST_THRESHOLD, compute_cost_basis_snapshot
from .ledger import build_ledger_events
from .models import (
    AssetAnalytics,
    DcaSignal,
    PortfolioAnalyticsSummary,
    PortfolioAsset,
    Transaction,
    Transfer,
)
from .numeric import finite, safe_div, safe_mul
from .symbols import normalize_symbol

MS_PER_DAY = 86_400_000

# Upper bounds (exclusive for the buy side, inclusive for the sell side) of
# price distance from the average buy price.
STRONG_BUY_BELOW = -0.30
BUY_BELOW = -0.10
HOLD_UP_TO = 0.25
TRIM_UP_TO = 0.50


def classify_dca_signal(price_distance: float, *, avg_buy_price: float, price: float) -> DcaSignal:
    """Map the distance between price and average cost to a DCA signal.

    Without a positive average cost and price there is nothing to compare, so
    the signal is HOLD whatever the distance.
    """

    if not (avg_buy_price > 0 and price > 0):
        return DcaSignal.HOLD
    if price_distance < STRONG_BUY_BELOW:
        return DcaSignal.STRONG_BUY
    if price_distance < BUY_BELOW:
        return DcaSignal.BUY
    if price_distance <= HOLD_UP_TO:
        return DcaSignal.HOLD
    if price_distance <= TRIM_UP_TO:
        return DcaSignal.TRIM
    return DcaSignal.SELL


def _current_value(asset: PortfolioAsset) -> float:
    if asset.value_usd is not None:
        return finite(asset.value_usd)
    return safe_mul(finite(asset.balance), finite(asset.price))


def _days_held(first_buy_date: int, now_ms: int) -> int:
    if first_buy_date <= 0:
        return 0
    return max(math.floor((now_ms - first_buy_date) / MS_PER_DAY), 0)


def calculate_asset_analytics(
    asset: PortfolioAsset,
    transactions: Optional[Sequence[Transaction]],
    *,
    transfers: Optional[Sequence[Transfer]] = None,
    from_ms: Optional[int] = None,
    to_ms: Optional[int] = None,
    deposit_basis_price: Optional[float] = None,
    now_ms: Optional[int] = None,
    dust: float = DEFAULT_DUST_THRESHOLD,
) -> AssetAnalytics:
    """Compute dashboard analytics for one holding.

    Position metrics (current average, cost basis, PnL) always come from the
    full history. The optional ``from_ms``/``to_ms`` window only scopes
    ``range_snapshot`` and ``avg_buy_price_range``. Deposits are valued at
    ``deposit_basis_price``, or at the current price when none is given.

    ``now_ms`` anchors ``days_held``; pass it explicitly for reproducible
    output, otherwise the wall clock is read.
    """

    price = max(finite(asset.price), 0.0)
    balance = finite(asset.balance)
    basis_price = finite(deposit_basis_price)
    if basis_price <= 0:
        basis_price = price

    full_events = build_ledger_events(
        asset.symbol,
        transactions,
        transfers,
        deposit_basis_price=basis_price,
    )
    snapshot = compute_cost_basis_snapshot(full_events, price, balance, dust=dust)

    if from_ms is None and to_ms is None:
        range_snapshot = snapshot
    else:
        range_events = build_ledger_events(
            asset.symbol,
            transactions,
            transfers,
            from_ms=from_ms,
            to_ms=to_ms,
            deposit_basis_price=basis_price,
        )
        range_snapshot = compute_cost_basis_snapshot(range_events, price, balance, dust=dust)

    avg_buy_price = snapshot.avg_buy_price_current
    unrealized_pnl = snapshot.unrealized_pnl
    unrealized_pnl_percent = finite(safe_div(unrealized_pnl, snapshot.cost_basis) * 100)

    # Wallet-only holdings have no trade history; approximate from the 24h move.
    current_value = _current_value(asset)
    if avg_buy_price == 0 and current_value > 0 and asset.price_change_24h is not None:
        pct = finite(asset.price_change_24h)
        unrealized_pnl = finite(safe_mul(current_value, pct) / (100 + pct)) if 100 + pct != 0 else 0.0
        unrealized_pnl_percent = pct

    price_distance = safe_div(price - avg_buy_price, avg_buy_price)
    if now_ms is None:
        now_ms = int(time.time() * 1000)

    return AssetAnalytics(
        symbol=asset.symbol,
        avg_buy_price=avg_buy_price,
        avg_buy_price_lifetime=snapshot.avg_buy_price_lifetime,
        avg_buy_price_range=range_snapshot.avg_buy_price_lifetime,
        avg_sell_price=snapshot.avg_sell_price,
        total_bought=snapshot.total_bought,
        total_cost=snapshot.total_cost,
        total_sold=snapshot.total_sold,
        total_proceeds=snapshot.total_proceeds,
        realized_pnl=snapshot.realized_pnl,
        unrealized_pnl=unrealized_pnl,
        unrealized_pnl_percent=unrealized_pnl_percent,
        days_held=_days_held(snapshot.first_buy_date, now_ms),
        first_buy_date=snapshot.first_buy_date,
        last_buy_date=snapshot.last_buy_date,
        last_sell_date=snapshot.last_sell_date,
        price_distance=price_distance,
        buy_count=snapshot.buy_count,
        sell_count=snapshot.sell_count,
        net_position=snapshot.net_position,
        cost_basis=snapshot.cost_basis,
        dca_signal=classify_dca_signal(price_distance, avg_buy_price=avg_buy_price, price=price),
        basis_confidence=snapshot.basis_confidence,
        total_fees_usd=snapshot.total_fees_usd,
        range_snapshot=range_snapshot,
    )


def _deposit_basis_for(asset: PortfolioAsset, prices: Optional[Mapping[str, float]]) -> Optional[float]:
    if not prices:
        return None
    upper = (asset.symbol or "").upper()
    if upper in prices:
        return prices[upper]
    return prices.get(normalize_symbol(asset.symbol))


def calculate_portfolio_analytics(
    assets: Sequence[PortfolioAsset],
    transactions: Optional[Sequence[Transaction]],
    *,
    transfers: Optional[Sequence[Transfer]] = None,
    from_ms: Optional[int] = None,
    to_ms: Optional[int] = None,
    deposit_basis_price_by_symbol: Optional[Mapping[str, float]] = None,
    now_ms: Optional[int] = None,
    dust: float = DEFAULT_DUST_THRESHOLD,
) -> PortfolioAnalyticsSummary:
    """Fold per-asset analytics into portfolio totals.

    The win rate is a coarse per-asset heuristic: every sell of an asset counts
    as a win when its average sell price beats its lifetime average buy price.
    It does not track individual trades.
    """

    if now_ms is None:
        now_ms = int(time.time() * 1000)

    per_asset: list[AssetAnalytics] = []
    total_cost_basis = 0.0
    total_realized = 0.0
    total_unrealized = 0.0
    total_fees = 0.0
    total_trades = 0
    winning_trades = 0

    for asset in assets:
        analytics = calculate_asset_analytics(
            asset,
            transactions,
            transfers=transfers,
            from_ms=from_ms,
            to_ms=to_ms,
            deposit_basis_price=_deposit_basis_for(asset, deposit_basis_price_by_symbol),
            now_ms=now_ms,
            dust=dust,
        )
        per_asset.append(analytics)
        total_cost_basis += analytics.cost_basis
        total_realized += analytics.realized_pnl
        total_unrealized += analytics.unrealized_pnl
        total_fees += analytics.total_fees_usd
        total_trades += analytics.buy_count + analytics.sell_count

        avg_buy = analytics.avg_buy_price_lifetime or analytics.avg_buy_price
        if analytics.sell_count > 0 and analytics.avg_sell_price > avg_buy:
            winning_trades += analytics.sell_count

    return PortfolioAnalyticsSummary(
        total_cost_basis=finite(total_cost_basis),
        total_realized_pnl=finite(total_realized),
        total_unrealized_pnl=finite(total_unrealized),
        total_trades=total_trades,
        win_rate=safe_div(winning_trades, total_trades) * 100,
        total_fees_usd=finite(total_fees),
        asset_count=len(per_asset),
        assets=tuple(per_asset),
    )


__all__ = [
    "MS_PER_DAY",
    "classify_dca_signal",
    "calculate_asset_analytics",
    "calculate_portfolio_analytics",
]
