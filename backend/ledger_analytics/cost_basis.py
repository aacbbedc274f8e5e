"""FIFO cost-basis engine turning ledger events into an accounting snapshot."""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterable, Tuple

from .models import BasisConfidence, CostBasisSnapshot, LedgerEvent, LedgerEventKind
from .numeric import finite, safe_div, safe_mul

logger = logging.getLogger(__name__)

DEFAULT_DUST_THRESHOLD = 1e-12


@dataclass
class _Lot:
    """Internal representation of an open lot."""

    quantity_remaining: float
    unit_cost: float
    acquired_at: int
    estimated: bool = False

    @property
    def cost_total(self) -> float:
        return safe_mul(self.quantity_remaining, self.unit_cost)


def _consume_lots(lots: Deque[_Lot], quantity: float, dust: float) -> Tuple[float, float]:
    """Remove ``quantity`` from the oldest lots.

    Returns the acquisition cost consumed and the quantity left unmatched when
    the queue runs dry.
    """

    remaining = quantity
    consumed_cost = 0.0
    while remaining > dust and lots:
        lot = lots[0]
        take = min(remaining, lot.quantity_remaining)
        consumed_cost += safe_mul(take, lot.unit_cost)
        lot.quantity_remaining -= take
        remaining -= take
        if lot.quantity_remaining <= dust:
            lots.popleft()
    return consumed_cost, (remaining if remaining > dust else 0.0)


def compute_cost_basis_snapshot(
    events: Iterable[LedgerEvent],
    current_price: float,
    current_balance: float,
    *,
    dust: float = DEFAULT_DUST_THRESHOLD,
) -> CostBasisSnapshot:
    """Replay ``events`` through a FIFO lot queue and summarise the result.

    Buys and deposits open lots; sells and withdrawals close them oldest first.
    Only sells realize PnL, against the cost of the lots they consume, and the
    part of a sell not covered by any lot is realized at zero cost. Fees on any
    event reduce realized PnL. Valuation uses the externally supplied
    ``current_balance`` while cost basis comes from the remaining lots, so the
    two can disagree when the history is incomplete.
    """

    lots: Deque[_Lot] = deque()
    total_bought = 0.0
    total_cost = 0.0
    total_sold = 0.0
    sold_by_trades = 0.0
    total_proceeds = 0.0
    realized_pnl = 0.0
    total_fees = 0.0
    unmatched_sell = 0.0
    buy_count = sell_count = deposit_count = withdrawal_count = 0
    first_buy_date = last_buy_date = last_sell_date = 0

    for event in events:
        quantity = finite(event.quantity)
        if quantity <= 0:
            continue
        price = max(finite(event.unit_price), 0.0)
        kind = LedgerEventKind(event.kind)
        if kind in (LedgerEventKind.BUY, LedgerEventKind.SELL) and price <= 0:
            logger.debug("Ignoring %s event %s without a trade price", kind.value, event.event_id)
            continue

        fee = max(finite(event.fee_usd), 0.0)
        total_fees += fee
        realized_pnl -= fee
        ts = int(finite(event.timestamp))

        if kind.is_acquisition:
            lots.append(
                _Lot(
                    quantity_remaining=quantity,
                    unit_cost=price,
                    acquired_at=ts,
                    estimated=kind is LedgerEventKind.DEPOSIT or bool(event.estimated_basis),
                )
            )
            total_bought += quantity
            total_cost += safe_mul(quantity, price)
            if kind is LedgerEventKind.BUY:
                buy_count += 1
                if not first_buy_date or ts < first_buy_date:
                    first_buy_date = ts
                last_buy_date = max(last_buy_date, ts)
            else:
                deposit_count += 1
            continue

        consumed_cost, unmatched = _consume_lots(lots, quantity, dust)
        total_sold += quantity
        last_sell_date = max(last_sell_date, ts)
        if kind is LedgerEventKind.SELL:
            proceeds = safe_mul(quantity, price)
            realized_pnl += proceeds - consumed_cost
            total_proceeds += proceeds
            sold_by_trades += quantity
            sell_count += 1
            if unmatched:
                unmatched_sell += unmatched
                logger.warning(
                    "Sell %s of %s exceeds open lots by %s; realizing it at zero cost",
                    event.event_id,
                    event.symbol or "?",
                    unmatched,
                )
        else:
            withdrawal_count += 1

    # Accumulators can still overflow when finite terms are summed.
    net_position = finite(sum(lot.quantity_remaining for lot in lots))
    cost_basis = finite(sum(lot.cost_total for lot in lots))
    total_bought = finite(total_bought)
    total_sold = finite(total_sold)
    total_cost = finite(total_cost)
    total_proceeds = finite(total_proceeds)
    realized_pnl = finite(realized_pnl)
    total_fees = finite(total_fees)
    estimated = unmatched_sell > 0 or any(lot.estimated for lot in lots)
    market_value = safe_mul(finite(current_balance), finite(current_price))

    return CostBasisSnapshot(
        avg_buy_price_current=safe_div(cost_basis, net_position),
        avg_buy_price_lifetime=safe_div(total_cost, total_bought),
        avg_sell_price=safe_div(total_proceeds, sold_by_trades),
        total_bought=total_bought,
        total_sold=total_sold,
        total_cost=total_cost,
        total_proceeds=total_proceeds,
        realized_pnl=realized_pnl,
        cost_basis=cost_basis,
        unrealized_pnl=finite(market_value - cost_basis),
        net_position=net_position,
        first_buy_date=first_buy_date,
        last_buy_date=last_buy_date,
        last_sell_date=last_sell_date,
        buy_count=buy_count,
        sell_count=sell_count,
        basis_confidence=BasisConfidence.ESTIMATED if estimated else BasisConfidence.EXACT,
        total_fees_usd=total_fees,
        deposit_count=deposit_count,
        withdrawal_count=withdrawal_count,
        open_lot_count=len(lots),
        unmatched_sell_quantity=finite(unmatched_sell),
    )


__all__ = ["DEFAULT_DUST_THRESHOLD", "compute_cost_basis_snapshot"]
