"""Build ordered ledger events for one symbol from raw trades and transfers."""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from .models import LedgerEvent, LedgerEventKind, Transaction, Transfer
from .numeric import finite
from .symbols import normalize_symbol, symbols_match

logger = logging.getLogger(__name__)

_BUY_SIDES = frozenset({"buy", "long"})
_SELL_SIDES = frozenset({"sell", "short"})


def _in_range(ts: int, from_ms: Optional[int], to_ms: Optional[int]) -> bool:
    if ts <= 0:
        return False
    if from_ms is not None and ts < from_ms:
        return False
    if to_ms is not None and ts > to_ms:
        return False
    return True


def _timestamp(value: object) -> int:
    return int(finite(value))


def _fee_usd(tx: Transaction) -> float:
    if tx.fee_usd is not None:
        return max(finite(tx.fee_usd), 0.0)
    return max(finite(tx.fee), 0.0)


def _trade_events(
    target: str,
    transactions: Iterable[Transaction],
    from_ms: Optional[int],
    to_ms: Optional[int],
) -> List[LedgerEvent]:
    events: List[LedgerEvent] = []
    for tx in transactions:
        ts = _timestamp(tx.timestamp)
        if not _in_range(ts, from_ms, to_ms):
            continue
        if not symbols_match(tx.symbol, target):
            continue

        side = tx.normalized_side()
        if side == "funding" or (tx.fee_type or "").lower() == "funding":
            continue
        if side in _BUY_SIDES:
            kind = LedgerEventKind.BUY
        elif side in _SELL_SIDES:
            kind = LedgerEventKind.SELL
        else:
            logger.debug("Skipping transaction %s with unknown side %r", tx.id, tx.side)
            continue

        quantity = finite(tx.amount)
        price = finite(tx.price)
        if quantity <= 0 or price <= 0:
            logger.debug("Skipping transaction %s with amount=%s price=%s", tx.id, tx.amount, tx.price)
            continue

        events.append(
            LedgerEvent(
                kind=kind,
                timestamp=ts,
                quantity=quantity,
                unit_price=price,
                fee_usd=_fee_usd(tx),
                source_id=tx.connection_id or tx.exchange,
                event_id=str(tx.id),
                symbol=target,
                estimated_basis=bool(tx.estimated_basis),
            )
        )
    return events


def _transfer_events(
    target: str,
    transfers: Iterable[Transfer],
    from_ms: Optional[int],
    to_ms: Optional[int],
    deposit_basis_price: float,
) -> List[LedgerEvent]:
    events: List[LedgerEvent] = []
    for transfer in transfers:
        ts = _timestamp(transfer.timestamp)
        if not _in_range(ts, from_ms, to_ms):
            continue
        if not symbols_match(transfer.resolved_symbol, target):
            continue
        quantity = finite(transfer.amount)
        if quantity <= 0:
            continue

        withdrawal = transfer.is_withdrawal
        events.append(
            LedgerEvent(
                kind=LedgerEventKind.WITHDRAWAL if withdrawal else LedgerEventKind.DEPOSIT,
                timestamp=ts,
                quantity=quantity,
                unit_price=deposit_basis_price,
                fee_usd=max(finite(transfer.fee_usd), 0.0),
                source_id=transfer.connection_id,
                event_id=str(transfer.id),
                symbol=target,
                estimated_basis=not withdrawal,
                internal=transfer.is_internal,
            )
        )
    return events


def build_ledger_events(
    symbol: str,
    transactions: Optional[Sequence[Transaction]],
    transfers: Optional[Sequence[Transfer]] = None,
    *,
    from_ms: Optional[int] = None,
    to_ms: Optional[int] = None,
    deposit_basis_price: float = 0.0,
) -> List[LedgerEvent]:
    """Return the time-ordered ledger events for ``symbol``.

    Trades become ``buy``/``sell`` events and transfers become
    ``deposit``/``withdrawal`` events. Deposits are valued at
    ``deposit_basis_price`` since their historical cost is unknown, and are
    flagged as estimated. When ``from_ms``/``to_ms`` are given only events
    inside the inclusive window are returned. Events sharing a timestamp keep
    their input order, trades ahead of transfers.
    """

    target = normalize_symbol(symbol)
    if not target:
        return []

    basis_price = max(finite(deposit_basis_price), 0.0)
    events = _trade_events(target, transactions or (), from_ms, to_ms)
    events.extend(_transfer_events(target, transfers or (), from_ms, to_ms, basis_price))
    # list.sort is stable, so ties keep input order.
    events.sort(key=lambda event: event.timestamp)
    return events


__all__ = ["build_ledger_events"]
