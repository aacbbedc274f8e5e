"""Asset analytics façade tests."""

from __future__ import annotations

import math
from datetime import datetime, timezone

import pytest

from ledger_analytics import (
    BasisConfidence,
    DcaSignal,
    PortfolioAsset,
    Transaction,
    Transfer,
    calculate_asset_analytics,
    classify_dca_signal,
)
from ledger_analytics.analytics import MS_PER_DAY


def _ms(year: int, month: int, day: int) -> int:
    return int(datetime(year, month, day, tzinfo=timezone.utc).timestamp() * 1000)


NOW = _ms(2025, 6, 30)


def _buy(id, price, amount, timestamp, symbol="BTC"):
    return Transaction(id=id, symbol=symbol, side="buy", price=price, amount=amount, timestamp=timestamp)


def _sell(id, price, amount, timestamp, symbol="BTC"):
    return Transaction(id=id, symbol=symbol, side="sell", price=price, amount=amount, timestamp=timestamp)


def test_no_history_uses_24h_change_fallback():
    asset = PortfolioAsset(symbol="BTC", balance=2, value_usd=100.0, price=50.0, price_change_24h=10.0)
    analytics = calculate_asset_analytics(asset, [], now_ms=NOW)
    assert analytics.avg_buy_price == 0
    assert analytics.unrealized_pnl_percent == pytest.approx(10.0)
    assert analytics.unrealized_pnl == pytest.approx(100.0 * 10 / 110)
    assert analytics.dca_signal is DcaSignal.HOLD
    assert analytics.price_distance == 0
    assert analytics.days_held == 0


def test_no_history_without_24h_change_has_zero_percent():
    asset = PortfolioAsset(symbol="BTC", balance=2, value_usd=100.0, price=50.0)
    analytics = calculate_asset_analytics(asset, [], now_ms=NOW)
    assert analytics.avg_buy_price == 0
    assert analytics.unrealized_pnl_percent == 0


def test_fallback_guards_full_wipeout_change():
    asset = PortfolioAsset(symbol="BTC", balance=1, value_usd=5.0, price=5.0, price_change_24h=-100.0)
    analytics = calculate_asset_analytics(asset, None, now_ms=NOW)
    assert analytics.unrealized_pnl == 0
    assert analytics.unrealized_pnl_percent == pytest.approx(-100.0)


def test_fallback_uses_balance_times_price_without_value():
    asset = PortfolioAsset(symbol="ETH", balance=4, price=25.0, price_change_24h=25.0)
    analytics = calculate_asset_analytics(asset, [], now_ms=NOW)
    assert analytics.unrealized_pnl == pytest.approx(100.0 * 25 / 125)


def test_lifetime_and_range_averages_are_independent():
    transactions = [
        _buy("last-year", 100.0, 1, _ms(2024, 6, 10)),
        _buy("this-month", 200.0, 1, _ms(2025, 6, 10)),
    ]
    asset = PortfolioAsset(symbol="BTC", balance=2, value_usd=500.0, price=250.0)
    analytics = calculate_asset_analytics(
        asset,
        transactions,
        from_ms=_ms(2025, 6, 1),
        to_ms=_ms(2025, 6, 30),
        now_ms=NOW,
    )
    assert analytics.avg_buy_price_lifetime == pytest.approx(150.0)
    assert analytics.avg_buy_price_range == pytest.approx(200.0)
    assert analytics.avg_buy_price == pytest.approx(150.0)
    assert analytics.range_snapshot.buy_count == 1
    assert analytics.buy_count == 2


def test_unranged_call_reuses_full_snapshot_for_range_fields():
    asset = PortfolioAsset(symbol="BTC", balance=1, price=120.0)
    analytics = calculate_asset_analytics(asset, [_buy("a", 100.0, 1, _ms(2025, 1, 1))], now_ms=NOW)
    assert analytics.avg_buy_price_range == analytics.avg_buy_price_lifetime == pytest.approx(100.0)
    assert analytics.range_snapshot.cost_basis == analytics.cost_basis


def test_deposit_uses_supplied_basis_price():
    transfers = [Transfer(id="d", type="Deposit", asset="SOL", amount=2, timestamp=_ms(2025, 3, 1))]
    asset = PortfolioAsset(symbol="SOL", balance=2, price=80.0)
    analytics = calculate_asset_analytics(asset, [], transfers=transfers, deposit_basis_price=50.0, now_ms=NOW)
    assert analytics.cost_basis == pytest.approx(100.0)
    assert analytics.avg_buy_price == pytest.approx(50.0)
    assert analytics.basis_confidence is BasisConfidence.ESTIMATED
    assert analytics.unrealized_pnl == pytest.approx(160.0 - 100.0)


def test_deposit_basis_defaults_to_current_price():
    transfers = [Transfer(id="d", type="Deposit", asset="SOL", amount=2, timestamp=_ms(2025, 3, 1))]
    asset = PortfolioAsset(symbol="SOL", balance=2, price=80.0)
    for basis in (None, 0, -5):
        analytics = calculate_asset_analytics(asset, [], transfers=transfers, deposit_basis_price=basis, now_ms=NOW)
        assert analytics.avg_buy_price == pytest.approx(80.0)
        assert analytics.unrealized_pnl == pytest.approx(0.0)


def test_identical_inputs_produce_identical_output():
    transactions = [
        _buy("a", 100.0, 1, _ms(2025, 1, 1)),
        _sell("b", 140.0, 0.5, _ms(2025, 2, 1)),
    ]
    transfers = [Transfer(id="d", type="Deposit", asset="BTC", amount=0.25, timestamp=_ms(2025, 3, 1))]
    asset = PortfolioAsset(symbol="BTC", balance=0.75, price=130.0, price_change_24h=2.0)
    first = calculate_asset_analytics(asset, transactions, transfers=transfers, from_ms=_ms(2025, 1, 15), now_ms=NOW)
    second = calculate_asset_analytics(asset, transactions, transfers=transfers, from_ms=_ms(2025, 1, 15), now_ms=NOW)
    assert first == second


def test_days_held_counts_whole_days_since_first_buy():
    first_buy = NOW - 10 * MS_PER_DAY - MS_PER_DAY // 2
    asset = PortfolioAsset(symbol="BTC", balance=1, price=100.0)
    analytics = calculate_asset_analytics(asset, [_buy("a", 100.0, 1, first_buy)], now_ms=NOW)
    assert analytics.days_held == 10
    assert analytics.first_buy_date == first_buy


def test_days_held_never_negative():
    asset = PortfolioAsset(symbol="BTC", balance=1, price=100.0)
    analytics = calculate_asset_analytics(asset, [_buy("a", 100.0, 1, NOW + MS_PER_DAY)], now_ms=NOW)
    assert analytics.days_held == 0


def test_price_distance_and_signal_from_current_average():
    asset = PortfolioAsset(symbol="BTC", balance=1, price=70.0)
    analytics = calculate_asset_analytics(asset, [_buy("a", 100.0, 1, _ms(2025, 1, 1))], now_ms=NOW)
    assert analytics.price_distance == pytest.approx(-0.30)
    assert analytics.dca_signal is DcaSignal.BUY
    assert analytics.unrealized_pnl == pytest.approx(-30.0)
    assert analytics.unrealized_pnl_percent == pytest.approx(-30.0)


def test_realized_and_unrealized_pnl_flow_through():
    transactions = [
        _buy("a", 10.0, 1, _ms(2025, 1, 1)),
        _buy("b", 20.0, 1, _ms(2025, 1, 2)),
        _sell("c", 25.0, 1, _ms(2025, 1, 3)),
    ]
    asset = PortfolioAsset(symbol="BTC", balance=1, price=30.0)
    analytics = calculate_asset_analytics(asset, transactions, now_ms=NOW)
    assert analytics.realized_pnl == pytest.approx(15.0)
    assert analytics.cost_basis == pytest.approx(20.0)
    assert analytics.unrealized_pnl == pytest.approx(10.0)
    assert analytics.unrealized_pnl_percent == pytest.approx(50.0)
    assert analytics.dca_signal is DcaSignal.TRIM


@pytest.mark.parametrize(
    "distance, expected",
    [
        (-0.5, DcaSignal.STRONG_BUY),
        (-0.3000001, DcaSignal.STRONG_BUY),
        (-0.30, DcaSignal.BUY),
        (-0.1000001, DcaSignal.BUY),
        (-0.10, DcaSignal.HOLD),
        (0.0, DcaSignal.HOLD),
        (0.25, DcaSignal.HOLD),
        (0.2500001, DcaSignal.TRIM),
        (0.50, DcaSignal.TRIM),
        (0.5000001, DcaSignal.SELL),
        (3.0, DcaSignal.SELL),
    ],
)
def test_dca_signal_boundaries(distance, expected):
    assert classify_dca_signal(distance, avg_buy_price=100.0, price=100.0) is expected


def test_dca_signal_holds_without_cost_or_price():
    assert classify_dca_signal(-0.9, avg_buy_price=0, price=10.0) is DcaSignal.HOLD
    assert classify_dca_signal(-0.9, avg_buy_price=10.0, price=0) is DcaSignal.HOLD


def test_dca_signal_requires_cost_and_price():
    with pytest.raises(TypeError):
        classify_dca_signal(-0.9)  # type: ignore[call-arg]
    with pytest.raises(TypeError):
        classify_dca_signal(-0.9, 10.0, 10.0)  # type: ignore[misc]


def test_asset_analytics_stay_finite_for_huge_values():
    asset = PortfolioAsset(symbol="BTC", balance=1e200, price=1e200, price_change_24h=5.0)
    analytics = calculate_asset_analytics(asset, [_buy("1", 1e200, 1e200, 1_000)], now_ms=2_000)

    assert math.isfinite(analytics.unrealized_pnl)
    assert math.isfinite(analytics.unrealized_pnl_percent)
    assert math.isfinite(analytics.cost_basis)


def test_dca_signal_labels():
    assert DcaSignal.STRONG_BUY.label == "Strong Buy"
    assert DcaSignal.SELL.label == "Take Profit"
