from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from tradelens.services.performance import PerformanceService, display_market


def _by_period(rows):
    return {row.period: row for row in rows}


def test_hour_buckets_ignore_date(make_trade):
    trades = [
        make_trade(pnl=10, timestamp=datetime(2024, 1, 1, 9, 15)),
        make_trade(pnl=-4, timestamp=datetime(2024, 3, 7, 9, 50)),
    ]
    rows = PerformanceService.calculate_time_performance(trades, "hour")

    assert len(rows) == 1
    assert rows[0].period == "09:00"
    assert rows[0].trades == 2
    assert rows[0].pnl == 6
    assert rows[0].win_rate == 50


def test_day_buckets(make_trade):
    trades = [
        make_trade(pnl=10, timestamp=datetime(2024, 1, 15, 1, 0), entry_price=100, quantity=2),
        make_trade(pnl=20, timestamp=datetime(2024, 1, 15, 23, 0), entry_price=50, quantity=1),
        make_trade(pnl=-5, timestamp=datetime(2024, 1, 16, 12, 0)),
    ]
    rows = _by_period(PerformanceService.calculate_time_performance(trades, "day"))

    assert set(rows) == {"2024-01-15", "2024-01-16"}
    assert rows["2024-01-15"].trades == 2
    assert rows["2024-01-15"].pnl == 30
    assert rows["2024-01-15"].volume == 250
    assert rows["2024-01-15"].win_rate == 100
    assert rows["2024-01-16"].win_rate == 0


def test_weekday_buckets(make_trade):
    trades = [
        make_trade(timestamp=datetime(2024, 1, 15, 10)),   # Monday
        make_trade(timestamp=datetime(2024, 1, 21, 10)),   # Sunday
    ]
    rows = PerformanceService.calculate_time_performance(trades, "weekday")
    assert {r.period for r in rows} == {"Monday", "Sunday"}


def test_time_performance_only_closed(make_trade):
    trades = [
        make_trade(status="open"),
        make_trade(status="liquidated", pnl=-50),
    ]
    assert PerformanceService.calculate_time_performance(trades, "day") == []


def test_time_performance_explicit_timezone(make_trade):
    trade = make_trade(timestamp=datetime(2024, 1, 15, 23, 30, tzinfo=timezone.utc))
    tz = timezone(timedelta(hours=8))

    day = PerformanceService.calculate_time_performance([trade], "day", tz=tz)
    hour = PerformanceService.calculate_time_performance([trade], "hour", tz=tz)
    assert day[0].period == "2024-01-16"
    assert hour[0].period == "07:00"


def test_time_performance_rejects_unknown_grouping():
    with pytest.raises(ValueError):
        PerformanceService.calculate_time_performance([], "month")


def test_fill_hourly_performance(make_trade):
    rows = PerformanceService.calculate_time_performance(
        [make_trade(pnl=7, timestamp=datetime(2024, 1, 1, 14, 5))], "hour"
    )
    filled = PerformanceService.fill_hourly_performance(rows)

    assert len(filled) == 24
    assert filled[0].period == "00:00"
    assert filled[23].period == "23:00"
    assert filled[14].pnl == 7
    assert filled[13].trades == 0


def test_display_market():
    assert display_market("SOL-USDC") == "SOL"
    assert display_market("PERP-1") == "PERP-1"


def test_market_breakdown_sorted_by_abs_pnl(make_trade):
    trades = [
        make_trade(market="SOL-USDC", pnl=10),
        make_trade(market="BTC-USDC", pnl=-80),
        make_trade(market="SOL-USDC", pnl=None, status="open"),
        make_trade(market="ETH-USDC", pnl=30),
    ]
    rows = PerformanceService.calculate_market_breakdown(trades)

    assert [r.market for r in rows] == ["BTC", "ETH", "SOL"]
    sol = rows[2]
    assert sol.full_market == "SOL-USDC"
    assert sol.trades == 2
    assert sol.pnl == 10
    assert sol.volume == 200


def test_exposure_uses_open_trades_and_leverage(make_trade):
    trades = [
        make_trade(market="SOL-USDC", status="open", entry_price=100, quantity=1, leverage=3),
        make_trade(market="BTC-USDC", status="open", entry_price=100, quantity=1),
        make_trade(market="ETH-USDC", status="closed"),
    ]
    rows = PerformanceService.calculate_exposure(trades)

    assert [r.market for r in rows] == ["SOL", "BTC"]
    assert rows[0].notional == 300
    assert rows[0].positions == 1
    assert rows[0].percent == 75
    assert rows[1].percent == 25


def test_r_distribution(make_trade):
    trades = [make_trade(pnl=p) for p in (-10, -30, 50, 20)]
    dist = PerformanceService.calculate_r_distribution(trades)

    # 1R = 20 -> R values -0.5, -1.5, 2.5, 1.0
    assert [(b.name, b.count) for b in dist.buckets] == [
        ("-2R to -1R", 1),
        ("-1R to 0R", 1),
        ("1R to 2R", 1),
        (">2R", 1),
    ]
    assert [b.is_positive for b in dist.buckets] == [False, False, True, True]
    assert dist.average_r == Decimal("0.375")


def test_r_distribution_without_losses(make_trade):
    dist = PerformanceService.calculate_r_distribution([make_trade(pnl=10)])
    assert dist.buckets == []
    assert dist.average_r == 0
