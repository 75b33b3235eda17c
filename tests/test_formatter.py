from datetime import datetime

from tradelens.core.models import CoachingInsight
from tradelens.services.analytics import AnalyticsService
from tradelens.services.performance import PerformanceService
from tradelens.services.report_formatter import ReportFormatter
from tradelens.services.timeseries import ChartService


def test_format_no_trades():
    msg = ReportFormatter.format_no_trades()
    assert "No trades" in msg


def test_format_summary(make_trade):
    trades = [
        make_trade(pnl=50, market="BTC-USDC", timestamp=datetime(2024, 1, 1, 9)),
        make_trade(pnl=-30, market="ETH-USDC", side="short", timestamp=datetime(2024, 1, 2, 9)),
    ]
    analytics = AnalyticsService.calculate_analytics(trades, 1000)
    rows = PerformanceService.calculate_time_performance(trades, "day")
    dist = PerformanceService.calculate_r_distribution(trades)

    msg = ReportFormatter.format_summary(analytics, rows, dist)

    assert "Portfolio Summary" in msg
    assert "Total PnL: +20.00 (+2.00%)" in msg
    assert "Win rate: 50.0% (1W / 1L)" in msg
    assert "Largest win: BTC-USDC +50.00" in msg
    assert "Largest loss: ETH-USDC -30.00" in msg
    assert "Max drawdown: 30.00 (2.86%)" in msg
    assert "2024-01-01: 1 trades, +50.00, win 100.0%" in msg
    assert "R Distribution" in msg


def test_format_summary_infinite_profit_factor(make_trade):
    analytics = AnalyticsService.calculate_analytics([make_trade(pnl=10)])
    msg = ReportFormatter.format_summary(analytics)
    assert "Profit factor: ∞" in msg
    assert "Performance by Period" not in msg


def test_format_summary_market_section(make_trade):
    trades = [make_trade(pnl=12, market="SOL-USDC"), make_trade(pnl=-3, market="SOL-USDC")]
    analytics = AnalyticsService.calculate_analytics(trades)
    markets = PerformanceService.calculate_market_breakdown(trades)

    msg = ReportFormatter.format_summary(analytics, markets=markets)
    assert "SOL: 2 trades, +9.00, volume 200.00" in msg


def test_format_summary_equity_section(make_trade):
    trades = [
        make_trade(pnl=100, timestamp=datetime(2024, 1, 1, 9)),
        make_trade(pnl=-200, timestamp=datetime(2024, 1, 2, 9)),
    ]
    analytics = AnalyticsService.calculate_analytics(trades, 1000)
    curve = ChartService.generate_pnl_chart_data(trades, 1000)
    rolling = ChartService.calculate_rolling_performance(trades, 5)

    msg = ReportFormatter.format_summary(analytics, equity_curve=curve, rolling=rolling, rolling_window=5)

    assert "Final equity: 900.00 (cumulative -100.00)" in msg
    assert "Worst drawdown: 18.18%" in msg
    assert "Rolling win rate (last 5): 50.0%" in msg


def test_format_summary_skips_equity_without_closed_trades(make_trade):
    trades = [make_trade(status="open", pnl=5)]
    analytics = AnalyticsService.calculate_analytics(trades)
    curve = ChartService.generate_pnl_chart_data(trades)

    msg = ReportFormatter.format_summary(analytics, equity_curve=curve)
    assert "Equity Curve" not in msg


def test_format_summary_coaching(make_trade):
    analytics = AnalyticsService.calculate_analytics([make_trade(pnl=10)])
    insight = CoachingInsight(tone="caution", title="Daily loss limit is hit", message="Stop for today.")

    msg = ReportFormatter.format_summary(analytics, insight=insight)
    assert msg.endswith("⚠️ Coaching: Daily loss limit is hit\nStop for today.")
