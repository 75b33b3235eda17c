from decimal import Decimal
from typing import Optional, Sequence

from tradelens.core.models import (
    CoachingInsight,
    MarketPerformance,
    PnLDataPoint,
    PortfolioAnalytics,
    RDistribution,
    RollingPoint,
    TimePerformance,
)

TONE_ICONS = {"positive": "✅", "caution": "⚠️", "neutral": "💡"}


def _num(value: Decimal, places: int = 2) -> str:
    if value.is_infinite():
        return "∞" if value > 0 else "-∞"
    return f"{value:,.{places}f}"


def _signed(value: Decimal, places: int = 2) -> str:
    sign = '+' if value > 0 else ''
    return f"{sign}{_num(value, places)}"


def _duration(seconds: Decimal) -> str:
    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes = rest // 60
    return f"{hours}h {minutes:02d}m"


class ReportFormatter:
    @staticmethod
    def format_summary(
        analytics: PortfolioAnalytics,
        time_rows: Optional[Sequence[TimePerformance]] = None,
        r_distribution: Optional[RDistribution] = None,
        markets: Optional[Sequence[MarketPerformance]] = None,
        equity_curve: Optional[Sequence[PnLDataPoint]] = None,
        rolling: Optional[Sequence[RollingPoint]] = None,
        rolling_window: Optional[int] = None,
        insight: Optional[CoachingInsight] = None,
    ) -> str:
        """
        Formats portfolio analytics into a plain-text report for the terminal.
        Optional sections are skipped when their data is missing or empty.
        """
        a = analytics
        lines = ["📊 Portfolio Summary"]
        lines.append(f"Trades: {a.total_trades}")
        lines.append("")

        lines.append("💰 PnL")
        lines.append(f"Total PnL: {_signed(a.total_pnl)} ({_signed(a.total_pnl_percent)}%)")
        lines.append(f"Realized: {_signed(a.realized_pnl)}")
        lines.append(f"Unrealized: {_signed(a.unrealized_pnl)}")
        lines.append("")

        lines.append("🎯 Win / Loss")
        lines.append(f"Win rate: {_num(a.win_rate, 1)}% ({a.winning_trades}W / {a.losing_trades}L)")
        lines.append(f"Average win: {_signed(a.average_win)}")
        lines.append(f"Average loss: {_signed(a.average_loss)}")
        lines.append(f"Profit factor: {_num(a.profit_factor)}")
        lines.append(f"Risk/reward: {_num(a.risk_reward_ratio)}")
        lines.append(f"Expectancy: {_signed(a.expectancy)}")
        lines.append(f"Avg duration: {_duration(a.average_trade_duration)}")
        if a.largest_win is not None:
            lines.append(f"Largest win: {a.largest_win.market} {_signed(a.largest_win.pnl_or_zero)}")
        if a.largest_loss is not None:
            lines.append(f"Largest loss: {a.largest_loss.market} {_signed(a.largest_loss.pnl_or_zero)}")
        lines.append("")

        lines.append("📉 Risk")
        lines.append(f"Max drawdown: {_num(a.max_drawdown)} ({_num(a.max_drawdown_percent)}%)")
        lines.append(f"Current drawdown: {_num(a.current_drawdown)}")
        lines.append("")

        lines.append("⚖️ Long / Short")
        lines.append(f"Long: {a.long_count} ({_signed(a.long_pnl)})")
        lines.append(f"Short: {a.short_count} ({_signed(a.short_pnl)})")
        lines.append(f"Long/short ratio: {_num(a.long_short_ratio)}")
        lines.append("")

        lines.append("🧾 Fees & Volume")
        lines.append(f"Total fees: {_num(a.total_fees, 4)} "
                     f"(trading {_num(a.total_trading_fees, 4)}, funding {_num(a.total_funding_fees, 4)})")
        lines.append(f"Avg fee/trade: {_num(a.avg_fee_per_trade, 4)}")
        lines.append(f"Total volume: {_num(a.total_volume)}")
        lines.append(f"Avg trade size: {_num(a.avg_trade_size)}")

        if equity_curve:
            last = equity_curve[-1]
            lines.append("")
            lines.append("📈 Equity Curve")
            lines.append(f"Final equity: {_num(last.equity)} (cumulative {_signed(last.cumulative_pnl)})")
            lines.append(f"Worst drawdown: {_num(max(p.drawdown for p in equity_curve))}%")
            if rolling:
                latest = rolling[-1]
                label = f"last {rolling_window}" if rolling_window else "rolling"
                lines.append(f"Rolling win rate ({label}): {_num(latest.rolling_win_rate, 1)}%")
                lines.append(f"Rolling avg PnL ({label}): {_signed(latest.rolling_avg_pnl)}")

        if time_rows:
            lines.append("")
            lines.append("🕒 Performance by Period")
            for row in sorted(time_rows, key=lambda r: r.period):
                lines.append(
                    f"{row.period}: {row.trades} trades, {_signed(row.pnl)}, "
                    f"win {_num(row.win_rate, 1)}%"
                )

        if r_distribution is not None and r_distribution.buckets:
            lines.append("")
            lines.append(f"📐 R Distribution (avg {_signed(r_distribution.average_r)}R)")
            for bucket in r_distribution.buckets:
                lines.append(f"{bucket.name}: {bucket.count}")

        if markets:
            lines.append("")
            lines.append("🏷️ Markets")
            for row in markets:
                lines.append(f"{row.market}: {row.trades} trades, {_signed(row.pnl)}, volume {_num(row.volume)}")

        if insight is not None:
            lines.append("")
            lines.append(f"{TONE_ICONS[insight.tone]} Coaching: {insight.title}")
            lines.append(insight.message)

        return "\n".join(lines)

    @staticmethod
    def format_no_trades() -> str:
        return "📊 Portfolio Summary\n\nNo trades to analyze 💤"
