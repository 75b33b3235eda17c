from decimal import Decimal
from typing import List, Optional, Sequence

from tradelens.config.logging import logger
from tradelens.core.models import (
    INFINITY,
    ZERO,
    DrawdownStats,
    Fees,
    OrderTypeCounts,
    PortfolioAnalytics,
    Trade,
    to_decimal,
)

HUNDRED = Decimal("100")


def _sum_pnl(trades: Sequence[Trade]) -> Decimal:
    return sum((t.pnl_or_zero for t in trades), ZERO)


class AnalyticsService:
    @staticmethod
    def calculate_analytics(
        trades: Sequence[Trade], initial_capital=Decimal("10000")
    ) -> PortfolioAnalytics:
        """
        Reduce a trade list to whole-history summary statistics.

        Closed trades drive win/loss, averages, profit factor and drawdown.
        Open trades only contribute unrealized PnL. Liquidated trades belong
        to neither partition but, like every other trade, still count toward
        totals, long/short, fees and volume.
        """
        initial_capital = to_decimal(initial_capital)

        closed = [t for t in trades if t.status == "closed"]
        open_trades = [t for t in trades if t.status == "open"]

        winning = [t for t in closed if t.pnl_or_zero > 0]
        losing = [t for t in closed if t.pnl_or_zero < 0]

        realized_pnl = _sum_pnl(closed)
        unrealized_pnl = _sum_pnl(open_trades)
        total_pnl = realized_pnl + unrealized_pnl
        total_pnl_percent = total_pnl / initial_capital * HUNDRED if initial_capital != 0 else ZERO

        win_rate = Decimal(len(winning)) / Decimal(len(closed)) * HUNDRED if closed else ZERO

        gross_profit = _sum_pnl(winning)
        gross_loss = abs(_sum_pnl(losing))
        average_win = gross_profit / len(winning) if winning else ZERO
        average_loss = -gross_loss / len(losing) if losing else ZERO

        durations = [t.duration for t in closed if t.duration is not None]
        average_trade_duration = sum(durations, ZERO) / len(durations) if durations else ZERO

        if gross_loss > 0:
            profit_factor = gross_profit / gross_loss
        elif gross_profit > 0:
            profit_factor = INFINITY
        else:
            profit_factor = ZERO

        risk_reward_ratio = abs(average_win / average_loss) if average_loss != 0 else ZERO

        # average_loss is already negative, so this is a signed weighted sum
        win_rate_decimal = win_rate / HUNDRED
        expectancy = win_rate_decimal * average_win + (1 - win_rate_decimal) * average_loss

        drawdown = AnalyticsService.calculate_drawdown(closed, initial_capital)

        longs = [t for t in trades if t.side == "long"]
        shorts = [t for t in trades if t.side == "short"]
        if shorts:
            long_short_ratio = Decimal(len(longs)) / Decimal(len(shorts))
        else:
            long_short_ratio = Decimal(len(longs))

        total_trading_fees = sum((t.fees.trading for t in trades), ZERO)
        total_funding_fees = sum((t.fees.funding for t in trades), ZERO)
        total_fees = total_trading_fees + total_funding_fees

        total_volume = sum((t.notional for t in trades), ZERO)

        analytics = PortfolioAnalytics(
            total_pnl=total_pnl,
            total_pnl_percent=total_pnl_percent,
            unrealized_pnl=unrealized_pnl,
            realized_pnl=realized_pnl,
            total_trades=len(trades),
            winning_trades=len(winning),
            losing_trades=len(losing),
            win_rate=win_rate,
            average_win=average_win,
            average_loss=average_loss,
            average_trade_duration=average_trade_duration,
            profit_factor=profit_factor,
            risk_reward_ratio=risk_reward_ratio,
            expectancy=expectancy,
            largest_win=AnalyticsService._largest_win(winning),
            largest_loss=AnalyticsService._largest_loss(losing),
            max_drawdown=drawdown.max_drawdown,
            max_drawdown_percent=drawdown.max_drawdown_percent,
            current_drawdown=drawdown.current_drawdown,
            long_count=len(longs),
            short_count=len(shorts),
            long_pnl=_sum_pnl(longs),
            short_pnl=_sum_pnl(shorts),
            long_short_ratio=long_short_ratio,
            total_fees=total_fees,
            avg_fee_per_trade=total_fees / len(trades) if trades else ZERO,
            fees_by_type=Fees(trading=total_trading_fees, funding=total_funding_fees),
            total_volume=total_volume,
            avg_trade_size=total_volume / len(trades) if trades else ZERO,
            order_type_counts=AnalyticsService._count_order_types(trades),
        )
        logger.debug(
            f"Analytics computed over {analytics.total_trades} trades "
            f"({len(closed)} closed, {len(open_trades)} open)"
        )
        return analytics

    @staticmethod
    def calculate_drawdown(trades: Sequence[Trade], initial_capital=Decimal("10000")) -> DrawdownStats:
        """
        Walk the trades chronologically from initial_capital, tracking the
        running equity peak. Drawdowns are absolute (quote currency) except
        max_drawdown_percent, which is relative to the final peak.
        """
        initial_capital = to_decimal(initial_capital)
        if not trades:
            return DrawdownStats(max_drawdown=ZERO, max_drawdown_percent=ZERO, current_drawdown=ZERO)

        equity = initial_capital
        peak = initial_capital
        max_drawdown = ZERO

        for trade in sorted(trades, key=lambda t: t.timestamp):
            equity += trade.pnl_or_zero
            if equity > peak:
                peak = equity
            drawdown = peak - equity
            if drawdown > max_drawdown:
                max_drawdown = drawdown

        current_drawdown = peak - equity
        max_drawdown_percent = max_drawdown / peak * HUNDRED if peak > 0 else ZERO

        return DrawdownStats(
            max_drawdown=max_drawdown,
            max_drawdown_percent=max_drawdown_percent,
            current_drawdown=current_drawdown,
        )

    @staticmethod
    def _largest_win(winning: List[Trade]) -> Optional[Trade]:
        # Strict comparison keeps the first trade on ties
        best = None
        for trade in winning:
            if best is None or trade.pnl_or_zero > best.pnl_or_zero:
                best = trade
        return best

    @staticmethod
    def _largest_loss(losing: List[Trade]) -> Optional[Trade]:
        worst = None
        for trade in losing:
            if worst is None or trade.pnl_or_zero < worst.pnl_or_zero:
                worst = trade
        return worst

    @staticmethod
    def _count_order_types(trades: Sequence[Trade]) -> OrderTypeCounts:
        counts = {"market": 0, "limit": 0, "stop": 0, "other": 0}
        for trade in trades:
            key = trade.order_type if trade.order_type in counts else "other"
            counts[key] += 1
        return OrderTypeCounts(**counts)
