from decimal import Decimal
from typing import List, Sequence

from tradelens.core.models import ZERO, PnLDataPoint, RollingPoint, Trade, to_decimal

HUNDRED = Decimal("100")


class ChartService:
    @staticmethod
    def generate_pnl_chart_data(
        trades: Sequence[Trade], initial_capital=Decimal("10000")
    ) -> List[PnLDataPoint]:
        """
        Equity curve for charting: one point per closed trade, oldest first.
        drawdown is the percent below the running equity peak at that point.
        """
        equity = to_decimal(initial_capital)
        peak = equity
        cumulative_pnl = ZERO

        closed = sorted((t for t in trades if t.status == "closed"), key=lambda t: t.timestamp)

        points = []
        for trade in closed:
            pnl = trade.pnl_or_zero
            cumulative_pnl += pnl
            equity += pnl
            if equity > peak:
                peak = equity

            drawdown = (peak - equity) / peak * HUNDRED if peak > 0 else ZERO
            points.append(PnLDataPoint(
                timestamp=trade.timestamp,
                pnl=pnl,
                cumulative_pnl=cumulative_pnl,
                drawdown=drawdown,
                equity=equity,
            ))
        return points

    @staticmethod
    def calculate_rolling_performance(trades: Sequence[Trade], window_size: int = 20) -> List[RollingPoint]:
        """
        Trailing-window win rate and average PnL over closed trades that have
        a known pnl. Early points use however many trades exist so far.
        """
        if window_size < 1:
            raise ValueError(f"window_size must be >= 1, got {window_size}")

        closed = sorted(
            (t for t in trades if t.status == "closed" and t.pnl is not None),
            key=lambda t: t.timestamp,
        )

        points = []
        for i, trade in enumerate(closed):
            window = closed[max(0, i - window_size + 1):i + 1]
            wins = sum(1 for t in window if t.pnl > 0)
            total = sum((t.pnl for t in window), ZERO)
            points.append(RollingPoint(
                index=i + 1,
                timestamp=trade.timestamp,
                rolling_win_rate=Decimal(wins) / Decimal(len(window)) * HUNDRED,
                rolling_avg_pnl=total / len(window),
            ))
        return points
