from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from tradelens.core.models import ZERO, CoachingInsight, Trade, to_local_naive
from tradelens.services.analytics import AnalyticsService
from tradelens.services.performance import PerformanceService

HUNDRED = Decimal("100")

MIN_SAMPLE = 10
RECENT_WINDOW = 10
STRONG_RECENT_WIN_RATE = Decimal("60")
EDGE_THRESHOLD_R = Decimal("0.3")
DEEP_DRAWDOWN_PERCENT = Decimal("70")


@dataclass(frozen=True)
class TradingGoals:
    """
    個人交易紀律目標，由呼叫端持有。
    None (or a non-positive value) switches the corresponding rule off.
    """
    max_trades_per_day: Optional[int] = 10
    max_loss_per_day: Optional[Decimal] = Decimal("200")
    target_r_per_trade: Optional[Decimal] = Decimal("0.3")


def _expectancy_r(closed: Sequence[Trade]) -> Decimal:
    losers = [t for t in closed if t.pnl < 0]
    if not closed or not losers:
        return ZERO
    avg_loss_abs = abs(sum((t.pnl for t in losers), ZERO)) / len(losers)
    return sum((t.pnl / avg_loss_abs for t in closed), ZERO) / len(closed)


class CoachingService:
    @staticmethod
    def insight(
        trades: Sequence[Trade],
        goals: TradingGoals = TradingGoals(),
        now: Optional[datetime] = None,
        initial_capital=Decimal("10000"),
    ) -> CoachingInsight:
        """
        Pick the single most relevant coaching message for a trade history.

        Rules are checked in priority order: sample size, today's trade
        count and loss against the goals, recent form over the last ten
        closed trades, expectancy in R (absolute, then against the goal),
        depth of the current drawdown. The first match wins.
        """
        if not trades:
            return CoachingInsight(
                tone="neutral",
                title="Start building your sample",
                message="Once you have at least 20-30 closed trades, this panel will surface "
                        "patterns in your performance and discipline.",
            )

        closed = [t for t in trades if t.status == "closed" and t.pnl is not None]
        if len(closed) < MIN_SAMPLE:
            return CoachingInsight(
                tone="neutral",
                title="Sample is still small",
                message=f"You have fewer than {MIN_SAMPLE} closed trades in this view. Focus on executing "
                        "your plan consistently before drawing strong conclusions from the stats.",
            )

        # Today's bucket, keyed the same way as the day grouping
        today = to_local_naive(now or datetime.now()).date().isoformat()
        today_row = next(
            (row for row in PerformanceService.calculate_time_performance(trades, "day") if row.period == today),
            None,
        )
        trades_today = today_row.trades if today_row else 0
        pnl_today = today_row.pnl if today_row else ZERO

        if goals.max_trades_per_day and goals.max_trades_per_day > 0 and trades_today > goals.max_trades_per_day:
            return CoachingInsight(
                tone="caution",
                title="You may be overtrading today",
                message="You've already traded more than your own daily limit. Consider pausing and "
                        "doing a quick review instead of pushing for more entries.",
            )

        if goals.max_loss_per_day and goals.max_loss_per_day > 0 and pnl_today <= -abs(goals.max_loss_per_day):
            return CoachingInsight(
                tone="caution",
                title="Daily loss limit is hit",
                message="You're beyond your planned daily loss. The best traders stop here and protect "
                        "capital instead of trying to win it back immediately.",
            )

        recent = sorted(closed, key=lambda t: t.timestamp)[-RECENT_WINDOW:]
        recent_pnl = sum((t.pnl for t in recent), ZERO)
        recent_win_rate = Decimal(sum(1 for t in recent if t.pnl > 0)) / Decimal(len(recent)) * HUNDRED

        if recent_win_rate >= STRONG_RECENT_WIN_RATE and recent_pnl > 0:
            return CoachingInsight(
                tone="positive",
                title="Your recent execution looks strong",
                message=f"Over your last {RECENT_WINDOW} closed trades in this view, your win rate is around "
                        f"{recent_win_rate:.0f}%. Keep following the same process rather than increasing "
                        "size too quickly.",
            )

        expectancy_r = _expectancy_r(closed)
        if expectancy_r > EDGE_THRESHOLD_R:
            return CoachingInsight(
                tone="positive",
                title="Your system has a positive edge",
                message=f"Your average expectancy is about {expectancy_r:.2f}R per trade. Focus now on "
                        "position sizing and avoiding emotional trades that deviate from your plan.",
            )

        target = goals.target_r_per_trade
        if target is not None and target > 0 and ZERO < expectancy_r < target:
            return CoachingInsight(
                tone="neutral",
                title="Edge is positive but below your goal",
                message=f"Your expectancy is roughly {expectancy_r:.2f}R per trade versus your target of "
                        f"{Decimal(target):.2f}R. Look for small improvements in trade selection or "
                        "reward-to-risk, not more trades.",
            )

        analytics = AnalyticsService.calculate_analytics(trades, initial_capital)
        if analytics.current_drawdown > 0 and analytics.max_drawdown > 0:
            depth = analytics.current_drawdown / analytics.max_drawdown * HUNDRED
            if depth >= DEEP_DRAWDOWN_PERCENT:
                return CoachingInsight(
                    tone="caution",
                    title="Deep in a drawdown",
                    message="You are close to your largest historical drawdown. This is usually the worst "
                            "time to be aggressive. Reduce size, be selective, and stick tightly to your rules.",
                )

        return CoachingInsight(
            tone="neutral",
            title="Let the data guide your rules",
            message="Use your hourly, weekday, and R-multiple stats to define clear rules: when you trade, "
                    "how many trades per day, and which setups you should avoid.",
        )
