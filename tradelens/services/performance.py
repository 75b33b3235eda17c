from collections import defaultdict
from datetime import datetime, tzinfo
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from tradelens.core.models import (
    ZERO,
    MarketExposure,
    MarketPerformance,
    RBucket,
    RDistribution,
    TimePerformance,
    Trade,
)

HUNDRED = Decimal("100")
ONE = Decimal("1")

GROUP_BY_OPTIONS = ("day", "hour", "weekday")

# Indexed by datetime.weekday(); names are fixed English, not locale dependent
WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

# (name, exclusive upper bound, is_positive); the last bucket is open ended
R_BUCKETS = [
    ("<-3R", Decimal("-3"), False),
    ("-3R to -2R", Decimal("-2"), False),
    ("-2R to -1R", Decimal("-1"), False),
    ("-1R to 0R", Decimal("0"), False),
    ("0R to 1R", Decimal("1"), True),
    ("1R to 2R", Decimal("2"), True),
    (">2R", None, True),
]


def display_market(market: str) -> str:
    """SOL-USDC -> SOL; PERP-* markets keep their full name."""
    if market.startswith("PERP-"):
        return market
    return market.split("-")[0]


def _local(timestamp: datetime, tz: Optional[tzinfo]) -> datetime:
    # Naive timestamps are already local wall time
    if tz is None and timestamp.tzinfo is None:
        return timestamp
    return timestamp.astimezone(tz)


def _bucket_key(timestamp: datetime, group_by: str, tz: Optional[tzinfo]) -> str:
    local = _local(timestamp, tz)
    if group_by == "day":
        return local.date().isoformat()
    if group_by == "hour":
        return f"{local.hour:02d}:00"
    return WEEKDAYS[local.weekday()]


class PerformanceService:
    @staticmethod
    def calculate_time_performance(
        trades: Sequence[Trade], group_by: str = "day", tz: Optional[tzinfo] = None
    ) -> List[TimePerformance]:
        """
        Group closed trades by calendar day, hour of day or weekday.

        Keys come from local calendar fields unless tz is given. "hour"
        ignores the date, so the same hour on different days shares a bucket.
        Only non-empty buckets are returned and their order is not meaningful.
        """
        if group_by not in GROUP_BY_OPTIONS:
            raise ValueError(f"group_by must be one of {GROUP_BY_OPTIONS}, got {group_by!r}")

        groups: Dict[str, List[Trade]] = defaultdict(list)
        for trade in trades:
            if trade.status != "closed":
                continue
            groups[_bucket_key(trade.timestamp, group_by, tz)].append(trade)

        rows = []
        for period, period_trades in groups.items():
            winners = sum(1 for t in period_trades if t.pnl_or_zero > 0)
            rows.append(TimePerformance(
                period=period,
                trades=len(period_trades),
                pnl=sum((t.pnl_or_zero for t in period_trades), ZERO),
                win_rate=Decimal(winners) / Decimal(len(period_trades)) * HUNDRED,
                volume=sum((t.notional for t in period_trades), ZERO),
            ))
        return rows

    @staticmethod
    def fill_hourly_performance(rows: Sequence[TimePerformance]) -> List[TimePerformance]:
        """Backfill hourly rows to a full 00:00..23:00 series."""
        by_period = {row.period: row for row in rows}
        filled = []
        for hour in range(24):
            period = f"{hour:02d}:00"
            filled.append(by_period.get(period) or TimePerformance(
                period=period, trades=0, pnl=ZERO, win_rate=ZERO, volume=ZERO
            ))
        return filled

    @staticmethod
    def calculate_market_breakdown(trades: Sequence[Trade]) -> List[MarketPerformance]:
        """Per-market count, PnL and volume over all trades, largest |PnL| first."""
        stats: Dict[str, Dict] = {}
        for trade in trades:
            entry = stats.setdefault(trade.market, {"trades": 0, "pnl": ZERO, "volume": ZERO})
            entry["trades"] += 1
            entry["pnl"] += trade.pnl_or_zero
            entry["volume"] += trade.notional

        rows = [
            MarketPerformance(
                market=display_market(market),
                full_market=market,
                trades=data["trades"],
                pnl=data["pnl"],
                volume=data["volume"],
            )
            for market, data in stats.items()
        ]
        rows.sort(key=lambda r: abs(r.pnl), reverse=True)
        return rows

    @staticmethod
    def calculate_exposure(trades: Sequence[Trade]) -> List[MarketExposure]:
        """Leveraged notional of open positions per market."""
        stats: Dict[str, Dict] = {}
        for trade in trades:
            if trade.status != "open":
                continue
            leverage = trade.leverage if trade.leverage is not None else ONE
            entry = stats.setdefault(display_market(trade.market), {"notional": ZERO, "positions": 0})
            entry["notional"] += abs(trade.notional * leverage)
            entry["positions"] += 1

        total = sum((data["notional"] for data in stats.values()), ZERO)
        rows = [
            MarketExposure(
                market=market,
                notional=data["notional"],
                positions=data["positions"],
                percent=data["notional"] / total * HUNDRED if total > 0 else ZERO,
            )
            for market, data in stats.items()
        ]
        rows.sort(key=lambda r: r.notional, reverse=True)
        return rows

    @staticmethod
    def calculate_r_distribution(trades: Sequence[Trade]) -> RDistribution:
        """
        Histogram of R-multiples, where 1R is the average size of a losing
        closed trade. Without losing trades R is undefined and the
        distribution is empty.
        """
        closed = [t for t in trades if t.status == "closed" and t.pnl is not None]
        losing = [t for t in closed if t.pnl < 0]
        if not losing:
            return RDistribution(buckets=[], average_r=ZERO)

        avg_loss_abs = abs(sum((t.pnl for t in losing), ZERO)) / len(losing)

        counts = {name: 0 for name, _, _ in R_BUCKETS}
        total_r = ZERO
        for trade in closed:
            r = trade.pnl / avg_loss_abs
            total_r += r
            for name, upper, _ in R_BUCKETS:
                if upper is None or r < upper:
                    counts[name] += 1
                    break

        buckets = [
            RBucket(name=name, count=counts[name], is_positive=is_positive)
            for name, _, is_positive in R_BUCKETS
            if counts[name] > 0
        ]
        return RDistribution(buckets=buckets, average_r=total_r / len(closed))
