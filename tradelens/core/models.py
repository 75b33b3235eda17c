from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional, Tuple

Side = Literal["long", "short"]
Status = Literal["open", "closed", "liquidated"]
MarketType = Literal["spot", "perpetual", "options"]
OrderType = Literal["market", "limit"]

ZERO = Decimal("0")
INFINITY = Decimal("Infinity")


def to_decimal(value) -> Decimal:
    """Normalise int/float/str input to Decimal without float artefacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_local_naive(value: datetime) -> datetime:
    """
    Aware datetimes are converted to local wall time and stripped of tzinfo,
    so every trade timestamp compares and buckets the same way.
    """
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


@dataclass(frozen=True)
class Fees:
    """手續費拆分。兩者皆可為負 (funding 為負代表收到資金費)。"""
    trading: Decimal = ZERO
    funding: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.trading + self.funding


@dataclass(frozen=True)
class Trade:
    """
    核心交易模型 (Domain Model)。
    代表一筆永續/現貨成交，不論來源是模擬資料或鏈上歷史重建。
    分析模組只讀取，不修改。
    """
    id: str                          # 唯一識別碼
    timestamp: datetime              # 成交時間
    market: str                      # 交易對 (e.g., "SOL-USDC")
    side: Side                       # long / short
    entry_price: Decimal
    exit_price: Optional[Decimal]    # 持倉中為 None
    quantity: Decimal                # 以 base asset 計
    leverage: Optional[Decimal]
    pnl: Optional[Decimal]           # None 代表尚未確定，不等於 0
    fees: Fees
    status: Status
    duration: Optional[Decimal]      # 秒；持倉中為 None

    # 選填欄位，視資料來源是否提供
    tx_signature: str = ""
    market_type: MarketType = "perpetual"
    order_type: OrderType = "market"
    pnl_percent: Optional[Decimal] = None
    annotations: Tuple[str, ...] = ()

    @property
    def pnl_or_zero(self) -> Decimal:
        return self.pnl if self.pnl is not None else ZERO

    @property
    def notional(self) -> Decimal:
        return self.quantity * self.entry_price

    def is_profit(self) -> bool:
        return self.pnl_or_zero > 0


@dataclass(frozen=True)
class OrderTypeCounts:
    market: int = 0
    limit: int = 0
    stop: int = 0
    other: int = 0


@dataclass(frozen=True)
class DrawdownStats:
    max_drawdown: Decimal
    max_drawdown_percent: Decimal
    current_drawdown: Decimal


@dataclass(frozen=True)
class PortfolioAnalytics:
    """
    Whole-history summary statistics.
    Recomputed wholesale from a trade list, never updated in place.
    """
    # Core
    total_pnl: Decimal
    total_pnl_percent: Decimal
    unrealized_pnl: Decimal
    realized_pnl: Decimal

    # Win / loss
    total_trades: int
    winning_trades: int
    losing_trades: int
    win_rate: Decimal

    # Averages
    average_win: Decimal
    average_loss: Decimal            # negative
    average_trade_duration: Decimal
    profit_factor: Decimal
    risk_reward_ratio: Decimal
    expectancy: Decimal

    # Risk
    largest_win: Optional[Trade]
    largest_loss: Optional[Trade]
    max_drawdown: Decimal
    max_drawdown_percent: Decimal
    current_drawdown: Decimal

    # Long / short
    long_count: int
    short_count: int
    long_pnl: Decimal
    short_pnl: Decimal
    long_short_ratio: Decimal

    # Fees
    total_fees: Decimal
    avg_fee_per_trade: Decimal
    fees_by_type: Fees

    # Volume
    total_volume: Decimal
    avg_trade_size: Decimal

    order_type_counts: OrderTypeCounts = field(default_factory=OrderTypeCounts)

    @property
    def total_trading_fees(self) -> Decimal:
        return self.fees_by_type.trading

    @property
    def total_funding_fees(self) -> Decimal:
        return self.fees_by_type.funding


@dataclass(frozen=True)
class PnLDataPoint:
    timestamp: datetime
    pnl: Decimal
    cumulative_pnl: Decimal
    drawdown: Decimal                # percent below running peak
    equity: Decimal


@dataclass(frozen=True)
class TimePerformance:
    period: str                      # e.g. "2024-01-15", "09:00", "Monday"
    trades: int
    pnl: Decimal
    win_rate: Decimal
    volume: Decimal


@dataclass(frozen=True)
class RollingPoint:
    index: int                       # 1-based position in the closed-trade sequence
    timestamp: datetime
    rolling_win_rate: Decimal
    rolling_avg_pnl: Decimal


@dataclass(frozen=True)
class MarketPerformance:
    market: str                      # display name, e.g. "SOL"
    full_market: str                 # e.g. "SOL-USDC"
    trades: int
    pnl: Decimal
    volume: Decimal


@dataclass(frozen=True)
class MarketExposure:
    market: str
    notional: Decimal
    positions: int
    percent: Decimal


@dataclass(frozen=True)
class RBucket:
    name: str
    count: int
    is_positive: bool


@dataclass(frozen=True)
class RDistribution:
    buckets: List[RBucket]
    average_r: Decimal


@dataclass(frozen=True)
class CoachingInsight:
    tone: Literal["positive", "caution", "neutral"]
    title: str
    message: str
