import random
import string
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional

from tradelens.config.logging import logger
from tradelens.core.models import ZERO, Fees, Trade

# 各市場的大約基準價格 (USDC)
BASE_PRICES = {
    "SOL-USDC": 180.0,
    "BTC-USDC": 95000.0,
    "ETH-USDC": 3200.0,
    "BONK-USDC": 0.000025,
    "JTO-USDC": 3.5,
    "WIF-USDC": 2.8,
}
MARKETS = list(BASE_PRICES)
MARKET_TYPES = ["spot", "perpetual"]

VOLATILITY = 0.05           # entry price spread around the base price
CLOSED_PROBABILITY = 0.9
LIQUIDATED_SHARE = 0.05     # of non-open trades
WIN_PROBABILITY = 0.55
MAX_MOVE = 0.08             # 0-8% exit move
TRADING_FEE_RATE = 0.001

# Base58 alphabet, as used by Solana signatures
SIGNATURE_CHARS = "".join(c for c in string.digits + string.ascii_letters if c not in "0OIl")
SIGNATURE_LENGTH = 88


def _dec(value: float, places: int) -> Decimal:
    return Decimal(str(round(value, places)))


class MockTradeGenerator:
    """
    產生模擬交易資料 (開發、展示用)。
    A fixed seed makes the output reproducible.
    """

    def __init__(self, seed: Optional[int] = None):
        self.rng = random.Random(seed)

    def generate(
        self,
        count: int = 100,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[Trade]:
        end_date = end_date or datetime.now()
        start_date = start_date or end_date - timedelta(days=30)
        span = (end_date - start_date).total_seconds()

        trades = [self._make_trade(i, start_date, span) for i in range(count)]
        trades.sort(key=lambda t: t.timestamp)
        logger.debug(f"Generated {len(trades)} mock trades between {start_date} and {end_date}")
        return trades

    def _make_trade(self, index: int, start_date: datetime, span: float) -> Trade:
        rng = self.rng
        market = rng.choice(MARKETS)
        market_type = rng.choice(MARKET_TYPES)
        side = "long" if rng.random() > 0.5 else "short"
        order_type = "market" if rng.random() > 0.3 else "limit"
        timestamp = start_date + timedelta(seconds=rng.random() * span)

        entry_price = BASE_PRICES[market] * (1 + (rng.random() - 0.5) * VOLATILITY)

        if rng.random() < CLOSED_PROBABILITY:
            status = "liquidated" if rng.random() < LIQUIDATED_SHARE else "closed"
        else:
            status = "open"

        quantity = round(rng.random() * 10 + 0.1, 4)
        leverage = rng.randint(1, 5) if market_type == "perpetual" else None
        multiplier = leverage or 1

        if status == "open":
            # Unrealized PnL from a small mark-price move
            current_price = entry_price * (1 + (rng.random() - 0.5) * 0.02)
            move = current_price - entry_price if side == "long" else entry_price - current_price
            pnl_value = move * quantity * multiplier
            exit_price = None
            duration = None
        else:
            is_winner = rng.random() < WIN_PROBABILITY
            change = rng.random() * MAX_MOVE * (1 if is_winner else -1)
            exit_value = entry_price * (1 + change) if side == "long" else entry_price * (1 - change)
            move = exit_value - entry_price if side == "long" else entry_price - exit_value
            pnl_value = round(move * quantity * multiplier, 2)
            exit_price = _dec(exit_value, 4)
            duration = Decimal(rng.randint(60, 172859))

        funding = _dec(rng.random() * 0.5, 4) if market_type == "perpetual" else ZERO

        return Trade(
            id=f"trade-{index}-{int(timestamp.timestamp() * 1000)}",
            timestamp=timestamp,
            market=market,
            side=side,
            entry_price=_dec(entry_price, 4),
            exit_price=exit_price,
            quantity=_dec(quantity, 4),
            leverage=Decimal(leverage) if leverage is not None else None,
            pnl=_dec(pnl_value, 2),
            fees=Fees(
                trading=_dec(quantity * entry_price * TRADING_FEE_RATE, 4),
                funding=funding,
            ),
            status=status,
            duration=duration,
            tx_signature="".join(rng.choice(SIGNATURE_CHARS) for _ in range(SIGNATURE_LENGTH)),
            market_type=market_type,
            order_type=order_type,
            pnl_percent=_dec(pnl_value / (entry_price * quantity) * 100, 2),
        )
