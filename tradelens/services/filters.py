from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import FrozenSet, List, Optional, Sequence

from tradelens.core.models import Trade, to_local_naive


@dataclass(frozen=True)
class TradeFilters:
    """
    Journal / dashboard filter criteria, owned by the caller.
    An empty set or None means the criterion is not applied.
    """
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    markets: FrozenSet[str] = frozenset()
    sides: FrozenSet[str] = frozenset()
    statuses: FrozenSet[str] = frozenset()
    order_types: FrozenSet[str] = frozenset()
    pnl_min: Optional[Decimal] = None
    pnl_max: Optional[Decimal] = None

    def matches(self, trade: Trade) -> bool:
        timestamp = to_local_naive(trade.timestamp)
        if self.start is not None and timestamp < to_local_naive(self.start):
            return False
        if self.end is not None and timestamp > to_local_naive(self.end):
            return False
        if self.markets and trade.market not in self.markets:
            return False
        if self.sides and trade.side not in self.sides:
            return False
        if self.statuses and trade.status not in self.statuses:
            return False
        if self.order_types and trade.order_type not in self.order_types:
            return False

        pnl = trade.pnl_or_zero
        if self.pnl_min is not None and pnl < self.pnl_min:
            return False
        if self.pnl_max is not None and pnl > self.pnl_max:
            return False
        return True


def apply_filters(trades: Sequence[Trade], filters: TradeFilters) -> List[Trade]:
    return [t for t in trades if filters.matches(t)]
