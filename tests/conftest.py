from datetime import datetime
from decimal import Decimal

import pytest

from tradelens.core.models import Fees, Trade


def _dec(value):
    return None if value is None else Decimal(str(value))


@pytest.fixture
def make_trade():
    """Factory for Trade records with sensible defaults for a closed long."""
    counter = {"n": 0}

    def _make(
        pnl=10,
        status="closed",
        side="long",
        timestamp=None,
        market="SOL-USDC",
        entry_price=100,
        exit_price=110,
        quantity=1,
        leverage=None,
        trading_fee=0,
        funding_fee=0,
        duration=None,
        order_type="market",
        id=None,
    ):
        counter["n"] += 1
        return Trade(
            id=id or f"t{counter['n']}",
            # default timestamps follow creation order
            timestamp=timestamp or datetime(2024, 1, 1, 9, counter["n"] % 60),
            market=market,
            side=side,
            entry_price=_dec(entry_price),
            exit_price=_dec(exit_price) if status != "open" else None,
            quantity=_dec(quantity),
            leverage=_dec(leverage),
            pnl=_dec(pnl),
            fees=Fees(trading=_dec(trading_fee), funding=_dec(funding_fee)),
            status=status,
            duration=_dec(duration),
            order_type=order_type,
        )

    return _make
