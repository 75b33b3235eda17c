from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

from tradelens.core.exceptions import DataSourceError
from tradelens.core.models import ZERO, Fees, Trade, to_local_naive

SIDES = ("long", "short")
STATUSES = ("open", "closed", "liquidated")


def _decimal(value: Any) -> Decimal:
    return Decimal(str(value))


def _optional_decimal(value: Any) -> Optional[Decimal]:
    return None if value is None else _decimal(value)


def _timestamp(value: Any) -> datetime:
    # Epoch milliseconds (JS Date.getTime()) or ISO-8601 string; always naive local time
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000)
    return to_local_naive(datetime.fromisoformat(str(value).replace("Z", "+00:00")))


class TradeFileMapper:
    """
    負責將交易檔案 (JSON) 的原始資料轉換為核心 Domain Models，以及反向轉換。
    Keys follow the dashboard's camelCase export format.
    """

    @staticmethod
    def to_trade(raw: Dict[str, Any]) -> Trade:
        try:
            side = raw["side"]
            status = raw["status"]
            if side not in SIDES:
                raise ValueError(f"unknown side {side!r}")
            if status not in STATUSES:
                raise ValueError(f"unknown status {status!r}")

            fees = raw.get("fees") or {}
            return Trade(
                id=str(raw["id"]),
                timestamp=_timestamp(raw["timestamp"]),
                market=raw["market"],
                side=side,
                entry_price=_decimal(raw["entryPrice"]),
                exit_price=_optional_decimal(raw.get("exitPrice")),
                quantity=_decimal(raw["quantity"]),
                leverage=_optional_decimal(raw.get("leverage")),
                pnl=_optional_decimal(raw.get("pnl")),
                fees=Fees(
                    trading=_decimal(fees.get("trading", ZERO)),
                    funding=_decimal(fees.get("funding", ZERO)),
                ),
                status=status,
                duration=_optional_decimal(raw.get("duration")),
                tx_signature=raw.get("txSignature", ""),
                market_type=raw.get("marketType", "perpetual"),
                order_type=raw.get("orderType", "market"),
                pnl_percent=_optional_decimal(raw.get("pnlPercent")),
                annotations=tuple(raw.get("annotations") or ()),
            )
        except (KeyError, TypeError, ValueError, AttributeError, InvalidOperation) as e:
            trade_id = raw.get("id", "?") if isinstance(raw, dict) else "?"
            raise DataSourceError(f"Malformed trade record {trade_id}: {e!r}") from e

    @staticmethod
    def to_dict(trade: Trade) -> Dict[str, Any]:
        """Decimals are written as strings so no precision is lost."""
        def opt(value: Optional[Decimal]) -> Optional[str]:
            return None if value is None else str(value)

        return {
            "id": trade.id,
            "txSignature": trade.tx_signature,
            "timestamp": trade.timestamp.isoformat(),
            "market": trade.market,
            "marketType": trade.market_type,
            "side": trade.side,
            "orderType": trade.order_type,
            "entryPrice": str(trade.entry_price),
            "exitPrice": opt(trade.exit_price),
            "quantity": str(trade.quantity),
            "leverage": opt(trade.leverage),
            "pnl": opt(trade.pnl),
            "pnlPercent": opt(trade.pnl_percent),
            "fees": {
                "trading": str(trade.fees.trading),
                "funding": str(trade.fees.funding),
            },
            "status": trade.status,
            "duration": opt(trade.duration),
            "annotations": list(trade.annotations),
        }
