import json
from pathlib import Path
from typing import List, Sequence

from tradelens.config.logging import logger
from tradelens.core.exceptions import DataDestinationError, DataSourceError
from tradelens.core.models import Trade
from .mapper import TradeFileMapper

class TradeFileClient:
    """
    交易檔案讀寫客戶端。
    The file holds a single JSON array of trade records.
    """

    def __init__(self, path):
        self.path = Path(path)

    def load(self) -> List[Trade]:
        try:
            with self.path.open(encoding="utf-8") as f:
                raw = json.load(f)
        except FileNotFoundError as e:
            raise DataSourceError(f"Trades file not found: {self.path}") from e
        except json.JSONDecodeError as e:
            raise DataSourceError(f"Invalid JSON in {self.path}: {e}") from e

        if not isinstance(raw, list):
            raise DataSourceError(f"Expected a JSON array of trades in {self.path}")

        trades = [TradeFileMapper.to_trade(record) for record in raw]
        logger.info(f"Loaded {len(trades)} trades from {self.path}")
        return trades

    def save(self, trades: Sequence[Trade]) -> None:
        payload = [TradeFileMapper.to_dict(t) for t in trades]
        try:
            with self.path.open("w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
        except OSError as e:
            logger.error(f"Failed to write trades file: {e}")
            raise DataDestinationError(f"Cannot write {self.path}: {e}") from e
        logger.info(f"Saved {len(payload)} trades to {self.path}")
