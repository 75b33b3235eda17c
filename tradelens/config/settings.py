import sys
from decimal import Decimal
from typing import Literal, Optional

from pydantic_settings import BaseSettings

from tradelens.core.exceptions import ConfigurationError

class Settings(BaseSettings):
    """
    應用程式全域設定。
    自動從環境變數 (.env) 讀取並驗證型別。
    所有欄位皆有預設值，未設定 .env 也能直接以模擬資料執行。
    """
    # 分析參數
    INITIAL_CAPITAL: Decimal = Decimal("10000")
    ROLLING_WINDOW: int = 20
    DEFAULT_GROUP_BY: Literal["day", "hour", "weekday"] = "day"

    # 資料來源
    DATA_SOURCE: Literal["mock", "file"] = "mock"
    TRADES_FILE: Optional[str] = None
    MOCK_TRADE_COUNT: int = 100
    MOCK_SEED: Optional[int] = None

    # 交易紀律目標 (coaching)，設為 0 即停用該規則
    MAX_TRADES_PER_DAY: Optional[int] = 10
    MAX_LOSS_PER_DAY: Optional[Decimal] = Decimal("200")
    TARGET_R_PER_TRADE: Optional[Decimal] = Decimal("0.3")

    # 應用程式行為
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True  # 區分大小寫，通常環境變數建議全大寫

# Singleton Instance
try:
    settings = Settings()
except Exception as e:
    # logging 依賴 settings，這裡只能輸出到 stderr
    print(f"CRITICAL: Failed to load configuration. Invalid env vars? {e}", file=sys.stderr)
    raise ConfigurationError(f"Invalid configuration: {e}") from e
