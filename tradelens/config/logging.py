import logging
import sys
from typing import Optional

from tradelens.config.settings import settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

def setup_logging(name: str = "tradelens", level: Optional[str] = None) -> logging.Logger:
    """
    統一的日誌配置，輸出到 Console (Stdout)。
    level 預設取自 settings.LOG_LEVEL。
    """
    logger = logging.getLogger(name)

    # 防止重複添加 Handler
    if logger.handlers:
        return logger

    resolved = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO)
    logger.setLevel(resolved)
    logger.propagate = False

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(resolved)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console_handler)
    return logger

# 預設 Logger
logger = setup_logging()
