import argparse
import sys
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from tradelens.config.settings import settings
from tradelens.config.logging import logger
from tradelens.core.exceptions import AppError, ConfigurationError
from tradelens.core.models import Trade, to_local_naive
from tradelens.infrastructure.json_file.client import TradeFileClient
from tradelens.infrastructure.mock.generator import MockTradeGenerator
from tradelens.services.analytics import AnalyticsService
from tradelens.services.coaching import CoachingService, TradingGoals
from tradelens.services.filters import TradeFilters, apply_filters
from tradelens.services.performance import PerformanceService
from tradelens.services.report_formatter import ReportFormatter
from tradelens.services.timeseries import ChartService

def load_trades(source: str, path: Optional[str], count: int, seed: Optional[int]) -> List[Trade]:
    """依資料來源載入交易 (mock 或 JSON 檔案)"""
    if source == "mock":
        logger.info(f"Generating {count} mock trades (seed={seed})")
        return MockTradeGenerator(seed=seed).generate(count=count)

    if not path:
        raise ConfigurationError("A trades file is required for --source file (or set TRADES_FILE)")
    return TradeFileClient(path).load()

def _decimal_arg(value: str) -> Decimal:
    try:
        return Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"invalid decimal value: {value!r}")

def _datetime_arg(value: str) -> datetime:
    # 與交易時間戳相同：帶時區的輸入轉為本地時間 (naive)
    try:
        return to_local_naive(datetime.fromisoformat(value.replace("Z", "+00:00")))
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid ISO date/time: {value!r}")

def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {number}")
    return number

def build_filters(args) -> TradeFilters:
    return TradeFilters(
        start=args.since,
        end=args.until,
        markets=frozenset(args.market or ()),
        sides=frozenset(args.side or ()),
        statuses=frozenset(args.status or ()),
    )

def build_goals() -> TradingGoals:
    return TradingGoals(
        max_trades_per_day=settings.MAX_TRADES_PER_DAY,
        max_loss_per_day=settings.MAX_LOSS_PER_DAY,
        target_r_per_trade=settings.TARGET_R_PER_TRADE,
    )

def run_report(args) -> str:
    trades = load_trades(args.source, args.file, args.count, args.seed)
    trades = apply_filters(trades, build_filters(args))
    if not trades:
        logger.info("No trades loaded.")
        return ReportFormatter.format_no_trades()

    analytics = AnalyticsService.calculate_analytics(trades, args.initial_capital)
    equity_curve = ChartService.generate_pnl_chart_data(trades, args.initial_capital)
    rolling = ChartService.calculate_rolling_performance(trades, args.rolling_window)
    time_rows = PerformanceService.calculate_time_performance(trades, args.group_by)
    if args.group_by == "hour":
        time_rows = PerformanceService.fill_hourly_performance(time_rows)
    r_distribution = PerformanceService.calculate_r_distribution(trades)
    markets = PerformanceService.calculate_market_breakdown(trades)
    insight = CoachingService.insight(trades, build_goals(), initial_capital=args.initial_capital)

    logger.info(f"Analytics calculated over {analytics.total_trades} trades")
    return ReportFormatter.format_summary(
        analytics,
        time_rows,
        r_distribution,
        markets,
        equity_curve=equity_curve,
        rolling=rolling,
        rolling_window=args.rolling_window,
        insight=insight,
    )

def run_mock(args) -> None:
    trades = MockTradeGenerator(seed=args.seed).generate(count=args.count)
    TradeFileClient(args.output).save(trades)

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Trade analytics CLI")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Command: report (計算並輸出績效摘要)
    report_parser = subparsers.add_parser("report", help="Print portfolio analytics for a trade list")
    report_parser.add_argument("--source", choices=["mock", "file"], default=settings.DATA_SOURCE)
    report_parser.add_argument("--file", default=settings.TRADES_FILE, help="JSON trades file")
    report_parser.add_argument("--initial-capital", type=_decimal_arg, default=settings.INITIAL_CAPITAL)
    report_parser.add_argument("--group-by", choices=["day", "hour", "weekday"], default=settings.DEFAULT_GROUP_BY)
    report_parser.add_argument("--rolling-window", type=_positive_int, default=settings.ROLLING_WINDOW,
                               help="Closed trades per rolling win-rate window")
    report_parser.add_argument("--count", type=int, default=settings.MOCK_TRADE_COUNT)
    report_parser.add_argument("--seed", type=int, default=settings.MOCK_SEED)
    # 篩選條件 (可重複指定)
    report_parser.add_argument("--market", action="append", help="e.g. SOL-USDC")
    report_parser.add_argument("--side", action="append", choices=["long", "short"])
    report_parser.add_argument("--status", action="append", choices=["open", "closed", "liquidated"])
    report_parser.add_argument("--since", type=_datetime_arg, help="ISO date/time, inclusive")
    report_parser.add_argument("--until", type=_datetime_arg, help="ISO date/time, inclusive")

    # Command: mock (產生模擬交易檔案)
    mock_parser = subparsers.add_parser("mock", help="Write synthetic trades to a JSON file")
    mock_parser.add_argument("--output", required=True)
    mock_parser.add_argument("--count", type=int, default=settings.MOCK_TRADE_COUNT)
    mock_parser.add_argument("--seed", type=int, default=settings.MOCK_SEED)

    return parser

def main(argv: Optional[List[str]] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        if args.command == "report":
            print(run_report(args))
        elif args.command == "mock":
            run_mock(args)
    except AppError as e:
        logger.error(f"{args.command} failed: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()
