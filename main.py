import asyncio
import os
import sys
from datetime import datetime
from typing import List, Optional, TextIO
from loguru import logger
from disease_sync.models.sync import SyncMode, Full, Incremental, HealthCheck, Preview, Verify

DEFAULT_HOURS = 24

USAGE = """
AI DISEASE TRAINING DATA SYNC

Usage: disease-sync [COMMAND]

Commands:
 (none)           Full sync - syncs all data
 incremental [N]  Incremental sync - syncs last N hours (default: 24)
 health           Run health checks
 preview          Preview sample data
 verify           Verify data integrity
 --help, -h       Show this help message

Examples:
 disease-sync                    # Full sync
 disease-sync incremental        # Last 24 hours
 disease-sync incremental 72     # Last 72 hours
 disease-sync health             # Health check
 disease-sync preview            # Preview data
"""

def setup_logging(log_dir: str = "logs") -> None:
    # 移除默认的处理器
    logger.remove()

    # 添加文件处理器
    logger.add(
        os.path.join(log_dir, "disease_sync.log"),
        rotation="10 MB",
        retention=5,
        level="INFO",
        format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
    )

    # 添加控制台处理器
    logger.add(
        sys.stdout,
        level="DEBUG",
        format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <level>{message}</level>"
    )

def print_help(stream: Optional[TextIO] = None) -> None:
    print(USAGE, file=stream or sys.stdout)

def parse_args(argv: Optional[List[str]] = None) -> SyncMode:
    """解析命令行参数，未知命令打印用法并以 1 退出"""
    args = sys.argv[1:] if argv is None else argv
    if not args:
        return Full()

    command = args[0]
    if command == "incremental":
        hours = DEFAULT_HOURS
        if len(args) > 1:
            try:
                hours = int(args[1])
            except ValueError:
                logger.warning(f"Invalid hours {args[1]!r}, using default {DEFAULT_HOURS}")
        return Incremental(hours)
    if command == "health":
        return HealthCheck()
    if command == "preview":
        return Preview()
    if command == "verify":
        return Verify()
    if command in ("--help", "-h"):
        print_help()
        raise SystemExit(0)

    print(f"Unknown command: {command}", file=sys.stderr)
    print_help(sys.stderr)
    raise SystemExit(1)

async def main(mode: SyncMode) -> None:
    from disease_sync.config.loader import load_config
    from disease_sync.services.monitor import PerformanceMonitor
    from disease_sync.services.sync import SyncService

    monitor = PerformanceMonitor()
    try:
        config = load_config()
        monitor.checkpoint("Environment loaded")

        logger.info("AI DISEASE TRAINING DATA SYNC - Direct SQL INSERT")
        logger.info(f"CPU Cores: {os.cpu_count()}")
        logger.info(f"Workers: {config.max_workers}")
        logger.info(f"Started: {datetime.now():%Y-%m-%d %H:%M:%S}")
        config.log_summary()
        monitor.checkpoint("Configuration loaded")

        logger.info(f"Sync Mode: {mode}")
        sync_service = SyncService(config, monitor=monitor)
        await sync_service.run(mode)

    except Exception as e:
        logger.error(f"SYNC FAILED: {str(e)}")
        raise

    monitor.report()
    logger.info("AI Disease Training Data Sync - FINISHED")
    logger.info(f"Completed: {datetime.now():%Y-%m-%d %H:%M:%S}")

def run(argv: Optional[List[str]] = None) -> None:
    # 先解析命令，帮助和未知命令不初始化日志文件和数据库
    mode = parse_args(argv)
    setup_logging()
    try:
        asyncio.run(main(mode))
    except Exception:
        sys.exit(1)

if __name__ == "__main__":
    run()
