"""CLI entry point for Wallet Gas Monitor.

Usage:
    python -m wallet_gas_monitor [options]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import logging.config
import sys
from typing import NoReturn

from pydantic import ValidationError

from wallet_gas_monitor import __version__
from wallet_gas_monitor.config import Settings, clear_settings_cache, get_settings
from wallet_gas_monitor.cycle import CheckCycle, build_cycle
from wallet_gas_monitor.scheduler import run_forever
from wallet_gas_monitor.shutdown import GracefulShutdown

APP_NAME = "Wallet Gas Monitor"
APP_VERSION = __version__

# Exit codes
EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="wallet-gas-monitor",
        description="Alert when native gas balances on EVM chains or Solana run low.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m wallet_gas_monitor                  Check now, then on every interval
  python -m wallet_gas_monitor --once           Run a single check and exit
  python -m wallet_gas_monitor --config-check   Validate config and exit
  python -m wallet_gas_monitor --dry-run        Log alerts instead of sending them
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {APP_VERSION}",
    )
    parser.add_argument(
        "--config-check",
        action="store_true",
        help="Validate configuration and exit",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run one balance check and exit",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Override logging level (default: from settings)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log alerts instead of sending them",
    )

    return parser


def configure_logging(level: str) -> None:
    """Configure logging for the application.

    Args:
        level: Logging level string (DEBUG, INFO, etc.)
    """
    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "detailed": {
                "format": (
                    "%(asctime)s [%(levelname)s] %(name)s (%(filename)s:%(lineno)d): %(message)s"
                ),
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "detailed" if level == "DEBUG" else "standard",
                "stream": "ext://sys.stdout",
            },
        },
        "root": {
            "level": level,
            "handlers": ["console"],
        },
        # Quieter logging for noisy libraries
        "loggers": {
            "httpx": {"level": "WARNING"},
            "httpcore": {"level": "WARNING"},
            "web3": {"level": "WARNING"},
            "urllib3": {"level": "WARNING"},
        },
    }
    logging.config.dictConfig(config)


def print_config_summary(settings: Settings, dry_run: bool) -> None:
    """Print the startup summary."""
    summary = settings.redacted_summary()
    chains = summary["chains"]
    print(f"{APP_NAME} v{APP_VERSION}")
    print(f"  EVM: {summary['evm_address']}")
    print(f"  SOL: {summary['solana_address']}")
    print(f"  Threshold: {summary['threshold_usd']}")
    print(f"  Check interval: {summary['check_interval_minutes']} minutes")
    print(f"  Alert cooldown: {summary['alert_cooldown_hours']} hours")
    if isinstance(chains, dict):
        print(f"  EVM chains: {', '.join(chains.values()) or '(none)'}")
    if settings.redis.enabled:
        print(f"  Cooldown store: redis {summary['redis_url']}")
    else:
        print(f"  Cooldown store: {settings.storage.state_file}")
    print(f"  Telegram: {'enabled' if summary['telegram_enabled'] == 'True' else 'disabled'}")
    print(f"  Dry Run: {dry_run}")
    print()


def validate_config() -> Settings | None:
    """Validate and load configuration.

    Returns:
        Settings instance if valid, None if invalid.
    """
    try:
        clear_settings_cache()
        return get_settings()
    except ValidationError as e:
        print("Configuration validation failed:", file=sys.stderr)
        for error in e.errors():
            field = ".".join(str(loc) for loc in error["loc"])
            msg = error["msg"]
            print(f"  {field}: {msg}", file=sys.stderr)
        return None


def run_config_check(settings: Settings) -> int:
    """Print the validated configuration and exit."""
    print("Configuration is valid!")
    print()
    print_config_summary(settings, dry_run=settings.dry_run)
    if not settings.telegram.enabled:
        print("Warning: Telegram is not configured, alerts will only be logged.")
    return EXIT_SUCCESS


async def run_monitor(cycle: CheckCycle, settings: Settings, *, once: bool) -> int:
    """Run one check or the recurring loop.

    Returns:
        Exit code.
    """
    logger = logging.getLogger(__name__)

    try:
        if once:
            result = await cycle.run()
            return EXIT_ERROR if result.aborted else EXIT_SUCCESS

        async with GracefulShutdown() as shutdown:
            await run_forever(
                cycle,
                interval_minutes=settings.check_interval_minutes,
                shutdown=shutdown,
            )
        return EXIT_SUCCESS
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return EXIT_INTERRUPTED
    except Exception as e:
        logger.exception("Monitor failed: %s", e)
        return EXIT_ERROR
    finally:
        await cycle.close()


def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:]).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    settings = validate_config()
    if settings is None:
        sys.exit(EXIT_CONFIG_ERROR)

    configure_logging(args.log_level or settings.log_level)

    if args.config_check:
        sys.exit(run_config_check(settings))

    dry_run = args.dry_run or settings.dry_run
    print_config_summary(settings, dry_run)

    cycle = build_cycle(settings, dry_run=dry_run)
    exit_code = asyncio.run(run_monitor(cycle, settings, once=args.once))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
