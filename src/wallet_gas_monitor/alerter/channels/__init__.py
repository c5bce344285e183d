"""Alert channel implementations."""

from wallet_gas_monitor.alerter.channels.telegram import TelegramChannel

__all__ = [
    "TelegramChannel",
]
