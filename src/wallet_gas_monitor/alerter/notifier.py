"""Formats and delivers low balance alerts."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Protocol

from wallet_gas_monitor.alerter.formatter import AlertFormatter

if TYPE_CHECKING:
    from wallet_gas_monitor.alerter.models import FormattedAlert
    from wallet_gas_monitor.balances.models import BalanceReading

logger = logging.getLogger(__name__)


class AlertChannel(Protocol):
    """Protocol for alert delivery channels."""

    name: str

    async def send(self, alert: FormattedAlert) -> bool:
        """Send alert to channel. Returns True on success."""
        ...


class Notifier:
    """Sends one composite message per batch of low balances.

    Delivery is fire-and-forget from the cycle's point of view: errors are
    logged and reported through the return value, never raised.
    """

    def __init__(
        self,
        channel: AlertChannel | None,
        formatter: AlertFormatter | None = None,
        *,
        dry_run: bool = False,
    ) -> None:
        self.channel = channel
        self.formatter = formatter or AlertFormatter()
        self.dry_run = dry_run

    async def notify(
        self,
        alerts: Sequence[BalanceReading],
        *,
        threshold_usd: Decimal,
        checked_at: datetime,
    ) -> bool:
        """Format and send an alert for the given readings.

        Returns:
            True if the channel accepted the message.
        """
        if not alerts:
            return False

        alert = self.formatter.format(alerts, threshold_usd=threshold_usd, checked_at=checked_at)

        if self.dry_run or self.channel is None:
            reason = "dry run" if self.dry_run else "no channel configured"
            logger.warning("Alert not sent (%s):\n%s", reason, alert.plain_text)
            return False

        try:
            delivered = await self.channel.send(alert)
        except Exception as e:
            logger.error("Error sending to %s: %s", self.channel.name, e)
            return False

        if not delivered:
            logger.error("Alert delivery to %s failed", self.channel.name)
        return delivered
