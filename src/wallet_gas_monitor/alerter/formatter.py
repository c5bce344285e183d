"""Alert message formatter for low balance notifications.

Builds one composite message per batch of low readings, rendered as
Telegram MarkdownV2 and as plain text for logs and dry runs.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

from wallet_gas_monitor.alerter.models import FormattedAlert
from wallet_gas_monitor.balances.models import BalanceReading

ALERT_TITLE = "Low Gas Balance Alert"
ACTION_TEXT = "Top up native tokens to ensure transactions don't fail."

# Balances below this render in scientific notation
SCIENTIFIC_BELOW = Decimal("0.0001")
ZERO_SCIENTIFIC = "0.0000e+0"

# Addresses longer than this are shortened to 0x1234...abcd
ADDRESS_TRUNCATE_OVER = 20

TELEGRAM_SPECIAL_CHARS = "_*[]()~`>#+-=|{}.!\\"

Number = Decimal | float | int


def format_balance(amount: Number | None) -> str:
    """Format a native balance: 4-digit scientific when tiny, else 6 decimals."""
    if amount is None:
        return "Error"
    if amount == 0:
        return ZERO_SCIENTIFIC
    if amount < SCIENTIFIC_BELOW:
        return f"{amount:.4e}"
    return f"{amount:.6f}"


def format_usd(amount: Number | None) -> str:
    """Format a USD amount with 2 decimal places."""
    if amount is None:
        return "Error"
    return f"${amount:.2f}"


def truncate_address(address: str) -> str:
    """Shorten long addresses to first 6 + '...' + last 4 characters."""
    if len(address) <= ADDRESS_TRUNCATE_OVER:
        return address
    return f"{address[:6]}...{address[-4:]}"


def escape_markdown(text: str) -> str:
    """Escape special Telegram MarkdownV2 characters."""
    return "".join(f"\\{ch}" if ch in TELEGRAM_SPECIAL_CHARS else ch for ch in text)


class AlertFormatter:
    """Formats low balance readings into a single alert message."""

    def __init__(self, timezone: str = "UTC") -> None:
        """Initialize the formatter.

        Args:
            timezone: IANA timezone used for the "Checked" timestamp.
        """
        self.timezone = ZoneInfo(timezone)

    def format_timestamp(self, checked_at: datetime) -> str:
        return checked_at.astimezone(self.timezone).strftime("%Y-%m-%d %H:%M:%S %Z")

    def format(
        self,
        alerts: Sequence[BalanceReading],
        *,
        threshold_usd: Decimal,
        checked_at: datetime,
    ) -> FormattedAlert:
        """Format alert-eligible readings into one message.

        Args:
            alerts: Low readings, in the order they should appear.
            threshold_usd: Configured alert threshold.
            checked_at: Time of the check (timezone-aware).

        Returns:
            FormattedAlert with Telegram and plain text renderings.
        """
        footer = (
            f"Threshold: {format_usd(threshold_usd)} | "
            f"Checked: {self.format_timestamp(checked_at)}"
        )
        return FormattedAlert(
            title=ALERT_TITLE,
            telegram_markdown=self._build_telegram_markdown(alerts, footer),
            plain_text=self._build_plain_text(alerts, footer),
        )

    def _build_telegram_markdown(self, alerts: Sequence[BalanceReading], footer: str) -> str:
        lines = [f"⚠️ *{escape_markdown(ALERT_TITLE)}*", ""]

        for reading in alerts:
            balance = escape_markdown(f"{format_balance(reading.balance)} {reading.symbol}")
            lines.extend(
                [
                    f"🔴 *{escape_markdown(reading.display_name)}*",
                    f"  Balance: {balance}",
                    f"  Value: {escape_markdown(format_usd(reading.value_usd))}",
                    f"  Wallet: `{truncate_address(reading.address)}`",
                    "",
                ]
            )

        lines.append(f"💡 *Action needed:* {escape_markdown(ACTION_TEXT)}")
        lines.append("")
        lines.append(f"_{escape_markdown(footer)}_")
        return "\n".join(lines)

    def _build_plain_text(self, alerts: Sequence[BalanceReading], footer: str) -> str:
        lines = [ALERT_TITLE.upper(), "=" * len(ALERT_TITLE), ""]

        for reading in alerts:
            lines.extend(
                [
                    reading.display_name,
                    f"  Balance: {format_balance(reading.balance)} {reading.symbol}",
                    f"  Value: {format_usd(reading.value_usd)}",
                    f"  Wallet: {truncate_address(reading.address)}",
                    "",
                ]
            )

        lines.append(f"Action needed: {ACTION_TEXT}")
        lines.append("")
        lines.append(footer)
        return "\n".join(lines)
