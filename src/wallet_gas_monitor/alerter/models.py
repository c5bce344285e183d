"""Data models for the alerter module."""

from __future__ import annotations

from dataclasses import dataclass, field

from wallet_gas_monitor.balances.models import BalanceReading

CooldownState = dict[str, int]
"""Alert key -> epoch milliseconds of the last alert sent."""


@dataclass(frozen=True)
class FormattedAlert:
    """A low balance alert ready for delivery.

    Attributes:
        title: Short alert headline.
        telegram_markdown: Telegram MarkdownV2 message.
        plain_text: Plain text rendering, used for logs and dry runs.
    """

    title: str
    telegram_markdown: str
    plain_text: str


@dataclass
class Evaluation:
    """Outcome of evaluating one batch of readings.

    Attributes:
        alerts: Readings that should be alerted now, in input order.
        suppressed: Low readings held back by the cooldown.
        state: Updated cooldown state, to be persisted.
    """

    alerts: list[BalanceReading] = field(default_factory=list)
    suppressed: list[BalanceReading] = field(default_factory=list)
    state: CooldownState = field(default_factory=dict)
