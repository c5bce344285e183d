"""Alerting layer - low balance detection, cooldowns and delivery."""

from wallet_gas_monitor.alerter.channels.telegram import TelegramChannel
from wallet_gas_monitor.alerter.cooldown import (
    CooldownStore,
    JsonFileCooldownStore,
    RedisCooldownStore,
)
from wallet_gas_monitor.alerter.evaluator import evaluate, is_below_threshold
from wallet_gas_monitor.alerter.formatter import AlertFormatter
from wallet_gas_monitor.alerter.models import CooldownState, Evaluation, FormattedAlert
from wallet_gas_monitor.alerter.notifier import AlertChannel, Notifier

__all__ = [
    "AlertChannel",
    "AlertFormatter",
    "CooldownState",
    "CooldownStore",
    "Evaluation",
    "FormattedAlert",
    "JsonFileCooldownStore",
    "Notifier",
    "RedisCooldownStore",
    "TelegramChannel",
    "evaluate",
    "is_below_threshold",
]
