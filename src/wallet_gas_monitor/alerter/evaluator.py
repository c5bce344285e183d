"""Low balance detection with per-key alert cooldown."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from decimal import Decimal

from wallet_gas_monitor.alerter.models import CooldownState, Evaluation
from wallet_gas_monitor.balances.models import BalanceReading

logger = logging.getLogger(__name__)

MS_PER_HOUR = 3_600_000


def is_below_threshold(reading: BalanceReading, threshold_usd: Decimal) -> bool:
    """True when the reading has a USD value and it is under the threshold.

    Failed reads have no value and are never below threshold.
    """
    return reading.value_usd is not None and reading.value_usd < threshold_usd


def evaluate(
    readings: Iterable[BalanceReading],
    *,
    threshold_usd: Decimal,
    cooldown_hours: float,
    now_ms: int,
    state: Mapping[str, int],
) -> Evaluation:
    """Decide which low readings may alert now.

    A low reading alerts when more than ``cooldown_hours`` have passed
    since its key last alerted (a missing key counts as epoch 0). Alerting
    stamps the key with ``now_ms``; suppressed keys keep their old stamp.
    The input state is not modified.

    Args:
        readings: Readings from this cycle, in configuration order.
        threshold_usd: Alert when value_usd is strictly below this.
        cooldown_hours: Minimum gap between alerts for the same key.
        now_ms: Current time as epoch milliseconds.
        state: Cooldown state loaded at the start of the cycle.

    Returns:
        Evaluation with alerts, suppressed readings and the new state.
    """
    cooldown_ms = cooldown_hours * MS_PER_HOUR
    result = Evaluation(state=dict(state))

    for reading in readings:
        if not is_below_threshold(reading, threshold_usd):
            continue

        last_alert = result.state.get(reading.chain_key, 0)
        if now_ms - last_alert > cooldown_ms:
            result.alerts.append(reading)
            result.state[reading.chain_key] = now_ms
        else:
            logger.info("Alert cooldown active for %s", reading.display_name)
            result.suppressed.append(reading)

    return result
