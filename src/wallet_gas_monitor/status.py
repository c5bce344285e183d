"""Latest-status snapshot for external dashboards."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any

from wallet_gas_monitor.alerter.evaluator import is_below_threshold
from wallet_gas_monitor.balances.models import BalanceReading
from wallet_gas_monitor.storage import write_atomic

logger = logging.getLogger(__name__)


def _number(value: Decimal | None) -> float | None:
    return None if value is None else float(value)


def build_snapshot(
    timestamp: datetime,
    prices: Mapping[str, Decimal],
    readings: Sequence[BalanceReading],
    threshold_usd: Decimal,
) -> dict[str, Any]:
    """Build the status document written after every completed cycle.

    Prices use the oracle's own shape (``{id: {"usd": price}}``); failed
    reads appear with null balance and value.
    """
    return {
        "timestamp": timestamp.isoformat(),
        "prices": {asset_id: {"usd": float(price)} for asset_id, price in prices.items()},
        "balances": [
            {
                "chain": reading.display_name,
                "symbol": reading.symbol,
                "balance": _number(reading.balance),
                "valueUSD": _number(reading.value_usd),
                "belowThreshold": is_below_threshold(reading, threshold_usd),
            }
            for reading in readings
        ],
    }


class StatusPublisher:
    """Overwrites the status file with each new snapshot."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    async def publish(self, snapshot: Mapping[str, Any]) -> bool:
        """Write the snapshot. Logs and returns False on failure."""
        try:
            write_atomic(self.path, json.dumps(snapshot, indent=2))
        except (OSError, TypeError, ValueError) as e:
            logger.error("Failed to write status file %s: %s", self.path, e)
            return False
        logger.debug("Status written to %s", self.path)
        return True
