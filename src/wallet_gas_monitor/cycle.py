"""One check-evaluate-alert cycle.

A cycle fetches prices, reads every configured balance concurrently,
decides which low balances may alert under the cooldown, persists the
cooldown state, sends at most one composite alert and publishes the status
snapshot. Only a price fetch failure aborts a cycle; every later stage
isolates its own failures.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

from redis.asyncio import Redis

from wallet_gas_monitor.alerter.channels.telegram import TelegramChannel
from wallet_gas_monitor.alerter.cooldown import (
    CooldownStore,
    JsonFileCooldownStore,
    RedisCooldownStore,
)
from wallet_gas_monitor.alerter.evaluator import evaluate, is_below_threshold
from wallet_gas_monitor.alerter.formatter import AlertFormatter, format_balance, format_usd
from wallet_gas_monitor.alerter.notifier import Notifier
from wallet_gas_monitor.balances.evm import EvmBalanceReader
from wallet_gas_monitor.balances.reader import BalanceReader, build_targets, read_all_balances
from wallet_gas_monitor.balances.solana import SolanaBalanceReader
from wallet_gas_monitor.exceptions import PersistenceError, PriceFetchError
from wallet_gas_monitor.pricing import PriceMap, PriceOracle
from wallet_gas_monitor.status import StatusPublisher, build_snapshot

if TYPE_CHECKING:
    from wallet_gas_monitor.balances.models import BalanceReading, ChainTarget
    from wallet_gas_monitor.config import Settings

logger = logging.getLogger(__name__)


class CycleStage(Enum):
    """Stages of a check cycle, in execution order."""

    IDLE = "idle"
    FETCHING_PRICES = "fetching_prices"
    READING_BALANCES = "reading_balances"
    EVALUATING = "evaluating"
    ALERTING = "alerting"
    PUBLISHING = "publishing"


@dataclass
class CycleResult:
    """What a single cycle did.

    Attributes:
        started_at: Cycle start time, also the cooldown "now".
        stage: Last stage entered.
        aborted: True when the price fetch failed and nothing else ran.
        error: Abort reason, if any.
        prices: Prices used for this cycle.
        readings: One reading per configured network, in config order.
        alerts: Readings that triggered an alert.
        suppressed: Low readings held back by the cooldown.
        notified: True if the alert message was delivered.
        state_saved: True if cooldown state was persisted.
        status_published: True if the status snapshot was written.
    """

    started_at: datetime
    stage: CycleStage = CycleStage.IDLE
    aborted: bool = False
    error: str | None = None
    prices: PriceMap = field(default_factory=dict)
    readings: list[BalanceReading] = field(default_factory=list)
    alerts: list[BalanceReading] = field(default_factory=list)
    suppressed: list[BalanceReading] = field(default_factory=list)
    notified: bool = False
    state_saved: bool = False
    status_published: bool = False


def _utc_now() -> datetime:
    return datetime.now(UTC)


class CheckCycle:
    """Runs balance checks with injected collaborators.

    Example:
        ```python
        cycle = build_cycle(get_settings())
        result = await cycle.run()
        ```
    """

    def __init__(
        self,
        *,
        targets: Sequence[ChainTarget],
        oracle: PriceOracle,
        readers: Mapping[str, BalanceReader],
        store: CooldownStore,
        notifier: Notifier,
        publisher: StatusPublisher,
        threshold_usd: Decimal,
        cooldown_hours: float,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.targets = list(targets)
        self.oracle = oracle
        self.readers = readers
        self.store = store
        self.notifier = notifier
        self.publisher = publisher
        self.threshold_usd = threshold_usd
        self.cooldown_hours = cooldown_hours
        self.clock = clock

    @property
    def price_ids(self) -> list[str]:
        return list(dict.fromkeys(target.price_id for target in self.targets))

    async def run(self) -> CycleResult:
        """Run one full cycle.

        Returns:
            CycleResult describing every stage. Never raises for price,
            balance, persistence or delivery failures.
        """
        result = CycleResult(started_at=self.clock())
        logger.info("Running balance check...")

        result.stage = CycleStage.FETCHING_PRICES
        try:
            result.prices = await self.oracle.fetch_prices(self.price_ids)
        except PriceFetchError as e:
            logger.error("Failed to fetch prices, skipping cycle: %s", e)
            result.aborted = True
            result.error = str(e)
            return result
        logger.info(
            "Prices: %s",
            ", ".join(f"{asset}=${price}" for asset, price in result.prices.items()) or "(none)",
        )

        result.stage = CycleStage.READING_BALANCES
        result.readings = await read_all_balances(self.targets, self.readers, result.prices)
        self._log_readings(result.readings)

        result.stage = CycleStage.EVALUATING
        state = await self.store.load()
        now_ms = int(result.started_at.timestamp() * 1000)
        evaluation = evaluate(
            result.readings,
            threshold_usd=self.threshold_usd,
            cooldown_hours=self.cooldown_hours,
            now_ms=now_ms,
            state=state,
        )
        result.alerts = evaluation.alerts
        result.suppressed = evaluation.suppressed

        try:
            await self.store.save(evaluation.state)
            result.state_saved = True
        except PersistenceError as e:
            logger.error("Cooldown state not persisted: %s", e)

        if result.alerts:
            result.stage = CycleStage.ALERTING
            result.notified = await self.notifier.notify(
                result.alerts,
                threshold_usd=self.threshold_usd,
                checked_at=result.started_at,
            )
            logger.info("Low balance alert raised for %d chain(s)", len(result.alerts))
        else:
            logger.info("All balances OK or alerts on cooldown")

        result.stage = CycleStage.PUBLISHING
        snapshot = build_snapshot(
            result.started_at, result.prices, result.readings, self.threshold_usd
        )
        result.status_published = await self.publisher.publish(snapshot)

        return result

    def _log_readings(self, readings: Sequence[BalanceReading]) -> None:
        for reading in readings:
            if reading.is_error:
                status = "ERROR"
            elif is_below_threshold(reading, self.threshold_usd):
                status = "LOW"
            else:
                status = "OK"
            logger.info(
                "%s %s: %s %s (%s)",
                status,
                reading.display_name,
                format_balance(reading.balance),
                reading.symbol,
                format_usd(reading.value_usd),
            )

    async def close(self) -> None:
        """Release reader sessions and the cooldown store."""
        try:
            for reader in self.readers.values():
                await reader.close()
        finally:
            await self.store.close()


def build_cycle(settings: Settings, *, dry_run: bool | None = None) -> CheckCycle:
    """Wire a CheckCycle from validated settings.

    Args:
        settings: Application settings.
        dry_run: Override settings.dry_run when not None.
    """
    timeout = settings.request_timeout_seconds

    store: CooldownStore
    if settings.redis.enabled:
        store = RedisCooldownStore(
            Redis.from_url(settings.redis.url),
            key=settings.redis.cooldown_key,
        )
    else:
        store = JsonFileCooldownStore(settings.storage.state_file)

    channel = None
    telegram = settings.telegram
    if telegram.bot_token is not None and telegram.chat_id is not None:
        channel = TelegramChannel(
            telegram.bot_token.get_secret_value(),
            telegram.chat_id,
            timeout=timeout,
        )
    else:
        logger.warning("Telegram not configured, alerts will only be logged")

    readers: dict[str, BalanceReader] = {
        "evm": EvmBalanceReader(timeout=timeout),
        "solana": SolanaBalanceReader(timeout=timeout),
    }

    return CheckCycle(
        targets=build_targets(settings),
        oracle=PriceOracle(api_url=settings.price_api_url, timeout=timeout),
        readers=readers,
        store=store,
        notifier=Notifier(
            channel,
            AlertFormatter(settings.alert_timezone),
            dry_run=settings.dry_run if dry_run is None else dry_run,
        ),
        publisher=StatusPublisher(settings.storage.status_file),
        threshold_usd=settings.threshold_usd,
        cooldown_hours=settings.alert_cooldown_hours,
    )
