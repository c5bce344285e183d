"""Fan-out balance reads with per-chain failure isolation."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import TYPE_CHECKING, Protocol

from wallet_gas_monitor.balances.models import (
    SOLANA_ALERT_KEY,
    BalanceReading,
    ChainTarget,
    evm_alert_key,
)
from wallet_gas_monitor.pricing import price_for

if TYPE_CHECKING:
    from wallet_gas_monitor.config import Settings

logger = logging.getLogger(__name__)


class BalanceReader(Protocol):
    """Protocol for per-family native balance readers."""

    family: str

    async def get_balance(self, target: ChainTarget) -> Decimal:
        """Return the balance in whole native units. May raise."""
        ...

    async def close(self) -> None:
        """Release any connections held by the reader."""
        ...


def build_targets(settings: Settings) -> list[ChainTarget]:
    """Expand settings into one target per network, EVM chains first."""
    targets = [
        ChainTarget(
            key=evm_alert_key(chain_key),
            display_name=chain.name,
            symbol=chain.symbol,
            price_id=chain.coingecko_id,
            rpc_url=chain.rpc,
            address=settings.evm_address,
            family="evm",
        )
        for chain_key, chain in settings.chains.items()
    ]
    targets.append(
        ChainTarget(
            key=SOLANA_ALERT_KEY,
            display_name=settings.solana.name,
            symbol=settings.solana.symbol,
            price_id=settings.solana.coingecko_id,
            rpc_url=settings.solana.rpc,
            address=settings.solana_address,
            family="solana",
        )
    )
    return targets


async def read_balance(
    reader: BalanceReader,
    target: ChainTarget,
    prices: Mapping[str, Decimal],
) -> BalanceReading:
    """Read one balance. Never raises; failures become error readings."""
    try:
        balance = await reader.get_balance(target)
    except Exception as e:
        logger.error("Error checking %s: %s", target.display_name, e)
        return BalanceReading.failed(target, str(e) or type(e).__name__)

    return BalanceReading.ok(target, balance, price_for(prices, target.price_id))


async def read_all_balances(
    targets: Sequence[ChainTarget],
    readers: Mapping[str, BalanceReader],
    prices: Mapping[str, Decimal],
) -> list[BalanceReading]:
    """Read every target concurrently, preserving target order."""
    tasks = []
    for target in targets:
        reader = readers.get(target.family)
        if reader is None:
            tasks.append(_missing_reader(target))
        else:
            tasks.append(read_balance(reader, target, prices))
    return list(await asyncio.gather(*tasks))


async def _missing_reader(target: ChainTarget) -> BalanceReading:
    logger.error("No balance reader for %s (%s)", target.display_name, target.family)
    return BalanceReading.failed(target, f"no reader for family {target.family!r}")
