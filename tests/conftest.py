"""Shared fixtures for the wallet monitor tests."""

from __future__ import annotations

from collections.abc import Iterator
from decimal import Decimal

import pytest

from wallet_gas_monitor.balances.models import BalanceReading, ChainTarget
from wallet_gas_monitor.config import CONFIG_FILE_ENV, clear_settings_cache

EVM_ADDRESS = "0x742d35Cc6634C0532925a3b844Bc9e7595f5eaE2"
SOLANA_ADDRESS = "4eD1xXy8ry9fwjyzSRRDCvQ9hBqD4doK6sWWCxt1TxGv"

_SETTINGS_ENV = (
    "THRESHOLD_USD",
    "CHECK_INTERVAL_MINUTES",
    "ALERT_COOLDOWN_HOURS",
    "EVM_ADDRESS",
    "SOLANA_ADDRESS",
    "CHAINS",
    "TELEGRAM_BOT_TOKEN",
    "TELEGRAM_CHAT_ID",
    "REDIS_URL",
    "STATE_FILE",
    "STATUS_FILE",
    "LOG_LEVEL",
    "DRY_RUN",
    "ALERT_TIMEZONE",
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    """Keep the developer's environment, .env and config.json out of tests."""
    for name in _SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv(CONFIG_FILE_ENV, str(tmp_path / "no-config.json"))
    monkeypatch.chdir(tmp_path)
    clear_settings_cache()
    yield
    clear_settings_cache()


def make_target(
    key: str = "evm_ethereum",
    *,
    name: str = "Ethereum",
    symbol: str = "ETH",
    price_id: str = "ethereum",
    rpc_url: str = "https://eth.example.com",
    address: str = EVM_ADDRESS,
    family: str = "evm",
) -> ChainTarget:
    return ChainTarget(
        key=key,
        display_name=name,
        symbol=symbol,
        price_id=price_id,
        rpc_url=rpc_url,
        address=address,
        family=family,
    )


def make_reading(
    key: str = "evm_ethereum",
    value_usd: str | None = "30",
    *,
    price: str = "3000",
    name: str = "Ethereum",
) -> BalanceReading:
    """Build a reading worth ``value_usd`` dollars, or a failed read if None."""
    target = make_target(key, name=name)
    if value_usd is None:
        return BalanceReading.failed(target, "connection refused")
    return BalanceReading.ok(target, Decimal(value_usd) / Decimal(price), Decimal(price))


@pytest.fixture
def eth_target() -> ChainTarget:
    return make_target()


@pytest.fixture
def sol_target() -> ChainTarget:
    return make_target(
        "solana",
        name="Solana",
        symbol="SOL",
        price_id="solana",
        rpc_url="https://api.mainnet-beta.solana.com",
        address=SOLANA_ADDRESS,
        family="solana",
    )


@pytest.fixture
def target_factory():
    return make_target


@pytest.fixture
def reading_factory():
    return make_reading


@pytest.fixture
def evm_address() -> str:
    return EVM_ADDRESS


@pytest.fixture
def solana_address() -> str:
    return SOLANA_ADDRESS
