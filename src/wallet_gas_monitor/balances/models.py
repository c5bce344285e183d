"""Data models for balance readings."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

SOLANA_ALERT_KEY = "solana"


def evm_alert_key(chain_key: str) -> str:
    """Alert key for an EVM chain entry."""
    return f"evm_{chain_key}"


@dataclass(frozen=True)
class ChainTarget:
    """One wallet on one network, ready to be read.

    Attributes:
        key: Alert key, unique per configured network.
        display_name: Human-readable network name.
        symbol: Native asset symbol.
        price_id: Price oracle asset id.
        rpc_url: RPC endpoint.
        address: Wallet address on this network.
        family: Reader family, "evm" or "solana".
    """

    key: str
    display_name: str
    symbol: str
    price_id: str
    rpc_url: str
    address: str
    family: str


@dataclass(frozen=True)
class BalanceReading:
    """Result of reading one native balance.

    ``value_usd`` is set exactly when ``balance`` is set and then equals
    ``balance * price``. Use the ``ok`` and ``failed`` constructors.
    """

    chain_key: str
    display_name: str
    symbol: str
    balance: Decimal | None
    price: Decimal
    value_usd: Decimal | None
    address: str
    error: str | None = None

    def __post_init__(self) -> None:
        if (self.balance is None) != (self.value_usd is None):
            raise ValueError("value_usd must be set iff balance is set")

    @classmethod
    def ok(cls, target: ChainTarget, balance: Decimal, price: Decimal) -> BalanceReading:
        return cls(
            chain_key=target.key,
            display_name=target.display_name,
            symbol=target.symbol,
            balance=balance,
            price=price,
            value_usd=balance * price,
            address=target.address,
        )

    @classmethod
    def failed(cls, target: ChainTarget, error: str) -> BalanceReading:
        return cls(
            chain_key=target.key,
            display_name=target.display_name,
            symbol=target.symbol,
            balance=None,
            price=Decimal(0),
            value_usd=None,
            address=target.address,
            error=error,
        )

    @property
    def is_error(self) -> bool:
        return self.balance is None
