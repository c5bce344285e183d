"""Balance layer - native asset reads for EVM and Solana wallets."""

from wallet_gas_monitor.balances.evm import EvmBalanceReader
from wallet_gas_monitor.balances.models import BalanceReading, ChainTarget
from wallet_gas_monitor.balances.reader import (
    BalanceReader,
    build_targets,
    read_all_balances,
    read_balance,
)
from wallet_gas_monitor.balances.solana import SolanaBalanceReader

__all__ = [
    "BalanceReader",
    "BalanceReading",
    "ChainTarget",
    "EvmBalanceReader",
    "SolanaBalanceReader",
    "build_targets",
    "read_all_balances",
    "read_balance",
]
