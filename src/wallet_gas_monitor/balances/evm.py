"""Native balance reads for EVM-compatible chains via web3."""

from __future__ import annotations

import logging
from decimal import Decimal

from web3 import AsyncWeb3
from web3.exceptions import Web3Exception
from web3.providers import AsyncHTTPProvider

from wallet_gas_monitor.balances.models import ChainTarget
from wallet_gas_monitor.exceptions import BalanceReadError

logger = logging.getLogger(__name__)

WEI_PER_ETHER = Decimal(10**18)
DEFAULT_REQUEST_TIMEOUT = 15.0


class EvmBalanceReader:
    """Reads native balances from any EVM JSON-RPC endpoint.

    One AsyncWeb3 instance is kept per RPC URL, so chains sharing the
    reader do not share connections.
    """

    family = "evm"

    def __init__(self, *, timeout: float = DEFAULT_REQUEST_TIMEOUT) -> None:
        self._timeout = timeout
        self._clients: dict[str, AsyncWeb3] = {}

    def _client(self, rpc_url: str) -> AsyncWeb3:
        w3 = self._clients.get(rpc_url)
        if w3 is None:
            w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url, request_kwargs={"timeout": self._timeout}))
            self._clients[rpc_url] = w3
        return w3

    async def get_balance(self, target: ChainTarget) -> Decimal:
        """Get the native balance in whole units (ETH, not wei).

        Raises:
            BalanceReadError: If the RPC call fails or returns garbage.
        """
        w3 = self._client(target.rpc_url)
        try:
            wei = await w3.eth.get_balance(AsyncWeb3.to_checksum_address(target.address))
        except (Web3Exception, ValueError) as e:
            raise BalanceReadError(f"{target.display_name} RPC error: {e}") from e

        if not isinstance(wei, int) or wei < 0:
            raise BalanceReadError(f"{target.display_name} returned invalid balance {wei!r}")

        logger.debug("%s balance: %d wei", target.display_name, wei)
        return Decimal(wei) / WEI_PER_ETHER

    async def close(self) -> None:
        """Disconnect every cached provider session."""
        for rpc_url, w3 in self._clients.items():
            try:
                await w3.provider.disconnect()
            except Exception as e:
                logger.warning("Error closing web3 provider for %s: %s", rpc_url, e)
        self._clients.clear()
