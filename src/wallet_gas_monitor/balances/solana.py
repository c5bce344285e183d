"""Native SOL balance reads over Solana JSON-RPC."""

from __future__ import annotations

import logging
from decimal import Decimal

import httpx

from wallet_gas_monitor.balances.models import ChainTarget
from wallet_gas_monitor.exceptions import BalanceReadError

logger = logging.getLogger(__name__)

LAMPORTS_PER_SOL = Decimal(1_000_000_000)
DEFAULT_REQUEST_TIMEOUT = 15.0
DEFAULT_COMMITMENT = "confirmed"


class SolanaBalanceReader:
    """Reads lamport balances with the ``getBalance`` RPC method."""

    family = "solana"

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        commitment: str = DEFAULT_COMMITMENT,
    ) -> None:
        self._timeout = timeout
        self._commitment = commitment

    async def get_balance(self, target: ChainTarget) -> Decimal:
        """Get the balance in SOL.

        Raises:
            BalanceReadError: On transport failure, RPC error or malformed result.
        """
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "getBalance",
            "params": [target.address, {"commitment": self._commitment}],
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(target.rpc_url, json=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            raise BalanceReadError(f"{target.display_name} RPC error: {e}") from e
        except ValueError as e:
            raise BalanceReadError(f"{target.display_name} returned non-JSON response") from e

        if not isinstance(data, dict):
            raise BalanceReadError(f"{target.display_name} returned unexpected response")

        if data.get("error"):
            error = data["error"]
            message = error.get("message", error) if isinstance(error, dict) else error
            raise BalanceReadError(f"{target.display_name} RPC error: {message}")

        result = data.get("result")
        lamports = result.get("value") if isinstance(result, dict) else None
        if not isinstance(lamports, int) or lamports < 0:
            raise BalanceReadError(f"{target.display_name} returned invalid balance {lamports!r}")

        logger.debug("%s balance: %d lamports", target.display_name, lamports)
        return Decimal(lamports) / LAMPORTS_PER_SOL

    async def close(self) -> None:
        """Nothing to release, a client is opened per request."""
