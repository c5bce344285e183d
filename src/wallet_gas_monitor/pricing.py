"""USD price lookup against the CoinGecko simple price API."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from decimal import Decimal, InvalidOperation

import httpx

from wallet_gas_monitor.config import COINGECKO_SIMPLE_PRICE_URL
from wallet_gas_monitor.exceptions import PriceFetchError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15.0
USER_AGENT = "wallet-gas-monitor/0.1"

PriceMap = dict[str, Decimal]


def price_for(prices: Mapping[str, Decimal], asset_id: str) -> Decimal:
    """Return the USD price for an asset, or zero if the oracle omitted it."""
    return prices.get(asset_id, Decimal(0))


class PriceOracle:
    """Fetches USD prices for a batch of CoinGecko asset ids in one call.

    No retries: a failure surfaces as PriceFetchError and the caller skips
    the cycle until the next scheduled run.
    """

    def __init__(
        self,
        *,
        api_url: str = COINGECKO_SIMPLE_PRICE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.api_url = api_url
        self.timeout = timeout

    async def fetch_prices(self, asset_ids: Iterable[str]) -> PriceMap:
        """Fetch current USD prices.

        Args:
            asset_ids: CoinGecko ids. Duplicates are collapsed.

        Returns:
            Mapping of id to USD price. Ids the API does not know are absent.

        Raises:
            PriceFetchError: On transport, HTTP status or parse failure.
        """
        ids = list(dict.fromkeys(asset_ids))
        if not ids:
            return {}

        params = {"ids": ",".join(ids), "vs_currencies": "usd"}

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                headers={"User-Agent": USER_AGENT},
            ) as client:
                response = await client.get(self.api_url, params=params)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            raise PriceFetchError(f"Price request failed: {e}") from e
        except ValueError as e:
            raise PriceFetchError(f"Price response is not JSON: {e}") from e

        return self._parse(data)

    @staticmethod
    def _parse(data: object) -> PriceMap:
        if not isinstance(data, dict):
            raise PriceFetchError(f"Unexpected price response: {str(data)[:200]}")

        prices: PriceMap = {}
        for asset_id, quote in data.items():
            if not isinstance(quote, dict) or quote.get("usd") is None:
                logger.warning("No USD quote for %s in price response", asset_id)
                continue
            try:
                prices[asset_id] = Decimal(str(quote["usd"]))
            except InvalidOperation as e:
                raise PriceFetchError(
                    f"Invalid USD price for {asset_id}: {quote['usd']!r}"
                ) from e
        return prices
