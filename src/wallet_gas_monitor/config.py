"""Configuration management service with Pydantic Settings.

This module provides centralized configuration for the wallet monitor.
Values are read from init kwargs, environment variables, a ``.env`` file
and finally a JSON config file (``config.json`` by default, overridable
with ``WALLET_MONITOR_CONFIG``), in that order of precedence.
"""

from __future__ import annotations

import logging
import os
import re
from decimal import Decimal
from functools import lru_cache
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

DEFAULT_CONFIG_FILE = "config.json"
CONFIG_FILE_ENV = "WALLET_MONITOR_CONFIG"

COINGECKO_SIMPLE_PRICE_URL = "https://api.coingecko.com/api/v3/simple/price"

EVM_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def _validate_http_url(v: str) -> str:
    if not v.startswith(("http://", "https://")):
        raise ValueError("RPC URL must be an HTTP(S) endpoint")
    return v


class ChainSettings(BaseModel):
    """One EVM-compatible network to monitor."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Display name, e.g. 'Ethereum'")
    symbol: str = Field(description="Native asset symbol, e.g. 'ETH'")
    rpc: str = Field(description="JSON-RPC endpoint")
    coingecko_id: str = Field(description="CoinGecko asset id used for pricing")

    @field_validator("rpc")
    @classmethod
    def validate_rpc(cls, v: str) -> str:
        """Validate RPC URL format."""
        return _validate_http_url(v)


class SolanaSettings(BaseModel):
    """Solana network settings."""

    model_config = ConfigDict(frozen=True)

    name: str = "Solana"
    symbol: str = "SOL"
    rpc: str = "https://api.mainnet-beta.solana.com"
    coingecko_id: str = "solana"

    @field_validator("rpc")
    @classmethod
    def validate_rpc(cls, v: str) -> str:
        """Validate RPC URL format."""
        return _validate_http_url(v)


class TelegramSettings(BaseSettings):
    """Telegram notification settings."""

    model_config = SettingsConfigDict(env_prefix="TELEGRAM_", extra="ignore")

    bot_token: SecretStr | None = Field(default=None, description="Telegram bot token")
    chat_id: str | None = Field(default=None, description="Telegram chat ID for alerts")

    @property
    def enabled(self) -> bool:
        """Check if Telegram notifications are enabled."""
        return self.bot_token is not None and self.chat_id is not None


class RedisSettings(BaseSettings):
    """Optional Redis backend for cooldown state."""

    model_config = SettingsConfigDict(env_prefix="REDIS_", extra="ignore")

    url: str | None = Field(
        default=None,
        description="Redis connection string; cooldowns go to a JSON file when unset",
    )
    cooldown_key: str = Field(default="wallet_monitor:cooldowns")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str | None) -> str | None:
        """Validate Redis URL format."""
        if v is not None and not v.startswith(("redis://", "rediss://")):
            raise ValueError("REDIS_URL must start with redis:// or rediss://")
        return v

    @property
    def enabled(self) -> bool:
        return self.url is not None


class StorageSettings(BaseSettings):
    """File locations for durable state and the status snapshot."""

    model_config = SettingsConfigDict(env_prefix="", extra="ignore")

    state_file: str = Field(default="state.json", description="Cooldown state file")
    status_file: str = Field(
        default="latest-status.json",
        description="Latest status snapshot for dashboards",
    )


class Settings(BaseSettings):
    """Main application settings.

    Example:
        ```python
        from wallet_gas_monitor.config import get_settings

        settings = get_settings()
        print(settings.threshold_usd)
        print(list(settings.chains))
        ```
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Monitoring policy
    threshold_usd: Decimal = Field(gt=0, description="Alert when a wallet is worth less")
    check_interval_minutes: int = Field(default=30, gt=0)
    alert_cooldown_hours: float = Field(default=6.0, gt=0)

    # Wallets
    evm_address: str = Field(description="Address reused across every EVM chain")
    solana_address: str = Field(description="Solana wallet public key")

    # Networks
    chains: dict[str, ChainSettings] = Field(default_factory=dict)
    solana: SolanaSettings = Field(default_factory=SolanaSettings)

    # Collaborators
    telegram: TelegramSettings = Field(default_factory=TelegramSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    price_api_url: str = Field(default=COINGECKO_SIMPLE_PRICE_URL)
    request_timeout_seconds: float = Field(default=15.0, gt=0)

    # Application settings
    alert_timezone: str = Field(default="UTC", description="Timezone for alert timestamps")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    dry_run: bool = Field(default=False, description="Log alerts instead of sending them")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        json_file = os.environ.get(CONFIG_FILE_ENV, DEFAULT_CONFIG_FILE)
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            JsonConfigSettingsSource(settings_cls, json_file=json_file),
            file_secret_settings,
        )

    @field_validator("evm_address")
    @classmethod
    def validate_evm_address(cls, v: str) -> str:
        """Validate EVM address format."""
        if not EVM_ADDRESS_RE.match(v):
            raise ValueError("evm_address must be a 0x-prefixed 40 hex character address")
        return v

    @field_validator("solana_address")
    @classmethod
    def validate_solana_address(cls, v: str) -> str:
        """Validate that the Solana address looks like base58."""
        if not 32 <= len(v) <= 44 or not v.isalnum():
            raise ValueError("solana_address must be a base58 public key")
        return v

    @field_validator("alert_timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @field_validator("chains")
    @classmethod
    def validate_chain_keys(cls, v: dict[str, ChainSettings]) -> dict[str, ChainSettings]:
        """Chain keys become alert keys and file fields, keep them simple."""
        for key in v:
            if not re.fullmatch(r"[A-Za-z0-9_-]+", key):
                raise ValueError(f"invalid chain key: {key!r}")
        return v

    def get_logging_level(self) -> int:
        """Get the numeric logging level."""
        level: int = getattr(logging, self.log_level)
        return level

    def redacted_summary(self) -> dict[str, str | dict[str, str]]:
        """Get a summary of settings with secrets redacted.

        Returns:
            Dictionary of settings with sensitive values masked.
        """
        return {
            "evm_address": self.evm_address,
            "solana_address": self.solana_address,
            "threshold_usd": f"${self.threshold_usd}",
            "check_interval_minutes": str(self.check_interval_minutes),
            "alert_cooldown_hours": str(self.alert_cooldown_hours),
            "chains": {key: chain.name for key, chain in self.chains.items()},
            "redis_url": self._redact_url(self.redis.url) if self.redis.url else "(not set)",
            "telegram_enabled": str(self.telegram.enabled),
            "log_level": self.log_level,
            "dry_run": str(self.dry_run),
        }

    @staticmethod
    def _redact_url(url: str) -> str:
        """Redact password from URL if present."""
        if "@" in url and "://" in url:
            protocol_end = url.index("://") + 3
            at_pos = url.index("@")
            creds_part = url[protocol_end:at_pos]
            if ":" in creds_part:
                username = creds_part.split(":")[0]
                return f"{url[:protocol_end]}{username}:***@{url[at_pos + 1 :]}"
        return url


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Raises:
        ValidationError: If required values are missing or invalid.
    """
    return Settings()  # type: ignore[call-arg]


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Useful for testing when you need to reload settings with
    different environment variables.
    """
    get_settings.cache_clear()
