"""Durable storage for alert cooldown timestamps.

The whole cooldown map is read and written in one piece. Two backends are
provided: a JSON file (the default) and a single Redis key. Both store the
same document, ``{"lastAlerts": {alert_key: epoch_ms}}``.
"""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any, Protocol

from wallet_gas_monitor.alerter.models import CooldownState
from wallet_gas_monitor.exceptions import PersistenceError
from wallet_gas_monitor.storage import write_atomic

logger = logging.getLogger(__name__)

STATE_FIELD = "lastAlerts"
DEFAULT_REDIS_KEY = "wallet_monitor:cooldowns"


class CooldownStore(Protocol):
    """Protocol for cooldown state persistence."""

    async def load(self) -> CooldownState:
        """Return the stored state, or an empty map. Never raises."""
        ...

    async def save(self, state: CooldownState) -> None:
        """Overwrite the stored state. Raises PersistenceError on failure."""
        ...

    async def close(self) -> None:
        """Release any backend connections."""
        ...


def decode_state(raw: str | bytes | None) -> CooldownState:
    """Parse a stored document, dropping anything that is not key -> int."""
    if raw is None:
        return {}
    try:
        document = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.warning("Cooldown state unreadable, starting fresh: %s", e)
        return {}

    entries = document.get(STATE_FIELD) if isinstance(document, dict) else None
    if not isinstance(entries, dict):
        logger.warning("Cooldown state has no %s map, starting fresh", STATE_FIELD)
        return {}

    state: CooldownState = {}
    for key, value in entries.items():
        if isinstance(value, int | float) and not isinstance(value, bool) and math.isfinite(value):
            state[str(key)] = int(value)
        else:
            logger.warning("Ignoring invalid cooldown entry %s=%r", key, value)
    return state


def encode_state(state: CooldownState) -> str:
    return json.dumps({STATE_FIELD: dict(state)}, indent=2, sort_keys=True)


class JsonFileCooldownStore:
    """Cooldown state in a local JSON file, replaced atomically on save."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    async def load(self) -> CooldownState:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("No cooldown state at %s", self.path)
            return {}
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read cooldown state %s: %s", self.path, e)
            return {}
        return decode_state(raw)

    async def save(self, state: CooldownState) -> None:
        try:
            write_atomic(self.path, encode_state(state))
        except OSError as e:
            raise PersistenceError(f"Could not write cooldown state {self.path}: {e}") from e
        logger.debug("Saved cooldown state for %d key(s)", len(state))

    async def close(self) -> None:
        """Nothing to release for file storage."""


class RedisCooldownStore:
    """Cooldown state under a single Redis key.

    Args:
        redis: Async Redis client (``redis.asyncio.Redis``).
        key: Redis key holding the JSON document.
    """

    def __init__(self, redis: Any, *, key: str = DEFAULT_REDIS_KEY) -> None:
        self.redis = redis
        self.key = key

    async def load(self) -> CooldownState:
        try:
            raw = await self.redis.get(self.key)
        except Exception as e:
            logger.warning("Could not read cooldown state from Redis: %s", e)
            return {}
        return decode_state(raw)

    async def save(self, state: CooldownState) -> None:
        try:
            await self.redis.set(self.key, encode_state(state))
        except Exception as e:
            raise PersistenceError(f"Could not write cooldown state to Redis: {e}") from e
        logger.debug("Saved cooldown state for %d key(s) to %s", len(state), self.key)

    async def close(self) -> None:
        """Close the underlying Redis connection pool."""
        await self.redis.aclose()
