"""Telegram Bot API channel implementation."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from wallet_gas_monitor.alerter.models import FormattedAlert

logger = logging.getLogger(__name__)

TELEGRAM_API_BASE = "https://api.telegram.org/bot{token}/sendMessage"


class TelegramChannel:
    """Telegram Bot API channel for sending alerts.

    One attempt per alert: failures are logged and reported, never retried.
    The next cycle is the retry.
    """

    def __init__(
        self,
        bot_token: str,
        chat_id: str,
        *,
        timeout: float = 10.0,
    ) -> None:
        """Initialize Telegram channel.

        Args:
            bot_token: Telegram bot token.
            chat_id: Target chat/channel ID.
            timeout: HTTP request timeout in seconds.
        """
        self.chat_id = chat_id
        self.timeout = timeout
        self.name = "telegram"

        self._api_url = TELEGRAM_API_BASE.format(token=bot_token)

    async def send(self, alert: FormattedAlert) -> bool:
        """Send alert to the Telegram chat.

        Args:
            alert: Formatted alert with telegram_markdown.

        Returns:
            True if delivery succeeded, False otherwise.
        """
        payload = {
            "chat_id": self.chat_id,
            "text": alert.telegram_markdown,
            "parse_mode": "MarkdownV2",
            "disable_web_page_preview": True,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self._api_url, json=payload)
                result = response.json()
        except httpx.TimeoutException:
            logger.error("Telegram API timeout")
            return False
        except httpx.HTTPError as e:
            logger.error("Telegram send error: %s", e)
            return False
        except ValueError:
            logger.error("Telegram API returned non-JSON response (%s)", response.status_code)
            return False

        if isinstance(result, dict) and result.get("ok"):
            logger.info("Telegram alert delivered successfully")
            return True

        if isinstance(result, dict):
            error_code = result.get("error_code", response.status_code)
            description = result.get("description", "Unknown error")
        else:
            error_code, description = response.status_code, str(result)[:200]
        logger.error("Telegram API error: %s - %s", error_code, description)
        return False
