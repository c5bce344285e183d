"""Tests for alert message formatting."""

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from wallet_gas_monitor.alerter.formatter import (
    ACTION_TEXT,
    AlertFormatter,
    escape_markdown,
    format_balance,
    format_usd,
    truncate_address,
)
from wallet_gas_monitor.alerter.models import FormattedAlert

CHECKED_AT = datetime(2026, 3, 1, 12, 30, 0, tzinfo=UTC)


class TestFormatBalance:
    """Tests for native balance formatting."""

    def test_none_is_error(self) -> None:
        assert format_balance(None) == "Error"

    def test_regular_balance_has_six_decimals(self) -> None:
        assert format_balance(Decimal("0.0125")) == "0.012500"

    def test_large_balance(self) -> None:
        assert format_balance(Decimal("12.5")) == "12.500000"

    def test_threshold_boundary_uses_fixed(self) -> None:
        assert format_balance(Decimal("0.0001")) == "0.000100"

    def test_tiny_balance_uses_scientific(self) -> None:
        result = format_balance(Decimal("0.0000123456"))
        assert result.startswith("1.2346e")
        assert result.endswith("-5") or result.endswith("-05")

    def test_zero_balance(self) -> None:
        assert format_balance(Decimal(0)) == "0.0000e+0"

    def test_zero_with_exponent(self) -> None:
        """Division by the lamport or wei scale leaves a non-zero exponent."""
        assert format_balance(Decimal(0) / Decimal(1_000_000_000)) == "0.0000e+0"
        assert format_balance(Decimal("0E-18")) == "0.0000e+0"

    def test_float_input(self) -> None:
        assert format_balance(0.5) == "0.500000"
        assert format_balance(0.00002) == "2.0000e-05"


class TestFormatUsd:
    """Tests for USD formatting."""

    def test_two_decimals(self) -> None:
        assert format_usd(Decimal("30")) == "$30.00"

    def test_rounding(self) -> None:
        assert format_usd(Decimal("3.14159")) == "$3.14"

    def test_none_is_error(self) -> None:
        assert format_usd(None) == "Error"


class TestTruncateAddress:
    """Tests for wallet address shortening."""

    def test_evm_address(self) -> None:
        address = "0x742d35Cc6634C0532925a3b844Bc9e7595f5eaE2"
        assert len(address) == 42
        assert truncate_address(address) == "0x742d...eaE2"

    def test_solana_address(self) -> None:
        address = "4eD1xXy8ry9fwjyzSRRDCvQ9hBqD4doK6sWWCxt1TxGv"
        assert truncate_address(address) == "4eD1xX...TxGv"

    def test_short_address_unmodified(self) -> None:
        assert truncate_address("0x12345678") == "0x12345678"

    def test_twenty_characters_unmodified(self) -> None:
        address = "a" * 20
        assert truncate_address(address) == address

    def test_twenty_one_characters_truncated(self) -> None:
        assert truncate_address("abcdefghijklmnopqrstu") == "abcdef...rstu"


class TestEscapeMarkdown:
    """Tests for Telegram MarkdownV2 escaping."""

    def test_escapes_special_characters(self) -> None:
        assert escape_markdown("$3.00 (BNB)") == "$3\\.00 \\(BNB\\)"

    def test_plain_text_untouched(self) -> None:
        assert escape_markdown("Ethereum") == "Ethereum"

    def test_escapes_backslash(self) -> None:
        assert escape_markdown("a\\b") == "a\\\\b"


class TestAlertFormatter:
    """Tests for composite alert messages."""

    @pytest.fixture
    def formatter(self) -> AlertFormatter:
        return AlertFormatter("UTC")

    def test_returns_formatted_alert(self, formatter, reading_factory) -> None:
        alert = formatter.format(
            [reading_factory(value_usd="30")],
            threshold_usd=Decimal("50"),
            checked_at=CHECKED_AT,
        )

        assert isinstance(alert, FormattedAlert)
        assert alert.title == "Low Gas Balance Alert"

    def test_plain_text_contents(self, formatter, reading_factory) -> None:
        alert = formatter.format(
            [reading_factory(value_usd="30")],
            threshold_usd=Decimal("50"),
            checked_at=CHECKED_AT,
        )

        text = alert.plain_text
        assert "Ethereum" in text
        assert "Balance: 0.010000 ETH" in text
        assert "Value: $30.00" in text
        assert "Wallet: 0x742d...eaE2" in text
        assert ACTION_TEXT in text
        assert "Threshold: $50.00 | Checked: 2026-03-01 12:30:00 UTC" in text

    def test_one_message_for_many_chains(self, formatter, reading_factory) -> None:
        readings = [
            reading_factory("evm_base", "10", name="Base"),
            reading_factory("evm_arbitrum", "20", name="Arbitrum"),
        ]

        alert = formatter.format(readings, threshold_usd=Decimal("50"), checked_at=CHECKED_AT)

        text = alert.plain_text
        assert text.index("Base") < text.index("Arbitrum")
        assert text.count("Balance:") == 2
        assert text.count("Threshold:") == 1

    def test_telegram_markdown_is_escaped(self, formatter, reading_factory) -> None:
        alert = formatter.format(
            [reading_factory(value_usd="30")],
            threshold_usd=Decimal("50"),
            checked_at=CHECKED_AT,
        )

        md = alert.telegram_markdown
        assert md.startswith("⚠️ *Low Gas Balance Alert*")
        assert "🔴 *Ethereum*" in md
        assert "Balance: 0\\.010000 ETH" in md
        assert "Value: $30\\.00" in md
        assert "`0x742d...eaE2`" in md
        assert "Threshold: $50\\.00 \\| Checked: 2026\\-03\\-01 12:30:00 UTC" in md

    def test_display_name_with_markdown_characters(self, formatter, reading_factory) -> None:
        alert = formatter.format(
            [reading_factory("evm_bsc", "5", name="BNB_Chain (BSC)")],
            threshold_usd=Decimal("50"),
            checked_at=CHECKED_AT,
        )

        assert "*BNB\\_Chain \\(BSC\\)*" in alert.telegram_markdown

    def test_timestamp_uses_configured_timezone(self, reading_factory) -> None:
        formatter = AlertFormatter("Africa/Lagos")

        alert = formatter.format(
            [reading_factory(value_usd="30")],
            threshold_usd=Decimal("50"),
            checked_at=CHECKED_AT,
        )

        assert "Checked: 2026-03-01 13:30:00 WAT" in alert.plain_text
