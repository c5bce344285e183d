"""Tests for the CLI entry point."""

from __future__ import annotations

import logging
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from wallet_gas_monitor.__main__ import (
    EXIT_CONFIG_ERROR,
    EXIT_ERROR,
    EXIT_SUCCESS,
    configure_logging,
    create_parser,
    main,
    print_config_summary,
    run_config_check,
    run_monitor,
    validate_config,
)
from wallet_gas_monitor.config import Settings


@pytest.fixture
def valid_env(monkeypatch, evm_address, solana_address) -> None:
    monkeypatch.setenv("THRESHOLD_USD", "50")
    monkeypatch.setenv("EVM_ADDRESS", evm_address)
    monkeypatch.setenv("SOLANA_ADDRESS", solana_address)


class TestCreateParser:
    """Tests for argument parser creation."""

    def test_parser_has_version(self):
        """Parser should have version flag."""
        parser = create_parser()
        with pytest.raises(SystemExit) as exc_info:
            parser.parse_args(["--version"])
        assert exc_info.value.code == 0

    def test_parser_flags(self):
        parser = create_parser()
        args = parser.parse_args(["--config-check", "--once", "--dry-run", "--log-level", "DEBUG"])
        assert args.config_check is True
        assert args.once is True
        assert args.dry_run is True
        assert args.log_level == "DEBUG"

    def test_parser_default_values(self):
        """Parser should have correct defaults."""
        args = create_parser().parse_args([])
        assert args.config_check is False
        assert args.once is False
        assert args.log_level is None
        assert args.dry_run is False


class TestConfigureLogging:
    """Tests for logging configuration."""

    def test_configure_logging_info(self):
        configure_logging("INFO")
        assert logging.getLogger().level == logging.INFO
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_configure_logging_debug(self):
        configure_logging("DEBUG")
        assert logging.getLogger().level == logging.DEBUG


class TestPrintConfigSummary:
    """Tests for the startup summary."""

    def test_summary_contents(self, valid_env, capsys, evm_address, solana_address):
        print_config_summary(Settings(), dry_run=True)

        out = capsys.readouterr().out
        assert "Wallet Gas Monitor v0.1.0" in out
        assert f"EVM: {evm_address}" in out
        assert f"SOL: {solana_address}" in out
        assert "Threshold: $50" in out
        assert "Check interval: 30 minutes" in out
        assert "Alert cooldown: 6.0 hours" in out
        assert "Cooldown store: state.json" in out
        assert "Telegram: disabled" in out
        assert "Dry Run: True" in out


class TestValidateConfig:
    """Tests for configuration validation."""

    def test_validate_config_success(self, valid_env):
        settings = validate_config()
        assert settings is not None
        assert settings.threshold_usd == Decimal("50")

    def test_validate_config_failure(self, capsys):
        assert validate_config() is None

        captured = capsys.readouterr()
        assert "Configuration validation failed" in captured.err
        assert "threshold_usd" in captured.err


class TestRunConfigCheck:
    """Tests for config check mode."""

    def test_config_check_prints_summary(self, valid_env, capsys):
        settings = validate_config()
        assert settings is not None

        assert run_config_check(settings) == EXIT_SUCCESS

        out = capsys.readouterr().out
        assert "Configuration is valid!" in out
        assert "Telegram is not configured" in out


class TestRunMonitor:
    """Tests for run_monitor."""

    @pytest.fixture
    def cycle(self) -> MagicMock:
        cycle = MagicMock()
        cycle.run = AsyncMock(return_value=MagicMock(aborted=False))
        cycle.close = AsyncMock()
        return cycle

    @pytest.mark.asyncio
    async def test_once_success(self, cycle, valid_env):
        code = await run_monitor(cycle, Settings(), once=True)

        assert code == EXIT_SUCCESS
        cycle.run.assert_awaited_once()
        cycle.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_once_aborted_cycle_is_error(self, cycle, valid_env):
        cycle.run.return_value = MagicMock(aborted=True)

        assert await run_monitor(cycle, Settings(), once=True) == EXIT_ERROR
        cycle.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_loop_uses_scheduler(self, cycle, valid_env):
        with patch(
            "wallet_gas_monitor.__main__.run_forever", new=AsyncMock(return_value=1)
        ) as mock_run_forever:
            code = await run_monitor(cycle, Settings(), once=False)

        assert code == EXIT_SUCCESS
        assert mock_run_forever.call_args.kwargs["interval_minutes"] == 30
        cycle.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unexpected_error(self, cycle, valid_env):
        cycle.run.side_effect = RuntimeError("boom")

        assert await run_monitor(cycle, Settings(), once=True) == EXIT_ERROR
        cycle.close.assert_awaited_once()


class TestMain:
    """Tests for main entry point."""

    def test_main_with_config_check(self, valid_env):
        with pytest.raises(SystemExit) as exc_info:
            main(["--config-check"])

        assert exc_info.value.code == EXIT_SUCCESS

    def test_main_with_invalid_config(self):
        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == EXIT_CONFIG_ERROR

    @patch("wallet_gas_monitor.__main__.build_cycle")
    @patch("wallet_gas_monitor.__main__.asyncio.run")
    def test_main_runs_monitor(self, mock_asyncio_run, mock_build_cycle, valid_env):
        mock_asyncio_run.side_effect = lambda coro: coro.close() or EXIT_SUCCESS

        with pytest.raises(SystemExit) as exc_info:
            main(["--once", "--dry-run"])

        assert exc_info.value.code == EXIT_SUCCESS
        mock_asyncio_run.assert_called_once()
        assert mock_build_cycle.call_args.kwargs["dry_run"] is True

    def test_cli_help_option(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["-h"])

        assert exc_info.value.code == 0
        out = capsys.readouterr().out
        assert "wallet-gas-monitor" in out
        assert "--once" in out

    def test_cli_invalid_log_level(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--log-level", "INVALID"])

        assert exc_info.value.code != 0
        assert "invalid choice" in capsys.readouterr().err
