"""Exception hierarchy for the wallet monitor."""


class WalletMonitorError(Exception):
    """Base exception for wallet monitor errors."""


class PriceFetchError(WalletMonitorError):
    """Raised when the price oracle cannot be reached or returns bad data.

    Fatal for the current check cycle only.
    """


class BalanceReadError(WalletMonitorError):
    """Raised when a chain RPC call fails or returns a malformed result."""


class PersistenceError(WalletMonitorError):
    """Raised when cooldown state or the status snapshot cannot be written."""
