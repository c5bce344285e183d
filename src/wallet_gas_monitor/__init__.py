"""Wallet Gas Monitor - low native-token balance alerts across chains."""

__version__ = "0.1.0"
