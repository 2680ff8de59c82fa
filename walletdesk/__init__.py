"""Walletdesk wallet back office server."""

__version__ = "0.1.0"
