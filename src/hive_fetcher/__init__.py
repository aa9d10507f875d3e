"""Hive Fetcher - keyword search over Hive posts through a HAF SQL middleware."""

__version__ = "0.1.0"
