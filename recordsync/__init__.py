"""Batched record replication with timestamp-based change polling."""

__version__ = "0.1.0"
