"""Shared utilities for configuration, logging, and delays"""

from recordsync.utils.delay import wait

__all__ = ["wait"]
