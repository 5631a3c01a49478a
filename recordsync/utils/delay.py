"""Blocking delay primitive used between polling rounds."""

import time


def wait(milliseconds: int) -> None:
    """Suspend the current run for the given number of milliseconds."""
    if milliseconds < 0:
        raise ValueError(f"milliseconds must be non-negative, got {milliseconds}")
    time.sleep(milliseconds / 1000)
