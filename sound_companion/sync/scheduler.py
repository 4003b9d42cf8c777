"""
Decides when the sounds should be synchronised again
"""

import time
from typing import Optional

# How often (in seconds) to check for new sounds
SYNC_PERIOD = 24 * 60 * 60


def is_sync_due(last_sync: Optional[float], now: Optional[float] = None, period: float = SYNC_PERIOD) -> bool:
    """
    Should we check for new sounds?

    Args:
        last_sync: POSIX timestamp of the last successful sync, None if never
        now: Current POSIX timestamp (defaults to time.time())
        period: Minimum seconds between syncs

    Returns:
        True once at least period seconds have passed since last_sync
    """
    if not last_sync:
        return True
    if now is None:
        now = time.time()
    return now - last_sync >= period
