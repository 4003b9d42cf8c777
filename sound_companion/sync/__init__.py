"""
Synchronization package for keeping the sounds directory up to date

Components:

**AssetSynchronizer (synchronizer.py):**
- Reconciles the sounds directory against the remote catalog
- Downloads missing sounds in parallel, deletes stale ones, restores bundled sounds
- Reports progress lines and a final success flag through caller-supplied callbacks

**SyncResult / SyncCounters:**
- Per-pass counters (downloaded, failed, deleted) and the user-facing summary

**MainThreadDispatcher:**
- Queues callbacks so the thread that started a pass receives them

**is_sync_due (scheduler.py):**
- Pure check of whether enough time passed since the last successful sync

Usage Example:

    catalog = AssetCatalog(Path("sounds"))
    synchronizer = AssetSynchronizer(HttpCatalogClient(url), catalog)
    if is_sync_due(state.get_last_sync()):
        dispatcher = MainThreadDispatcher()
        future = synchronizer.synchronize(print, on_done, dispatch=dispatcher)
        result = dispatcher.run_until_complete(future)
"""

from .synchronizer import (
    AssetSynchronizer,
    SyncResult,
    SyncCounters,
    MainThreadDispatcher,
    call_inline,
    MSG_SYNC_FAILED,
)
from .scheduler import is_sync_due, SYNC_PERIOD

__all__ = [
    'AssetSynchronizer',
    'SyncResult',
    'SyncCounters',
    'MainThreadDispatcher',
    'call_inline',
    'MSG_SYNC_FAILED',
    'is_sync_due',
    'SYNC_PERIOD',
]
