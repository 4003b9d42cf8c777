"""
Sound Synchronization Engine

Keeps the local sounds directory identical to the remote catalog plus the
bundled sounds. A pass:

    1. Lists local sounds, ignoring bundled ones (stale candidates)
    2. Fetches the remote listing; failure aborts the pass
    3. Downloads every listed sound that is missing locally, in parallel
    4. Deletes local sounds the catalog no longer lists
    5. Copies bundled sounds that are missing
    6. Invalidates the sound inventory cache
    7. Reports a summary and whether the pass fully succeeded

Concurrency Model:
    synchronize() returns immediately with a Future. The pass runs on a
    single coordinator thread (so passes never overlap) and fans downloads
    out to a bounded thread pool. Deletions only start once every download
    has finished. Status lines and the completion flag are handed to a
    caller-supplied dispatch function, letting a UI thread receive them
    instead of the worker threads.

Error Handling:
    - Remote listing unavailable: the only fatal case; nothing is downloaded
      or deleted and completion reports False
    - A single download or deletion failing: logged, counted and reported,
      the pass continues; failures are not retried until the next pass
    - Bundled sounds that cannot be copied: logged as a warning only
    - Anything unexpected: the pass stops, completion reports False and the
      counters keep the work already done
"""

import queue
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Set

from ..assets.bundled import BUNDLED_SOUNDS, is_bundled, provision_bundled_sounds
from ..assets.catalog import AssetCatalog
from ..assets.models import PARTIAL_SUFFIX, RemoteAssetDescriptor
from ..assets.remote import DownloadProgress, RemoteCatalogClient
from ..utils.logger import get_logger, create_operation_logger

MSG_SYNC_FAILED = "Failed to synchronise sounds. Please check your connection and try again."

ProgressCallback = Callable[[str], None]
CompletionCallback = Callable[[bool], None]
Dispatch = Callable[..., None]


def call_inline(callback: Callable[..., None], *args) -> None:
    """Dispatch that runs callbacks directly on the calling worker thread"""
    callback(*args)


class MainThreadDispatcher:
    """
    Dispatch that queues callbacks for the thread that started the sync

    The owning thread drains the queue with run_until_complete(), so every
    progress line and the completion flag run on that thread while the
    network and filesystem work happens elsewhere.
    """

    def __init__(self):
        self._queue: "queue.Queue" = queue.Queue()

    def __call__(self, callback: Callable[..., None], *args) -> None:
        self._queue.put((callback, args))

    def run_pending(self) -> int:
        """Run every queued callback without blocking; returns how many ran"""
        count = 0
        while True:
            try:
                callback, args = self._queue.get_nowait()
            except queue.Empty:
                return count
            callback(*args)
            count += 1

    def run_until_complete(self, future: Future, poll_interval: float = 0.1):
        """
        Run queued callbacks until the pass behind future has finished

        Returns:
            The future's result
        """
        while not future.done():
            try:
                callback, args = self._queue.get(timeout=poll_interval)
            except queue.Empty:
                continue
            callback(*args)
        # Everything the pass dispatched was queued before it finished
        self.run_pending()
        return future.result()


class SyncCounters:
    """Per-pass outcome counters, safe to update from several threads"""

    def __init__(self):
        self._lock = threading.Lock()
        self.downloaded = 0
        self.failed = 0
        self.deleted = 0

    def add_downloaded(self) -> None:
        with self._lock:
            self.downloaded += 1

    def add_failed(self) -> None:
        with self._lock:
            self.failed += 1

    def add_deleted(self) -> None:
        with self._lock:
            self.deleted += 1

    def to_result(self) -> 'SyncResult':
        with self._lock:
            return SyncResult(
                success=self.failed == 0,
                downloaded=self.downloaded,
                failed=self.failed,
                deleted=self.deleted,
            )


@dataclass
class SyncResult:
    """
    Outcome of one synchronisation pass

    Attributes:
        success: True only if the listing was fetched and nothing failed
        downloaded: Sounds downloaded during the pass
        failed: Downloads (or deletions) that failed
        deleted: Stale sounds removed
        listing_failed: True if the pass aborted because the catalog was unavailable
        error_message: Reason for an aborted pass
    """
    success: bool
    downloaded: int = 0
    failed: int = 0
    deleted: int = 0
    listing_failed: bool = False
    error_message: Optional[str] = None

    @property
    def summary(self) -> str:
        """
        Multi-line summary shown to the user at the end of a pass

        The restart hint only appears when something failed, because the
        pass does not retry on its own.
        """
        if self.listing_failed or self.error_message:
            return MSG_SYNC_FAILED

        message = (
            "Done!\n"
            f"-> Downloaded {self.downloaded} new sound(s).\n"
            f"-> Deleted {self.deleted} old sound(s).\n"
        )
        if self.failed > 0:
            message += (
                f"\nFailed to sync {self.failed} sound(s).\n"
                "Please restart the app to try again."
            )
        return message


class AssetSynchronizer:
    """
    Reconciles the sounds directory with a RemoteCatalogClient

    Args:
        client: Remote catalog to mirror
        catalog: Inventory cache to invalidate after each pass
        directory: Sounds directory (defaults to the catalog's directory)
        bundled: File names that are never deleted or downloaded
        bundled_source: Directory the bundled sounds are copied from
        max_workers: Parallel downloads
        dispatch: Default dispatch for callbacks (runs inline when omitted)
    """

    def __init__(
        self,
        client: RemoteCatalogClient,
        catalog: AssetCatalog,
        directory: Optional[Path] = None,
        bundled: Iterable[str] = BUNDLED_SOUNDS,
        bundled_source: Optional[Path] = None,
        max_workers: int = 4,
        dispatch: Dispatch = call_inline
    ):
        self.client = client
        self.catalog = catalog
        self.directory = Path(directory) if directory is not None else catalog.directory
        self.bundled = tuple(bundled)
        self.bundled_source = bundled_source
        self.max_workers = max(1, int(max_workers))
        self.dispatch = dispatch
        self.logger = get_logger(__name__)

        self._coordinator = ThreadPoolExecutor(max_workers=1, thread_name_prefix="sound-sync")

    def synchronize(
        self,
        on_progress: ProgressCallback,
        on_complete: CompletionCallback,
        on_download_progress: Optional[DownloadProgress] = None,
        dispatch: Optional[Dispatch] = None
    ) -> "Future[SyncResult]":
        """
        Start a synchronisation pass in the background

        Args:
            on_progress: Receives one human-readable line per unit of work
                and the final summary
            on_complete: Receives True if the pass fully succeeded; called
                exactly once, after all downloads and deletions finished
            on_download_progress: Optional per-download byte progress hook
            dispatch: Overrides the dispatch used for callbacks of this pass

        Returns:
            Future resolving to the SyncResult
        """
        return self._coordinator.submit(
            self.run_pass, on_progress, on_complete, on_download_progress, dispatch
        )

    def run_pass(
        self,
        on_progress: ProgressCallback,
        on_complete: CompletionCallback,
        on_download_progress: Optional[DownloadProgress] = None,
        dispatch: Optional[Dispatch] = None
    ) -> SyncResult:
        """Run one synchronisation pass on the current thread"""
        dispatch = dispatch or self.dispatch
        counters = SyncCounters()
        operation_logger = create_operation_logger(__name__, "Sound sync")
        operation_logger.start(f"Synchronising {self.directory}")

        def report(message: str) -> None:
            dispatch(on_progress, message)

        try:
            stale = self._list_local_files()

            listing = self.client.list_remote_assets()
            if not listing.success:
                operation_logger.error(f"Remote listing unavailable: {listing.error or 'no data'}")
                report(MSG_SYNC_FAILED)
                dispatch(on_complete, False)
                return SyncResult(success=False, listing_failed=True,
                                  error_message=listing.error or "no data")

            # Decide everything that stays before any download starts
            missing: List[RemoteAssetDescriptor] = []
            for descriptor in listing.assets:
                if is_bundled(descriptor.file_name, self.bundled):
                    self.logger.debug(f"Ignoring bundled sound in remote listing: {descriptor.file_name}")
                    continue
                stale.discard(descriptor.file_name)
                if not (self.directory / descriptor.file_name).exists():
                    missing.append(descriptor)

            operation_logger.progress(
                f"{len(listing.assets)} remote sounds, {len(missing)} to download, {len(stale)} to delete"
            )

            self._download_all(missing, counters, report, on_download_progress, dispatch, operation_logger)
            self._delete_all(sorted(stale), counters, report)
            self._provision_bundled(operation_logger)

        except Exception as e:
            operation_logger.error("Unexpected error during sync", e)
            self.catalog.invalidate()
            # Work already done on disk stays counted
            result = counters.to_result()
            result.success = False
            result.error_message = str(e)
            report(MSG_SYNC_FAILED)
            dispatch(on_complete, False)
            return result

        self.catalog.invalidate()

        result = counters.to_result()
        operation_logger.complete(result.summary)
        report(result.summary)
        dispatch(on_complete, result.success)
        return result

    def _list_local_files(self) -> Set[str]:
        """
        Local sounds that are candidates for deletion

        Leftovers of interrupted downloads are removed here without being
        counted; they are not sounds.
        """
        if not self.directory.exists():
            self.directory.mkdir(parents=True, exist_ok=True)
            return set()

        names = set()
        for entry in self.directory.iterdir():
            if not entry.is_file() or is_bundled(entry.name, self.bundled):
                continue
            if entry.name.endswith(PARTIAL_SUFFIX):
                self._discard_partial(entry)
                continue
            names.add(entry.name)
        return names

    def _discard_partial(self, path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            self.logger.warning(f"Could not remove partial download {path.name}: {e}")
            return
        self.logger.debug(f"Removed partial download: {path.name}")

    def _provision_bundled(self, operation_logger) -> None:
        """Copy missing bundled sounds; a local copy failure does not fail the pass"""
        try:
            provision_bundled_sounds(self.directory, self.bundled_source, self.bundled)
        except OSError as e:
            operation_logger.warning(f"Could not restore bundled sounds: {e}")
            self.logger.debug("Bundled sound copy failed", exc_info=e)

    def _download_all(
        self,
        descriptors: List[RemoteAssetDescriptor],
        counters: SyncCounters,
        report: ProgressCallback,
        on_download_progress: Optional[DownloadProgress],
        dispatch: Dispatch,
        operation_logger
    ) -> None:
        """Download every descriptor in parallel and wait for all of them"""
        if not descriptors:
            return

        progress_hook = None
        if on_download_progress:
            def progress_hook(file_name, written, total):
                dispatch(on_download_progress, file_name, written, total)

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="sound-download") as executor:
            future_to_descriptor = {
                executor.submit(self.client.download, descriptor, self.directory, progress_hook): descriptor
                for descriptor in descriptors
            }

            completed = 0
            for future in as_completed(future_to_descriptor):
                descriptor = future_to_descriptor[future]
                completed += 1
                try:
                    future.result()
                except Exception as e:
                    counters.add_failed()
                    report(f"Failed to download: {descriptor.file_name}")
                    self.logger.error(f"Failed to download: {descriptor.file_name}", exc_info=e)
                else:
                    counters.add_downloaded()
                    report(f"Downloaded: {descriptor.file_name}")
                operation_logger.progress("Downloading sounds", completed, len(descriptors))

    def _delete_all(self, file_names: List[str], counters: SyncCounters, report: ProgressCallback) -> None:
        for file_name in file_names:
            try:
                (self.directory / file_name).unlink()
            except FileNotFoundError:
                self.logger.debug(f"Stale sound already gone: {file_name}")
            except OSError as e:
                counters.add_failed()
                report(f"Failed to delete: {file_name}")
                self.logger.error(f"Failed to delete: {file_name}", exc_info=e)
                continue
            counters.add_deleted()
            report(f"Deleted old sound: {file_name}")

    def close(self) -> None:
        """Wait for a running pass and release the coordinator thread"""
        self._coordinator.shutdown(wait=True)
