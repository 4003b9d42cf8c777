"""Test sound synchronisation passes"""

import logging
import threading
import pytest
from pathlib import Path

from sound_companion.assets import bundled as bundled_module
from sound_companion.sync.synchronizer import (
    AssetSynchronizer,
    MainThreadDispatcher,
    SyncCounters,
    SyncResult,
    MSG_SYNC_FAILED,
)
from tests.conftest import BUNDLED, FakeCatalogClient, write_sounds


def local_files(directory: Path):
    return {p.name for p in directory.iterdir()}


class Recorder:
    """Collects callback invocations"""

    def __init__(self):
        self.lines = []
        self.completed = []
        self.complete_threads = []

    def on_progress(self, line):
        self.lines.append(line)

    def on_complete(self, success):
        self.completed.append(success)
        self.complete_threads.append(threading.current_thread().name)


def make_synchronizer(client, catalog, bundled_dir, workers=4):
    return AssetSynchronizer(client, catalog, bundled=BUNDLED, bundled_source=bundled_dir, max_workers=workers)


class TestSynchronize:
    """Test reconciliation against the remote catalog"""

    def test_downloads_missing_and_deletes_stale(self, sounds_dir, catalog, bundled_dir):
        """Test the a.mp3 / old.wav / b.mp3 scenario"""
        write_sounds(sounds_dir, "a.mp3", "old.wav")
        client = FakeCatalogClient(["a.mp3", "b.mp3"])
        recorder = Recorder()

        synchronizer = make_synchronizer(client, catalog, bundled_dir)
        result = synchronizer.run_pass(recorder.on_progress, recorder.on_complete)

        assert result.success
        assert result.downloaded == 1
        assert result.deleted == 1
        assert result.failed == 0
        assert client.downloads == ["b.mp3"]
        assert local_files(sounds_dir) == {"a.mp3", "b.mp3"} | set(BUNDLED)
        # Untouched file keeps its local content
        assert (sounds_dir / "a.mp3").read_bytes() == b"local a.mp3"
        assert "Downloaded: b.mp3" in recorder.lines
        assert "Deleted old sound: old.wav" in recorder.lines
        assert recorder.completed == [True]

    def test_local_set_matches_remote_plus_bundled(self, sounds_dir, catalog, bundled_dir):
        """Test final directory equals remote names plus bundled sounds"""
        write_sounds(sounds_dir, "x.mp3", "y.mp3", "z.mp3")
        remote = ["y.mp3", "new1.mp3", "new2.wav", "new3.ogg"]
        client = FakeCatalogClient(remote)

        result = make_synchronizer(client, catalog, bundled_dir).run_pass(lambda l: None, lambda s: None)

        assert local_files(sounds_dir) == set(remote) | set(BUNDLED)
        assert result.downloaded == 3
        assert result.deleted == 2

    def test_second_pass_is_idempotent(self, sounds_dir, catalog, bundled_dir):
        """Test an unchanged catalog causes no work the second time"""
        write_sounds(sounds_dir, "old.wav")
        client = FakeCatalogClient(["a.mp3", "b.mp3"])
        synchronizer = make_synchronizer(client, catalog, bundled_dir)

        synchronizer.run_pass(lambda l: None, lambda s: None)
        client.downloads.clear()
        second = synchronizer.run_pass(lambda l: None, lambda s: None)

        assert second.success
        assert second.downloaded == 0
        assert second.deleted == 0
        assert client.downloads == []

    def test_bundled_sounds_never_deleted(self, sounds_dir, catalog, bundled_dir):
        """Test bundled sounds survive even though the catalog does not list them"""
        (sounds_dir / "welost.wav").write_bytes(b"custom")
        client = FakeCatalogClient(["a.mp3"])

        result = make_synchronizer(client, catalog, bundled_dir).run_pass(lambda l: None, lambda s: None)

        assert result.deleted == 0
        # Existing bundled file is not overwritten
        assert (sounds_dir / "welost.wav").read_bytes() == b"custom"
        assert (sounds_dir / "herewegoagain.wav").exists()

    def test_bundled_name_in_listing_is_not_downloaded(self, sounds_dir, catalog, bundled_dir):
        """Test bundled sounds are never requested from the catalog"""
        client = FakeCatalogClient(["welost.wav", "a.mp3"])

        result = make_synchronizer(client, catalog, bundled_dir).run_pass(lambda l: None, lambda s: None)

        assert client.downloads == ["a.mp3"]
        assert result.downloaded == 1

    def test_missing_bundled_resource_is_skipped(self, sounds_dir, catalog, temp_dir):
        """Test a bundled sound missing from the package does not fail the pass"""
        empty = temp_dir / "empty"
        empty.mkdir()
        client = FakeCatalogClient(["a.mp3"])

        synchronizer = AssetSynchronizer(client, catalog, bundled=BUNDLED, bundled_source=empty)
        result = synchronizer.run_pass(lambda l: None, lambda s: None)

        assert result.success
        assert local_files(sounds_dir) == {"a.mp3"}

    def test_missing_sounds_directory_is_created(self, temp_dir, bundled_dir):
        """Test a first run without a sounds directory"""
        from sound_companion.assets.catalog import AssetCatalog

        directory = temp_dir / "does-not-exist"
        client = FakeCatalogClient(["a.mp3"])
        synchronizer = make_synchronizer(client, AssetCatalog(directory), bundled_dir)

        result = synchronizer.run_pass(lambda l: None, lambda s: None)

        assert result.success
        assert local_files(directory) == {"a.mp3"} | set(BUNDLED)


class TestSyncFailures:
    """Test failure isolation and the fatal listing failure"""

    def test_listing_failure_aborts_pass(self, sounds_dir, catalog, bundled_dir):
        """Test nothing is downloaded or deleted when the listing fails"""
        write_sounds(sounds_dir, "old.wav")
        client = FakeCatalogClient(["a.mp3"], listing_ok=False)
        recorder = Recorder()

        result = make_synchronizer(client, catalog, bundled_dir).run_pass(
            recorder.on_progress, recorder.on_complete
        )

        assert not result.success
        assert result.listing_failed
        assert result.downloaded == result.deleted == 0
        assert recorder.lines == [MSG_SYNC_FAILED]
        assert recorder.completed == [False]
        assert local_files(sounds_dir) == {"old.wav"}
        assert client.downloads == []

    def test_single_download_failure_is_isolated(self, sounds_dir, catalog, bundled_dir):
        """Test one failing download does not stop the others"""
        names = [f"sound{i}.mp3" for i in range(6)]
        client = FakeCatalogClient(names, fail=["sound3.mp3"])
        recorder = Recorder()

        result = make_synchronizer(client, catalog, bundled_dir).run_pass(
            recorder.on_progress, recorder.on_complete
        )

        assert not result.success
        assert result.failed == 1
        assert result.downloaded == 5
        assert recorder.completed == [False]
        assert "Failed to download: sound3.mp3" in recorder.lines
        for name in names:
            if name != "sound3.mp3":
                assert (sounds_dir / name).exists()
                assert f"Downloaded: {name}" in recorder.lines
        assert not (sounds_dir / "sound3.mp3").exists()

    def test_failure_summary_asks_for_restart(self, sounds_dir, catalog, bundled_dir):
        """Test the summary mentions failures and the restart hint"""
        client = FakeCatalogClient(["a.mp3", "b.mp3"], fail=["b.mp3"])
        recorder = Recorder()

        make_synchronizer(client, catalog, bundled_dir).run_pass(recorder.on_progress, recorder.on_complete)

        summary = recorder.lines[-1]
        assert summary.startswith("Done!")
        assert "Failed to sync 1 sound(s)." in summary
        assert "Please restart the app to try again." in summary

    def test_failed_download_leaves_stale_decision_unchanged(self, sounds_dir, catalog, bundled_dir):
        """Test a listed sound is never deleted, even if its re-download fails"""
        write_sounds(sounds_dir, "keep.mp3")
        client = FakeCatalogClient(["keep.mp3", "broken.mp3"], fail=["broken.mp3"])

        result = make_synchronizer(client, catalog, bundled_dir).run_pass(lambda l: None, lambda s: None)

        assert result.deleted == 0
        assert (sounds_dir / "keep.mp3").exists()

    def test_failed_deletion_is_counted(self, sounds_dir, catalog, bundled_dir, monkeypatch):
        """Test a stale sound that cannot be removed fails the pass but not the other deletions"""
        write_sounds(sounds_dir, "locked.wav", "old1.wav", "old2.wav")
        original_unlink = Path.unlink

        def unlink(path, *args, **kwargs):
            if path.name == "locked.wav":
                raise PermissionError("in use")
            return original_unlink(path, *args, **kwargs)

        monkeypatch.setattr(Path, "unlink", unlink)
        client = FakeCatalogClient(["a.mp3"])
        recorder = Recorder()

        result = make_synchronizer(client, catalog, bundled_dir).run_pass(
            recorder.on_progress, recorder.on_complete
        )

        assert not result.success
        assert result.failed == 1
        assert result.deleted == 2
        assert result.downloaded == 1
        assert "Failed to delete: locked.wav" in recorder.lines
        assert "Deleted old sound: old1.wav" in recorder.lines
        assert "Deleted old sound: old2.wav" in recorder.lines
        assert "Failed to sync 1 sound(s)." in recorder.lines[-1]
        assert recorder.completed == [False]
        assert (sounds_dir / "locked.wav").exists()
        assert not (sounds_dir / "old1.wav").exists()
        assert not (sounds_dir / "old2.wav").exists()

    def test_stale_sound_already_gone_counts_as_deleted(self, sounds_dir, catalog, bundled_dir):
        """Test a stale sound removed by someone else during the pass"""
        write_sounds(sounds_dir, "vanish.wav")

        class VanishingClient(FakeCatalogClient):
            def list_remote_assets(self):
                (sounds_dir / "vanish.wav").unlink()
                return super().list_remote_assets()

        recorder = Recorder()
        result = make_synchronizer(VanishingClient(["a.mp3"]), catalog, bundled_dir).run_pass(
            recorder.on_progress, recorder.on_complete
        )

        assert result.success
        assert result.deleted == 1
        assert result.failed == 0
        assert "Deleted old sound: vanish.wav" in recorder.lines
        assert recorder.completed == [True]

    def test_bundled_copy_failure_is_not_fatal(self, sounds_dir, catalog, bundled_dir, monkeypatch, caplog):
        """Test a local copy error keeps the work already done and the normal summary"""
        write_sounds(sounds_dir, "old.wav")

        def copyfile(source, target):
            raise PermissionError("read-only")

        monkeypatch.setattr(bundled_module.shutil, "copyfile", copyfile)
        client = FakeCatalogClient(["a.mp3"])
        recorder = Recorder()

        with caplog.at_level(logging.WARNING):
            result = make_synchronizer(client, catalog, bundled_dir).run_pass(
                recorder.on_progress, recorder.on_complete
            )

        assert result.success
        assert result.downloaded == 1
        assert result.deleted == 1
        assert recorder.lines[:2] == ["Downloaded: a.mp3", "Deleted old sound: old.wav"]
        assert recorder.lines[-1].startswith("Done!")
        assert MSG_SYNC_FAILED not in recorder.lines
        assert recorder.completed == [True]
        assert "Could not restore bundled sounds" in caplog.text

    def test_unexpected_error_keeps_counters(self, sounds_dir, catalog, bundled_dir, monkeypatch):
        """Test an unexpected error still reports the downloads already made"""
        client = FakeCatalogClient(["a.mp3"])
        recorder = Recorder()
        synchronizer = make_synchronizer(client, catalog, bundled_dir)

        def explode(*args):
            raise RuntimeError("boom")

        monkeypatch.setattr(synchronizer, "_delete_all", explode)

        result = synchronizer.run_pass(recorder.on_progress, recorder.on_complete)

        assert not result.success
        assert not result.listing_failed
        assert result.downloaded == 1
        assert result.error_message == "boom"
        assert recorder.lines[-1] == MSG_SYNC_FAILED
        assert recorder.completed == [False]

    def test_partial_leftover_is_removed_quietly(self, sounds_dir, catalog, bundled_dir):
        """Test an interrupted download from an earlier pass is not reported as a deleted sound"""
        (sounds_dir / "a.mp3.part").write_bytes(b"half")
        client = FakeCatalogClient(["a.mp3"])
        recorder = Recorder()

        result = make_synchronizer(client, catalog, bundled_dir).run_pass(
            recorder.on_progress, recorder.on_complete
        )

        assert result.success
        assert result.deleted == 0
        assert client.downloads == ["a.mp3"]
        assert not (sounds_dir / "a.mp3.part").exists()
        assert (sounds_dir / "a.mp3").exists()
        assert not any(".part" in line for line in recorder.lines)


class TestSyncConcurrency:
    """Test background execution and callback dispatch"""

    def test_synchronize_returns_future(self, sounds_dir, catalog, bundled_dir):
        """Test synchronize runs in the background and resolves to the result"""
        client = FakeCatalogClient(["a.mp3", "b.mp3"])
        recorder = Recorder()
        synchronizer = make_synchronizer(client, catalog, bundled_dir)

        future = synchronizer.synchronize(recorder.on_progress, recorder.on_complete)
        result = future.result(timeout=10)
        synchronizer.close()

        assert isinstance(result, SyncResult)
        assert result.downloaded == 2
        assert recorder.completed == [True]

    def test_downloads_run_off_caller_thread(self, sounds_dir, catalog, bundled_dir):
        """Test downloads happen on the download pool"""
        client = FakeCatalogClient(["a.mp3", "b.mp3", "c.mp3"])
        synchronizer = make_synchronizer(client, catalog, bundled_dir, workers=2)

        synchronizer.synchronize(lambda l: None, lambda s: None).result(timeout=10)
        synchronizer.close()

        assert all(name.startswith("sound-download") for name in client.threads.values())

    def test_main_thread_dispatcher_runs_callbacks_on_caller(self, sounds_dir, catalog, bundled_dir):
        """Test callbacks are marshalled to the thread draining the dispatcher"""
        client = FakeCatalogClient(["a.mp3", "b.mp3"])
        recorder = Recorder()
        dispatcher = MainThreadDispatcher()
        synchronizer = make_synchronizer(client, catalog, bundled_dir)

        future = synchronizer.synchronize(recorder.on_progress, recorder.on_complete, dispatch=dispatcher)
        result = dispatcher.run_until_complete(future)
        synchronizer.close()

        assert result.success
        assert recorder.complete_threads == [threading.current_thread().name]
        # Completion arrives after every status line, summary last
        assert recorder.lines[-1].startswith("Done!")
        assert len([l for l in recorder.lines if l.startswith("Downloaded: ")]) == 2

    def test_download_progress_is_reported(self, sounds_dir, catalog, bundled_dir):
        """Test per-download byte progress reaches the hook"""
        client = FakeCatalogClient(["a.mp3"])
        progress = []

        make_synchronizer(client, catalog, bundled_dir).run_pass(
            lambda l: None, lambda s: None,
            on_download_progress=lambda name, written, total: progress.append((name, written, total))
        )

        assert progress == [("a.mp3", 5, 5)]

    def test_catalog_invalidated_after_pass(self, sounds_dir, catalog, bundled_dir):
        """Test lookups see the new files after a pass"""
        assert catalog.list_all() == []
        write_sounds(sounds_dir, "warm.mp3")
        assert [a.file_name for a in catalog.list_all()] == ["warm.mp3"]

        client = FakeCatalogClient(["fresh.mp3"])
        make_synchronizer(client, catalog, bundled_dir).run_pass(lambda l: None, lambda s: None)

        names = {a.file_name for a in catalog.list_all()}
        assert names == {"fresh.mp3"} | set(BUNDLED)


class TestSyncCounters:
    """Test counters and summary text"""

    def test_run_pending_drains_queue(self):
        dispatcher = MainThreadDispatcher()
        calls = []
        dispatcher(calls.append, 1)
        dispatcher(calls.append, 2)

        assert dispatcher.run_pending() == 2
        assert calls == [1, 2]
        assert dispatcher.run_pending() == 0

    def test_counters_are_thread_safe(self):
        counters = SyncCounters()

        def work():
            for _ in range(1000):
                counters.add_downloaded()

        threads = [threading.Thread(target=work) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert counters.to_result().downloaded == 8000

    def test_summary_without_failures(self):
        result = SyncResult(success=True, downloaded=3, deleted=1)
        assert result.summary == (
            "Done!\n"
            "-> Downloaded 3 new sound(s).\n"
            "-> Deleted 1 old sound(s).\n"
        )
        assert "restart" not in result.summary
