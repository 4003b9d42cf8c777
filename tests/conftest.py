"""Test configuration and fixtures"""

import threading
import pytest
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

from sound_companion.assets.catalog import AssetCatalog
from sound_companion.assets.models import RemoteAssetDescriptor, RemoteListing
from sound_companion.assets.remote import RemoteCatalogClient
from sound_companion.exceptions import DownloadError

BUNDLED = ("herewegoagain.wav", "useyourmidas.wav", "welost.wav")


class FakeCatalogClient(RemoteCatalogClient):
    """In-memory remote catalog that writes the sound name as file content"""

    def __init__(self, file_names: Optional[List[str]] = None, fail: Optional[List[str]] = None,
                 listing_ok: bool = True):
        self.file_names = list(file_names or [])
        self.fail = set(fail or [])
        self.listing_ok = listing_ok
        self.downloads: List[str] = []
        self.threads: Dict[str, str] = {}
        self._lock = threading.Lock()

    def list_remote_assets(self) -> RemoteListing:
        if not self.listing_ok:
            return RemoteListing.failed("connection refused")
        return RemoteListing(
            success=True,
            assets=[RemoteAssetDescriptor(name, f"https://sounds.test/{name}") for name in self.file_names],
        )

    def download(self, descriptor, destination, on_progress=None) -> int:
        with self._lock:
            self.downloads.append(descriptor.file_name)
            self.threads[descriptor.file_name] = threading.current_thread().name
        if descriptor.file_name in self.fail:
            raise DownloadError(f"Failed to download {descriptor.file_name}", file_name=descriptor.file_name)
        data = descriptor.file_name.encode()
        (Path(destination) / descriptor.file_name).write_bytes(data)
        if on_progress:
            on_progress(descriptor.file_name, len(data), len(data))
        return len(data)


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def sounds_dir(temp_dir):
    path = temp_dir / "sounds"
    path.mkdir()
    return path


@pytest.fixture
def bundled_dir(temp_dir):
    """Packaged sounds directory with every bundled sound present"""
    path = temp_dir / "bundled"
    path.mkdir()
    for name in BUNDLED:
        (path / name).write_bytes(b"RIFF" + name.encode())
    return path


@pytest.fixture
def catalog(sounds_dir):
    return AssetCatalog(sounds_dir)


@pytest.fixture
def gsi_payload():
    """State integration payload of a running match"""
    return {
        'provider': {'name': 'Dota 2', 'appid': 570},
        'map': {
            'matchid': '7000000001',
            'game_state': 'DOTA_GAMERULES_STATE_GAME_IN_PROGRESS',
            'clock_time': 170,
            'win_team': 'none',
            'paused': False,
        },
        'player': {
            'team_name': 'radiant',
            'kills': 2,
            'deaths': 2,
            'assists': 5,
            'last_hits': 40,
            'gold': 800,
        },
        'hero': {
            'name': 'npc_dota_hero_pudge',
            'level': 6,
            'alive': True,
            'respawn_seconds': 0,
            'health_percent': 100,
            'smoked': False,
        },
        'items': {
            'slot0': {'name': 'item_hand_of_midas', 'can_cast': False, 'cooldown': 30},
            'slot1': {'name': 'empty'},
        },
        'auth': {'token': 'hello1234'},
    }


def write_sounds(directory: Path, *names: str) -> None:
    for name in names:
        (directory / name).write_bytes(b"local " + name.encode())
