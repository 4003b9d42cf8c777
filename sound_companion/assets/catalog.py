"""
Local sound inventory with an explicit, invalidatable cache
"""

import threading
from pathlib import Path
from typing import List, Optional

from .models import Asset, PARTIAL_SUFFIX
from ..utils.logger import get_logger


class AssetCatalog:
    """
    Lazily scanned view of the sounds directory

    The directory is scanned on the first lookup and the result cached until
    invalidate() is called, normally by the synchroniser once a pass has
    changed the files on disk. A missing directory is not an error: lookups
    return nothing and log a warning.

    Thread Safety:
        Lookups may happen from the game state listener while a sync pass
        runs on another thread; the cache is guarded by a lock.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.logger = get_logger(__name__)
        self._lock = threading.Lock()
        self._assets: List[Asset] = []

    def list_all(self) -> List[Asset]:
        """
        Get all sounds currently in the sounds directory

        Returns:
            Assets sorted by file name; empty if the directory is missing
        """
        with self._lock:
            if not self._assets:
                self._assets = self._scan()
            return list(self._assets)

    def find_by_name(self, name: str) -> Optional[Asset]:
        """
        Find a downloaded sound by name

        Args:
            name: Display name ("ahshit") or file name ("ahshit.mp3")

        Returns:
            The sound if found, None otherwise
        """
        assets = self.list_all()
        for asset in assets:
            if asset.name == name:
                return asset
        for asset in assets:
            if asset.file_name == name:
                return asset
        return None

    def invalidate(self) -> None:
        """Forget the cached scan so the next lookup re-reads the directory"""
        with self._lock:
            self._assets = []
        self.logger.debug(f"Sound inventory invalidated: {self.directory}")

    def _scan(self) -> List[Asset]:
        if not self.directory.is_dir():
            self.logger.warning(f"Couldn't find sounds directory: {self.directory}")
            return []

        assets = [
            Asset(entry.name, self.directory)
            for entry in sorted(self.directory.iterdir(), key=lambda p: p.name)
            if entry.is_file() and not entry.name.endswith(PARTIAL_SUFFIX)
        ]
        self.logger.debug(f"Scanned {len(assets)} sounds in {self.directory}")
        return assets

    def __len__(self) -> int:
        return len(self.list_all())
