"""
Persisted application state

Stores the small amount of state that must survive restarts, currently only
the time of the last fully successful sound synchronisation.
"""

import json
import threading
import time
from pathlib import Path
from typing import Any, Dict, Optional

from ..utils.logger import get_logger


class StateStore:
    """JSON-file backed key/value store for runtime state"""

    def __init__(self, path: Path):
        self.path = Path(path)
        self.logger = get_logger(__name__)
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            self.logger.warning(f"Could not read state file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix('.tmp')
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)
        tmp_path.replace(self.path)

    def get_last_sync(self) -> Optional[float]:
        """
        Get the time of the last successful sync

        Returns:
            POSIX timestamp in seconds, or None if never synced
        """
        with self._lock:
            value = self._read().get('last_sync')
        if isinstance(value, (int, float)):
            return float(value)
        return None

    def set_last_sync(self, timestamp: Optional[float] = None) -> float:
        """
        Record a successful sync

        Args:
            timestamp: POSIX timestamp, defaults to now

        Returns:
            The stored timestamp
        """
        value = time.time() if timestamp is None else float(timestamp)
        with self._lock:
            data = self._read()
            data['last_sync'] = value
            self._write(data)
        self.logger.debug(f"Stored last sync time {value}")
        return value
