"""
Local sound playback

Plays chosen sounds through the default output device using pydub. Each
sound plays on its own daemon thread so the game state listener never waits
for audio; playback problems (missing codec, no audio device) are logged and
otherwise ignored.
"""

import threading
from typing import Callable, Optional

from pydub import AudioSegment
from pydub.playback import play

from ..assets.models import Asset
from ..utils.logger import get_logger


class SoundPlayer:
    """
    Fire-and-forget sound player

    Args:
        volume_db: Gain applied to every sound (negative is quieter)
        enabled: When False, play() only logs
        backend: Callable that plays an AudioSegment (pydub's play by default)
    """

    def __init__(
        self,
        volume_db: float = 0.0,
        enabled: bool = True,
        backend: Optional[Callable[[AudioSegment], None]] = None
    ):
        self.volume_db = volume_db
        self.enabled = enabled
        self.backend = backend or play
        self.logger = get_logger(__name__)

    def load(self, asset: Asset) -> AudioSegment:
        """Decode a sound file and apply the configured gain"""
        segment = AudioSegment.from_file(str(asset.path))
        if self.volume_db:
            segment = segment.apply_gain(self.volume_db)
        return segment

    def play_blocking(self, asset: Asset) -> bool:
        """
        Play a sound on the current thread

        Returns:
            True if the sound played
        """
        if not self.enabled:
            self.logger.info(f"Playback disabled, skipping {asset.name}")
            return False
        try:
            self.backend(self.load(asset))
        except Exception as e:
            self.logger.warning(f"Could not play {asset.file_name}: {e}")
            return False
        return True

    def play(self, asset: Asset) -> threading.Thread:
        """Play a sound in the background and return the playing thread"""
        thread = threading.Thread(
            target=self.play_blocking,
            args=(asset,),
            name=f"play-{asset.name}",
            daemon=True,
        )
        thread.start()
        return thread
