"""
Audio playback package

- **player**: SoundPlayer, plays chosen sounds in the background with pydub
"""

from .player import SoundPlayer

__all__ = ['SoundPlayer']
