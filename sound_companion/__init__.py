"""
Sound Companion

A background companion that keeps a local library of sounds in sync with a
remote catalog and plays them in reaction to live game events.

Packages:

- **assets**: local sound inventory, remote catalog client, bundled sounds
- **sync**: reconciliation engine and sync scheduling
- **game**: game state snapshots and the local state receiver
- **events**: playback rules and the selector that gates them by chance
- **audio**: local playback
- **config**: YAML/environment settings and persisted state
- **utils**: logging and helpers
"""

__version__ = "1.0.0"
__author__ = "Sound Companion Team"
