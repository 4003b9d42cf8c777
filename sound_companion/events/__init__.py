"""
Sound events package

- **base**: PlaybackRule, the single-method interface every event implements
- **rules**: built-in events (death, kill, level up, match end, ...)
- **selector**: PlaybackSelector, which gates fired rules by chance and picks sounds
"""

from .base import PlaybackRule, ChanceOverride
from .rules import (
    OnDeath,
    OnKill,
    OnLevelUp,
    OnRespawn,
    OnSmoked,
    OnMidasReady,
    OnBountyRunesSpawn,
    OnVictory,
    OnDefeat,
    default_rules,
)
from .selector import PlaybackSelector, PlaybackDecision, DEFAULT_BINDINGS, apply_chance_overrides

__all__ = [
    'PlaybackRule',
    'ChanceOverride',
    'OnDeath',
    'OnKill',
    'OnLevelUp',
    'OnRespawn',
    'OnSmoked',
    'OnMidasReady',
    'OnBountyRunesSpawn',
    'OnVictory',
    'OnDefeat',
    'default_rules',
    'PlaybackSelector',
    'PlaybackDecision',
    'DEFAULT_BINDINGS',
    'apply_chance_overrides',
]
