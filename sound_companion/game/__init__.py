"""
Game state package

- **state**: GameState snapshots parsed from the game's state integration payload
- **server**: GameStateServer, the local HTTP endpoint the game posts state to
  (imported from sound_companion.game.server)
"""

from .state import GameState, MapState, PlayerState, HeroState, ItemState, STATE_IN_PROGRESS, STATE_POST_GAME

__all__ = [
    'GameState',
    'MapState',
    'PlayerState',
    'HeroState',
    'ItemState',
    'STATE_IN_PROGRESS',
    'STATE_POST_GAME',
]
