"""
Game state snapshots

A GameState is one observation of the running match, parsed from the game's
state integration payload. Snapshots are immutable; playback rules compare
two consecutive ones. Every section is optional because the game omits them
outside a match (main menu, spectating, hero selection).

Payload excerpt:

    {
        "map": {"matchid": "123", "game_state": "DOTA_GAMERULES_STATE_GAME_IN_PROGRESS",
                "clock_time": 301, "win_team": "none", "paused": false},
        "player": {"team_name": "radiant", "kills": 2, "deaths": 1, ...},
        "hero": {"level": 6, "alive": true, "respawn_seconds": 0, "smoked": false, ...},
        "items": {"slot0": {"name": "item_hand_of_midas", "can_cast": true}, ...},
        "auth": {"token": "secret"}
    }
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..exceptions import GameStateError

STATE_IN_PROGRESS = "DOTA_GAMERULES_STATE_GAME_IN_PROGRESS"
STATE_POST_GAME = "DOTA_GAMERULES_STATE_POST_GAME"


def _int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


@dataclass(frozen=True)
class MapState:
    match_id: Optional[str] = None
    game_state: Optional[str] = None
    clock_time: int = 0
    win_team: Optional[str] = None
    paused: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MapState':
        return cls(
            match_id=_str(data.get('matchid')),
            game_state=_str(data.get('game_state')),
            clock_time=_int(data.get('clock_time')),
            win_team=_str(data.get('win_team')),
            paused=bool(data.get('paused', False)),
        )


@dataclass(frozen=True)
class PlayerState:
    team_name: Optional[str] = None
    kills: int = 0
    deaths: int = 0
    assists: int = 0
    last_hits: int = 0
    gold: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PlayerState':
        return cls(
            team_name=_str(data.get('team_name')),
            kills=_int(data.get('kills')),
            deaths=_int(data.get('deaths')),
            assists=_int(data.get('assists')),
            last_hits=_int(data.get('last_hits')),
            gold=_int(data.get('gold')),
        )


@dataclass(frozen=True)
class HeroState:
    name: Optional[str] = None
    level: int = 0
    alive: bool = True
    respawn_seconds: int = 0
    health_percent: int = 100
    smoked: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'HeroState':
        return cls(
            name=_str(data.get('name')),
            level=_int(data.get('level')),
            alive=bool(data.get('alive', True)),
            respawn_seconds=_int(data.get('respawn_seconds')),
            health_percent=_int(data.get('health_percent'), 100),
            smoked=bool(data.get('smoked', False)),
        )


@dataclass(frozen=True)
class ItemState:
    name: str
    can_cast: bool = False
    cooldown: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ItemState':
        return cls(
            name=str(data.get('name', 'empty')),
            can_cast=bool(data.get('can_cast', False)),
            cooldown=_int(data.get('cooldown')),
        )


@dataclass(frozen=True)
class GameState:
    """
    One observation of the game

    Attributes:
        map: Match-level state, None outside a match
        player: The local player's stats, None when there is no active player
        hero: The local player's hero, None before a hero is picked
        items: Inventory keyed by slot ("slot0".."slot8", "stash0", ...)
        auth_token: Token the game sent with the payload, if any
    """
    map: Optional[MapState] = None
    player: Optional[PlayerState] = None
    hero: Optional[HeroState] = None
    items: Dict[str, ItemState] = field(default_factory=dict)
    auth_token: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GameState':
        """
        Parse a state integration payload

        Sections that are missing or not JSON objects are left as None.

        Raises:
            GameStateError: If data is not a JSON object
        """
        if not isinstance(data, dict):
            raise GameStateError("Game state payload must be a JSON object",
                                 details={'type': type(data).__name__})

        def section(key: str) -> Optional[Dict[str, Any]]:
            value = data.get(key)
            return value if isinstance(value, dict) and value else None

        map_data = section('map')
        player_data = section('player')
        hero_data = section('hero')
        items_data = section('items') or {}
        auth_data = section('auth') or {}

        items = {
            slot: ItemState.from_dict(item)
            for slot, item in items_data.items()
            if isinstance(item, dict)
        }

        return cls(
            map=MapState.from_dict(map_data) if map_data else None,
            player=PlayerState.from_dict(player_data) if player_data else None,
            hero=HeroState.from_dict(hero_data) if hero_data else None,
            items=items,
            auth_token=_str(auth_data.get('token')),
        )

    def find_item(self, item_name: str) -> Optional[ItemState]:
        """Get the first inventory slot (slot0..slot8) holding item_name"""
        for slot, item in sorted(self.items.items()):
            if slot.startswith('slot') and item.name == item_name:
                return item
        return None

    @property
    def in_progress(self) -> bool:
        return self.map is not None and self.map.game_state == STATE_IN_PROGRESS

    @property
    def match_id(self) -> Optional[str]:
        return self.map.match_id if self.map else None
