"""
Built-in sound events

Each rule compares two consecutive snapshots of the local player's game.
Predicates return False whenever a section they need is missing.
"""

from typing import List

from .base import PlaybackRule
from ..game.state import GameState, STATE_POST_GAME

MIDAS = "item_hand_of_midas"
BOUNTY_RUNE_INTERVAL = 180


class OnDeath(PlaybackRule):
    chance = 0.33

    def should_play(self, previous: GameState, current: GameState) -> bool:
        return current.player.deaths > previous.player.deaths


class OnKill(PlaybackRule):
    chance = 0.25

    def should_play(self, previous: GameState, current: GameState) -> bool:
        return current.player.kills > previous.player.kills


class OnLevelUp(PlaybackRule):
    chance = 0.2

    def should_play(self, previous: GameState, current: GameState) -> bool:
        # Level 0 -> 1 happens when the hero spawns, not a real level up
        return previous.hero.level > 0 and current.hero.level > previous.hero.level


class OnRespawn(PlaybackRule):
    chance = 0.25

    def should_play(self, previous: GameState, current: GameState) -> bool:
        return not previous.hero.alive and current.hero.alive


class OnSmoked(PlaybackRule):
    chance = 1.0

    def should_play(self, previous: GameState, current: GameState) -> bool:
        return not previous.hero.smoked and current.hero.smoked


class OnMidasReady(PlaybackRule):
    """Hand of Midas came off cooldown"""

    chance = 0.75

    def should_play(self, previous: GameState, current: GameState) -> bool:
        before = previous.find_item(MIDAS)
        after = current.find_item(MIDAS)
        if before is None or after is None:
            return False
        return not before.can_cast and after.can_cast


class OnBountyRunesSpawn(PlaybackRule):
    """Match clock crossed a bounty rune spawn time"""

    chance = 0.75

    def should_play(self, previous: GameState, current: GameState) -> bool:
        if not current.in_progress or current.map.paused:
            return False
        before = previous.map.clock_time
        after = current.map.clock_time
        if after <= before or after <= 0:
            return False
        return after // BOUNTY_RUNE_INTERVAL > max(before, 0) // BOUNTY_RUNE_INTERVAL


class _MatchEnded(PlaybackRule):

    def _ended(self, previous: GameState, current: GameState) -> bool:
        return previous.map.game_state != STATE_POST_GAME and current.map.game_state == STATE_POST_GAME

    def _won(self, current: GameState) -> bool:
        return current.map.win_team == current.player.team_name


class OnVictory(_MatchEnded):
    chance = 1.0

    def should_play(self, previous: GameState, current: GameState) -> bool:
        return self._ended(previous, current) and self._won(current)


class OnDefeat(_MatchEnded):
    chance = 1.0

    def should_play(self, previous: GameState, current: GameState) -> bool:
        return (self._ended(previous, current)
                and current.map.win_team not in (None, "none")
                and not self._won(current))


def default_rules() -> List[PlaybackRule]:
    """All built-in rules in evaluation order"""
    return [
        OnDeath(),
        OnKill(),
        OnLevelUp(),
        OnRespawn(),
        OnSmoked(),
        OnMidasReady(),
        OnBountyRunesSpawn(),
        OnVictory(),
        OnDefeat(),
    ]
