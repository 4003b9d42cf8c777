"""
Chooses which sounds to play for a game state transition
"""

import random
import threading
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .base import ChanceOverride, PlaybackRule
from ..assets.catalog import AssetCatalog
from ..assets.models import Asset
from ..game.state import GameState
from ..utils.logger import get_logger

# Sounds each built-in rule picks from unless configured otherwise
DEFAULT_BINDINGS: Dict[str, List[str]] = {
    'OnDeath': ['ahshit', 'itsover'],
    'OnKill': ['easy', 'ezclap'],
    'OnLevelUp': ['levelup'],
    'OnRespawn': ['herewegoagain'],
    'OnSmoked': ['smokeweed'],
    'OnMidasReady': ['useyourmidas'],
    'OnBountyRunesSpawn': ['bountyrunes'],
    'OnVictory': ['ggwp'],
    'OnDefeat': ['welost'],
}


@dataclass(frozen=True)
class PlaybackDecision:
    """A rule that fired and the sound it picked"""
    rule_name: str
    asset: Asset


def apply_chance_overrides(rules: Iterable[PlaybackRule], chances: Mapping[str, float]) -> List[PlaybackRule]:
    """
    Replace the built-in chance of rules named in chances

    Raises:
        ValueError: If a configured chance is outside [0, 1]
    """
    return [
        ChanceOverride(rule, float(chances[rule.name])) if rule.name in chances else rule
        for rule in rules
    ]


class PlaybackSelector:
    """
    Evaluates every rule against a snapshot transition

    Each rule whose event happened gets its own random draw against its
    chance; every rule that passes contributes one decision, so several
    sounds can be chosen for the same transition.

    Args:
        rules: Rules in evaluation order
        catalog: Where bound sound names are looked up
        bindings: Rule name -> sound names the rule picks from
        rng: Random source; inject a seeded Random for reproducible draws
    """

    def __init__(
        self,
        rules: Sequence[PlaybackRule],
        catalog: AssetCatalog,
        bindings: Optional[Mapping[str, Sequence[str]]] = None,
        rng: Optional[random.Random] = None
    ):
        self.rules = list(rules)
        self.catalog = catalog
        self.bindings = {name: list(sounds) for name, sounds in (bindings or DEFAULT_BINDINGS).items()}
        self.rng = rng or random.Random()
        self.logger = get_logger(__name__)

        self._previous: Optional[GameState] = None
        self._lock = threading.Lock()

    def evaluate(self, previous: GameState, current: GameState) -> List[PlaybackDecision]:
        """
        Decide what to play for one transition

        Args:
            previous: Earlier snapshot
            current: Later snapshot

        Returns:
            Decisions in rule order, possibly empty
        """
        decisions = []
        for rule in self.rules:
            if not rule.evaluate(previous, current):
                continue

            roll = self.rng.random()
            if roll >= rule.chance:
                self.logger.debug(f"{rule.name} happened, not playing (roll {roll:.2f} >= {rule.chance})")
                continue

            asset = self._pick_asset(rule.name)
            if asset is None:
                self.logger.info(f"{rule.name} fired but none of its sounds are downloaded")
                continue

            self.logger.info(f"{rule.name} fired, playing {asset.name}")
            decisions.append(PlaybackDecision(rule.name, asset))
        return decisions

    def on_state(self, current: GameState) -> List[PlaybackDecision]:
        """
        Feed the next snapshot and evaluate it against the previous one

        The first snapshot only primes the window and never plays anything.
        """
        with self._lock:
            previous, self._previous = self._previous, current
        if previous is None:
            return []
        return self.evaluate(previous, current)

    def reset(self) -> None:
        """Forget the previous snapshot"""
        with self._lock:
            self._previous = None

    def _pick_asset(self, rule_name: str) -> Optional[Asset]:
        available = []
        for sound_name in self.bindings.get(rule_name, []):
            asset = self.catalog.find_by_name(sound_name)
            if asset is not None:
                available.append(asset)
        if not available:
            return None
        return self.rng.choice(available)
