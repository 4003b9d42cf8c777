"""
Base class for sound events
"""

from abc import ABC, abstractmethod

from ..game.state import GameState
from ..utils.logger import get_logger

logger = get_logger(__name__)


class PlaybackRule(ABC):
    """
    Recognizes one kind of game event between two snapshots

    Subclasses set a constant chance and implement should_play. Rules hold
    no state between evaluations, so one instance can be shared freely.

    Attributes:
        chance: Probability in [0, 1] that the event plays a sound once it happened
    """

    chance: float = 1.0

    @property
    def name(self) -> str:
        """Rule identifier used in configuration (the class name)"""
        return type(self).__name__

    @abstractmethod
    def should_play(self, previous: GameState, current: GameState) -> bool:
        """Return True if the event happened between previous and current"""

    def evaluate(self, previous: GameState, current: GameState) -> bool:
        """
        Run should_play, treating missing game data as "did not happen"

        A snapshot without a player or hero section makes attribute access
        fail; that must not stop the other rules from being evaluated.
        """
        try:
            return bool(self.should_play(previous, current))
        except (AttributeError, TypeError, KeyError) as e:
            logger.debug(f"{self.name} skipped, incomplete game state: {e}")
            return False

    def __repr__(self) -> str:
        return f"{self.name}(chance={self.chance})"


class ChanceOverride(PlaybackRule):
    """Wraps a rule with a configured chance instead of its built-in one"""

    def __init__(self, rule: PlaybackRule, chance: float):
        if not 0.0 <= chance <= 1.0:
            raise ValueError(f"chance must be within [0, 1], got {chance}")
        self.rule = rule
        self.chance = chance

    @property
    def name(self) -> str:
        return self.rule.name

    def should_play(self, previous: GameState, current: GameState) -> bool:
        return self.rule.should_play(previous, current)
