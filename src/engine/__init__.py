"""
Parlor Games Engine.

Pure Python game logic with zero UI/persistence dependencies.
Handles the shared player/round lifecycle and the pluggable rule sets.
"""

from src.engine.base import (
    DiceRoll,
    DiceType,
    GameMode,
    GameRules,
    GameStatus,
    RoundRecord,
)
from src.engine.dice_game import DiceGameRules, DiceRoundResult
from src.engine.errors import GameError, NotFoundError, StateError, ValidationError
from src.engine.events import EventPayload, GameEvent
from src.engine.identity import sequential_ids, uuid_ids
from src.engine.king_of_diamond import (
    DiamondRoundResult,
    KingOfDiamondRules,
    random_chooser,
)
from src.engine.lifecycle import GameEngine, GameSnapshot, RuleDefaults, RuleEngine
from src.engine.players import DiamondPlayer, DicePlayer, Player
from src.engine.registry import GameEntry, GameRegistry

__all__ = [
    # Data Classes
    "DiceRoll",
    "DiamondRoundResult",
    "DiceRoundResult",
    "EventPayload",
    "GameRules",
    "GameSnapshot",
    "RoundRecord",
    # Enums
    "DiceType",
    "GameEvent",
    "GameMode",
    "GameStatus",
    # Errors
    "GameError",
    "NotFoundError",
    "StateError",
    "ValidationError",
    # Players
    "Player",
    "DiamondPlayer",
    "DicePlayer",
    # Engines
    "GameEngine",
    "RuleEngine",
    "RuleDefaults",
    "KingOfDiamondRules",
    "DiceGameRules",
    "GameEntry",
    "GameRegistry",
    # Helpers
    "random_chooser",
    "sequential_ids",
    "uuid_ids",
]
