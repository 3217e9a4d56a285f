"""
Parlor Games - Game Engine Base Classes

This module defines the foundational enums and immutable value objects
shared by every rule set: lifecycle status, game identifiers, dice rolls,
per-round history records, and the static rules document.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Sequence


class GameStatus(Enum):
    """Lifecycle states of a game engine."""
    SETUP = "SETUP"
    PLAYING = "PLAYING"
    FINISHED = "FINISHED"


class GameMode(Enum):
    """Registered rule sets."""
    DICE = "dice"
    KING_OF_DIAMOND = "king_of_diamond"


class DiceType(Enum):
    """Type of dice used in the game."""
    D6 = 6


@dataclass(frozen=True)
class DiceRoll:
    """
    Immutable representation of a dice roll.

    Attributes:
        values: Tuple of dice face values
        dice_type: Type of dice
    """
    values: tuple[int, ...]
    dice_type: DiceType = DiceType.D6

    def __post_init__(self) -> None:
        """Validate dice values are within valid range."""
        max_value = self.dice_type.value
        for value in self.values:
            if not (1 <= value <= max_value):
                raise ValueError(
                    f"Invalid die value {value} for {self.dice_type.name}. "
                    f"Must be between 1 and {max_value}."
                )

    def __len__(self) -> int:
        return len(self.values)

    @property
    def total(self) -> int:
        """Sum of all face values."""
        return sum(self.values)

    @classmethod
    def from_sequence(
        cls,
        values: Sequence[int],
        dice_type: DiceType = DiceType.D6
    ) -> "DiceRoll":
        """Create a DiceRoll from any sequence type."""
        return cls(values=tuple(values), dice_type=dice_type)


@dataclass(frozen=True)
class RoundRecord:
    """
    One King of Diamond history entry for a single player.

    Attributes:
        choice: Number the player chose that round
        target_number: Target computed from all active choices
        won: Whether the player was among the round winners
        life_points_after: Life points left once the round was applied
    """
    choice: int
    target_number: float
    won: bool
    life_points_after: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "choice": self.choice,
            "target_number": self.target_number,
            "won": self.won,
            "life_points_after": self.life_points_after,
        }


@dataclass(frozen=True)
class GameRules:
    """
    Static rules and metadata document for a rule set.

    Attributes:
        name: Display name of the game
        description: One-line summary
        rounds: How long a game lasts
        min_players: Players required to start
        max_players: Roster limit (None = unlimited)
        scoring: How the overall winner is decided
        special_rules: Ordered list of rule statements
        starting_life: Life points per player (elimination games only)
    """
    name: str
    description: str
    rounds: str
    min_players: int
    max_players: int | None
    scoring: str
    special_rules: tuple[str, ...] = field(default_factory=tuple)
    starting_life: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "rounds": self.rounds,
            "min_players": self.min_players,
            "max_players": self.max_players,
            "scoring": self.scoring,
            "special_rules": list(self.special_rules),
        }
        if self.starting_life is not None:
            data["starting_life"] = self.starting_life
        return data
