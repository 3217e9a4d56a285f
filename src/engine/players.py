"""
Parlor Games - Player Models

A Player carries identity and score for one participant. Rule sets
extend it with their own per-game fields. Players are mutated only by
the engine; presentation code reads them through to_dict().
"""

from dataclasses import dataclass, field
from typing import Any

from src.engine.base import DiceRoll, RoundRecord
from src.engine.validators import validate_choice


@dataclass(eq=False)
class Player:
    """
    Generic player with no game-specific logic.

    Attributes:
        id: Unique identity assigned once by the engine
        name: Display name, unique within a roster
        total_score: Accumulated score for the current game
    """
    id: str
    name: str
    total_score: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "total_score": self.total_score,
        }


@dataclass(eq=False)
class DiamondPlayer(Player):
    """
    King of Diamond participant.

    Attributes:
        life_points: Remaining lives; elimination happens at zero
        current_choice: Number chosen for the unresolved round
        is_eliminated: Terminal flag, never cleared during a game
        round_history: One record per round played while active
        choice_min: Lowest number this player may choose
        choice_max: Highest number this player may choose
    """
    life_points: int = 10
    current_choice: int | None = None
    is_eliminated: bool = False
    round_history: list[RoundRecord] = field(default_factory=list)
    choice_min: int = field(default=0, repr=False)
    choice_max: int = field(default=100, repr=False)

    def make_choice(self, number: int) -> None:
        """Record this round's choice; raises ValidationError when out of range."""
        self.current_choice = validate_choice(number, self.choice_min, self.choice_max)

    def lose_life_point(self) -> None:
        self.life_points -= 1
        if self.life_points <= 0:
            self.is_eliminated = True

    def reset_choice(self) -> None:
        self.current_choice = None

    def add_to_history(self, choice: int, target_number: float, won: bool) -> RoundRecord:
        record = RoundRecord(
            choice=choice,
            target_number=target_number,
            won=won,
            life_points_after=self.life_points,
        )
        self.round_history.append(record)
        return record

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "life_points": self.life_points,
            "current_choice": self.current_choice,
            "is_eliminated": self.is_eliminated,
            "round_history": [record.to_dict() for record in self.round_history],
        }


@dataclass(eq=False)
class DicePlayer(Player):
    """
    Dice game participant.

    Attributes:
        current_roll: Dice rolled in the current round (None before rolling)
        roll_history: Every roll made this game, in round order
    """
    current_roll: DiceRoll | None = None
    roll_history: list[DiceRoll] = field(default_factory=list)

    def record_roll(self, roll: DiceRoll) -> None:
        """Store a roll and bank its total."""
        self.current_roll = roll
        self.roll_history.append(roll)
        self.total_score += roll.total

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "current_roll": list(self.current_roll.values) if self.current_roll else None,
            "roll_history": [list(roll.values) for roll in self.roll_history],
        }
