"""
Parlor Games - Dice Game Engine

Simple fixed-length dice game. Each round every player rolls three D6;
the roll total is added to their score and the highest roll wins the
round. After the last round the highest total score wins the game
(tied leaders share the win).
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Sequence

from src.engine.base import DiceRoll, DiceType, GameRules, GameStatus
from src.engine.errors import StateError, ValidationError
from src.engine.events import GameEvent
from src.engine.lifecycle import RuleDefaults
from src.engine.players import DicePlayer
from src.engine.validators import validate_dice_values

if TYPE_CHECKING:
    from src.config.settings import Settings
    from src.engine.lifecycle import GameEngine

logger = logging.getLogger(__name__)

Roller = Callable[[int], Sequence[int]]


@dataclass(frozen=True)
class DiceRoundResult:
    """
    Outcome of one dice round.

    Attributes:
        round_number: Round that was played
        rolls: Player id -> dice rolled
        winner_ids: Ids of the players with the highest roll total
    """
    round_number: int
    rolls: dict[str, DiceRoll]
    winner_ids: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "round_number": self.round_number,
            "rolls": {pid: list(roll.values) for pid, roll in self.rolls.items()},
            "winner_ids": list(self.winner_ids),
        }


class DiceGameRules(RuleDefaults):
    """Rule set for the dice game."""

    GAME_NAME: ClassVar[str] = "Dice Game"
    MIN_PLAYERS: ClassVar[int] = 2
    MAX_PLAYERS: ClassVar[int] = 8
    DICE_TYPE: ClassVar[DiceType] = DiceType.D6

    def __init__(
        self,
        *,
        rounds: int = 3,
        dice_per_player: int = 3,
        rng: random.Random | None = None,
        roller: Roller | None = None,
    ) -> None:
        if rounds < 1:
            raise ValidationError(f"Rounds must be positive, got {rounds}.")
        if dice_per_player < 1:
            raise ValidationError(f"Dice per player must be positive, got {dice_per_player}.")

        self.max_rounds = rounds
        self.dice_per_player = dice_per_player
        self._rng = rng or random.Random()
        self._roller = roller
        self.round_winners: list[DicePlayer] = []

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        rng: random.Random | None = None,
        **overrides: Any,
    ) -> DiceGameRules:
        options: dict[str, Any] = {
            "rounds": settings.dice_rounds,
            "dice_per_player": settings.dice_per_player,
        }
        options.update(overrides)
        return cls(rng=rng, **options)

    def create_player(self, player_id: str, name: str) -> DicePlayer:
        return DicePlayer(id=player_id, name=name)

    def get_game_name(self) -> str:
        return self.GAME_NAME

    def get_min_players(self) -> int:
        return self.MIN_PLAYERS

    def get_max_players(self) -> int | None:
        return self.MAX_PLAYERS

    def get_game_rules(self) -> GameRules:
        return GameRules(
            name=self.GAME_NAME,
            description=f"Roll {self.dice_per_player} dice, highest score wins",
            rounds=f"{self.max_rounds} rounds",
            min_players=self.MIN_PLAYERS,
            max_players=self.MAX_PLAYERS,
            scoring="Sum of all rolls; highest total wins",
            special_rules=(
                f"Each player rolls {self.dice_per_player} six-sided dice per round",
                "Highest roll total wins the round",
                "Tied leaders share the victory",
            ),
        )

    def roll_dice(self) -> DiceRoll:
        """Roll this game's dice for one player."""
        if self._roller is not None:
            values = validate_dice_values(
                self._roller(self.dice_per_player),
                self.DICE_TYPE,
                min_count=self.dice_per_player,
                max_count=self.dice_per_player,
            )
        else:
            values = [
                self._rng.randint(1, self.DICE_TYPE.value)
                for _ in range(self.dice_per_player)
            ]
        return DiceRoll.from_sequence(values, self.DICE_TYPE)

    def play_round(self, game: GameEngine) -> list[DiceRoundResult]:
        """Roll for every player and bank the totals.

        Raises:
            StateError: If the game is not running or this round was already played
        """
        if game.status is not GameStatus.PLAYING:
            raise StateError("Game is not in playing state.")
        if game.has_played_this_round:
            raise StateError("Round already played; advance the round first.")

        rolls = {player.id: self.roll_dice() for player in game.players}
        for player in game.players:
            player.record_roll(rolls[player.id])

        best = max(roll.total for roll in rolls.values())
        self.round_winners = [p for p in game.players if rolls[p.id].total == best]
        game.complete_round()

        result = DiceRoundResult(
            round_number=game.current_round,
            rolls=rolls,
            winner_ids=tuple(p.id for p in self.round_winners),
        )
        logger.debug(
            "Round %d: best roll %d by %s",
            result.round_number, best, [p.name for p in self.round_winners],
        )
        game.emit(GameEvent.ROUND_PLAYED, **result.to_dict())
        return [result]

    def get_round_winner(self, game: GameEngine) -> DicePlayer | None:
        if not game.has_played_this_round:
            return None
        return self.round_winners[0] if len(self.round_winners) == 1 else None

    def get_winners(self, game: GameEngine) -> list[DicePlayer]:
        if game.status is not GameStatus.FINISHED:
            raise StateError("Winners are only known once the game is finished.")
        if not game.players:
            return []
        best = max(p.total_score for p in game.players)
        return [p for p in game.players if p.total_score == best]

    def on_round_start(self, game: GameEngine) -> None:
        self.round_winners = []
        for player in game.players:
            player.current_roll = None

    def on_game_start(self, game: GameEngine) -> None:
        self.round_winners = []

    def reset(self) -> None:
        self.round_winners = []

    def describe_state(self, game: GameEngine) -> dict[str, Any]:
        return {
            "round_winners": [p.to_dict() for p in self.round_winners],
        }
