"""
Parlor Games - King of Diamond Engine

Strategic number-guessing elimination game.

Game Rules:
- Every active player chooses a whole number between 0 and 100
- Target = (average of all active choices) x 0.8
- Players closest to the target win the round (ties are co-winners)
- Everyone else loses one life point; at zero life a player is eliminated
- With exactly two active players, equal choices or a 0/100 split is a
  draw: both players lose a life point and nobody wins the round
- The game ends when at most one player is left standing

By default the engine is self-driving: one play_round() call keeps
resolving rounds with engine-generated choices until the game ends.
With auto_play=False it resolves a single round and waits for
advance_round(), taking choices from submit_choice().
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, ClassVar

from src.engine.base import GameRules, GameStatus
from src.engine.errors import GameError, StateError, ValidationError
from src.engine.events import GameEvent
from src.engine.lifecycle import RuleDefaults
from src.engine.players import DiamondPlayer
from src.engine.validators import validate_choice

if TYPE_CHECKING:
    from src.config.settings import Settings
    from src.engine.lifecycle import GameEngine

logger = logging.getLogger(__name__)

Chooser = Callable[[DiamondPlayer], int]


def random_chooser(
    rng: random.Random | None = None,
    min_value: int = 0,
    max_value: int = 100,
) -> Chooser:
    """Chooser picking a uniformly random number in [min_value, max_value]."""
    source = rng or random.Random()

    def choose(player: DiamondPlayer) -> int:
        return source.randint(min_value, max_value)

    return choose


@dataclass(frozen=True)
class DiamondRoundResult:
    """
    Outcome of one resolved King of Diamond round.

    Attributes:
        round_number: Round that was resolved
        target_number: average(choices) x multiplier, unrounded
        choices: Player id -> chosen number, in join order
        winner_ids: Ids of the round winners (empty on a draw)
        is_draw: Whether the two-player draw rule applied
        life_points: Player id -> life points after the round
        eliminated_ids: Players eliminated by this round
    """
    round_number: int
    target_number: float
    choices: dict[str, int]
    winner_ids: tuple[str, ...]
    is_draw: bool
    life_points: dict[str, int]
    eliminated_ids: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "round_number": self.round_number,
            "target_number": self.target_number,
            "choices": dict(self.choices),
            "winner_ids": list(self.winner_ids),
            "is_draw": self.is_draw,
            "life_points": dict(self.life_points),
            "eliminated_ids": list(self.eliminated_ids),
        }


class KingOfDiamondRules(RuleDefaults):
    """Rule set for King of Diamond."""

    GAME_NAME: ClassVar[str] = "King of Diamond"
    MIN_PLAYERS: ClassVar[int] = 2
    MAX_PLAYERS: ClassVar[int] = 20

    max_rounds = None

    def __init__(
        self,
        *,
        starting_life: int = 10,
        choice_min: int = 0,
        choice_max: int = 100,
        target_multiplier: float = 0.8,
        chooser: Chooser | None = None,
        rng: random.Random | None = None,
        auto_play: bool = True,
        max_cascade_rounds: int = 1000,
    ) -> None:
        if starting_life < 1:
            raise ValidationError(f"Starting life must be positive, got {starting_life}.")
        if choice_min > choice_max:
            raise ValidationError(
                f"Choice range is empty: {choice_min} > {choice_max}."
            )
        if max_cascade_rounds < 1:
            raise ValidationError(
                f"max_cascade_rounds must be positive, got {max_cascade_rounds}."
            )

        self.starting_life = starting_life
        self.choice_min = choice_min
        self.choice_max = choice_max
        self.target_multiplier = target_multiplier
        self.auto_play = auto_play
        self.max_cascade_rounds = max_cascade_rounds

        if chooser is None and auto_play:
            chooser = random_chooser(rng, choice_min, choice_max)
        self.chooser = chooser

        self.target_number: float | None = None
        self.round_winners: list[DiamondPlayer] = []
        self.round_results: list[DiamondRoundResult] = []

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        rng: random.Random | None = None,
        **overrides: Any,
    ) -> KingOfDiamondRules:
        """Build a rule set from application settings."""
        options: dict[str, Any] = {
            "starting_life": settings.starting_life_points,
            "choice_min": settings.choice_min,
            "choice_max": settings.choice_max,
            "target_multiplier": settings.target_multiplier,
            "max_cascade_rounds": settings.max_cascade_rounds,
        }
        options.update(overrides)
        return cls(rng=rng, **options)

    # -- Metadata --------------------------------------------------------

    def create_player(self, player_id: str, name: str) -> DiamondPlayer:
        return DiamondPlayer(
            id=player_id,
            name=name,
            life_points=self.starting_life,
            choice_min=self.choice_min,
            choice_max=self.choice_max,
        )

    def get_game_name(self) -> str:
        return self.GAME_NAME

    def get_min_players(self) -> int:
        return self.MIN_PLAYERS

    def get_max_players(self) -> int | None:
        return self.MAX_PLAYERS

    def get_game_rules(self) -> GameRules:
        return GameRules(
            name=self.GAME_NAME,
            description="Choose numbers strategically. Closest to (average x 0.8) wins!",
            rounds="Until one winner remains",
            min_players=self.MIN_PLAYERS,
            max_players=self.MAX_PLAYERS,
            scoring="Last player alive wins",
            special_rules=(
                f"Choose a number between {self.choice_min}-{self.choice_max} each round",
                f"Target = (Average of all choices) x {self.target_multiplier}",
                "Closest to target wins the round",
                "Losers lose 1 life point",
                "Eliminated at 0 life points",
                f"With 2 players: if both choose same number or one chooses "
                f"{self.choice_min} and other {self.choice_max}, both lose 1 point",
            ),
            starting_life=self.starting_life,
        )

    # -- Choices ---------------------------------------------------------

    def submit_choice(self, game: GameEngine, player_id: str, choice: int) -> None:
        """Record an externally supplied choice for an active player.

        Raises:
            StateError: If the game is not running, the round is already
                resolved, or the player is eliminated.
            NotFoundError: If no player has this id.
            ValidationError: If the choice is out of range.
        """
        if game.status is not GameStatus.PLAYING:
            raise StateError("Game is not in playing state.")
        if game.has_played_this_round:
            raise StateError("Round already resolved; advance the round first.")

        player = game.get_player(player_id)
        if player.is_eliminated:
            raise StateError(f"Player '{player.name}' has been eliminated.")

        player.make_choice(choice)
        game.emit(GameEvent.CHOICE_SUBMITTED, player_id=player.id)

    def all_players_chosen(self, game: GameEngine) -> bool:
        return all(p.current_choice is not None for p in game.active_players())

    def _collect_choices(self, active: list[DiamondPlayer]) -> None:
        """Fill missing choices from the chooser, validating all before assigning any."""
        if self.chooser is None:
            return

        pending = {}
        for player in active:
            if player.current_choice is None:
                pending[player.id] = validate_choice(
                    self.chooser(player), self.choice_min, self.choice_max
                )
        for player in active:
            if player.id in pending:
                player.make_choice(pending[player.id])

    # -- Round resolution ------------------------------------------------

    def play_round(self, game: GameEngine) -> list[DiamondRoundResult]:
        """
        Resolve the current round and, when self-driving, every following one.

        Each resolved round emits ROUND_PLAYED before the next one starts.
        The loop stops when the game finishes, after one round when
        auto_play is off, or after max_cascade_rounds rounds. A failure in a
        later round suspends the loop with that round unplayed and returns
        the rounds already resolved.

        Returns:
            Results of the rounds resolved by this call

        Raises:
            StateError: If the game is not running, the round was already
                played, or an active player has not chosen yet
        """
        if game.status is not GameStatus.PLAYING:
            raise StateError("Game is not in playing state.")
        if game.has_played_this_round:
            raise StateError("Round already resolved; advance the round first.")

        results: list[DiamondRoundResult] = []
        while True:
            try:
                results.append(self._resolve_round(game))
            except GameError:
                if not results:
                    raise
                # earlier rounds are committed; leave this one unplayed
                logger.exception(
                    "Suspending at round %d after %d resolved rounds",
                    game.current_round, len(results),
                )
                break

            if self.should_end_game(game):
                game.end_game()
                break
            if not self.auto_play:
                break
            if len(results) >= self.max_cascade_rounds:
                logger.warning(
                    "Suspending after %d rounds without a winner (round %d)",
                    len(results), game.current_round,
                )
                break
            game.advance_round()

        return results

    def _resolve_round(self, game: GameEngine) -> DiamondRoundResult:
        active: list[DiamondPlayer] = game.active_players()
        self._collect_choices(active)

        if not all(p.current_choice is not None for p in active):
            raise StateError("Round not ready: not all players have made their choice.")

        target = self.calculate_target_number([p.current_choice for p in active])
        self.target_number = target

        is_draw = len(active) == 2 and self.check_two_player_draw(*active)
        if is_draw:
            self.round_winners = []
        else:
            self.round_winners = self.find_round_winners(active, target)

        for player in active:
            won = player in self.round_winners
            if not won:
                player.lose_life_point()
            player.add_to_history(player.current_choice, target, won)

        game.complete_round()

        result = DiamondRoundResult(
            round_number=game.current_round,
            target_number=target,
            choices={p.id: p.current_choice for p in active},
            winner_ids=tuple(p.id for p in self.round_winners),
            is_draw=is_draw,
            life_points={p.id: p.life_points for p in active},
            eliminated_ids=tuple(p.id for p in active if p.is_eliminated),
        )
        self.round_results.append(result)

        logger.debug(
            "Round %d: target %.2f, winners %s%s",
            result.round_number,
            target,
            [p.name for p in self.round_winners],
            " (draw)" if is_draw else "",
        )
        game.emit(GameEvent.ROUND_PLAYED, **result.to_dict())
        for player_id in result.eliminated_ids:
            game.emit(GameEvent.PLAYER_ELIMINATED, player_id=player_id)

        return result

    def calculate_target_number(self, choices: list[int]) -> float:
        """Average of the choices times the multiplier, unrounded."""
        if not choices:
            raise StateError("Cannot compute a target without choices.")
        return sum(choices) / len(choices) * self.target_multiplier

    def check_two_player_draw(self, first: DiamondPlayer, second: DiamondPlayer) -> bool:
        """Equal choices, or one player at each end of the range."""
        if first.current_choice == second.current_choice:
            return True
        extremes = {self.choice_min, self.choice_max}
        return {first.current_choice, second.current_choice} == extremes

    def find_round_winners(
        self,
        players: list[DiamondPlayer],
        target: float,
    ) -> list[DiamondPlayer]:
        """All players at the minimal distance from the target."""
        distances = [(p, abs(p.current_choice - target)) for p in players]
        min_distance = min(distance for _, distance in distances)
        return [p for p, distance in distances if distance == min_distance]

    def should_end_game(self, game: GameEngine) -> bool:
        return len(game.active_players()) <= 1

    # -- Winners ---------------------------------------------------------

    def get_round_winner(self, game: GameEngine) -> DiamondPlayer | None:
        if not game.has_played_this_round:
            return None
        return self.round_winners[0] if len(self.round_winners) == 1 else None

    def get_winners(self, game: GameEngine) -> list[DiamondPlayer]:
        """Players left standing; empty when the last players fell together."""
        if game.status is not GameStatus.FINISHED:
            raise StateError("Winners are only known once the game is finished.")
        return game.active_players()

    # -- Lifecycle hooks -------------------------------------------------

    def can_advance_round(self, game: GameEngine) -> bool:
        return game.has_played_this_round and game.status is not GameStatus.FINISHED

    def on_game_start(self, game: GameEngine) -> None:
        self.reset()

    def on_round_start(self, game: GameEngine) -> None:
        self.target_number = None
        self.round_winners = []
        for player in game.active_players():
            player.reset_choice()

    def reset(self) -> None:
        self.target_number = None
        self.round_winners = []
        self.round_results = []

    def describe_state(self, game: GameEngine) -> dict[str, Any]:
        return {
            "target_number": self.target_number,
            "round_winners": [p.to_dict() for p in self.round_winners],
            "active_players": [p.to_dict() for p in game.active_players()],
            "eliminated_players": [
                p.to_dict() for p in game.players if p.is_eliminated
            ],
        }
