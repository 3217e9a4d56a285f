"""
Parlor Games - Game Lifecycle

GameEngine owns everything every game shares: the roster, the round
counter and the SETUP -> PLAYING -> FINISHED state machine. The rules of
a particular game are supplied as a separate RuleEngine object and are
consulted at each step, so rule sets never inherit lifecycle state.

Typical use:

    game = GameEngine(KingOfDiamondRules())
    game.add_player("Alice")
    game.add_player("Bob")
    game.start_game()
    while game.status is not GameStatus.FINISHED:
        game.play_round()
        if game.can_advance_round():
            game.advance_round()
    winners = game.get_winners()
"""

from __future__ import annotations

import logging
from typing import Any, Protocol, Sequence

from pydantic import BaseModel

from src.engine.base import GameRules, GameStatus
from src.engine.errors import NotFoundError, StateError, ValidationError
from src.engine.events import EventHandler, EventPayload, GameEvent
from src.engine.identity import IdGenerator, uuid_ids
from src.engine.players import Player
from src.engine.validators import validate_player_name

logger = logging.getLogger(__name__)


class RuleEngine(Protocol):
    """Capabilities a rule set must provide to be driven by GameEngine."""

    max_rounds: int | None

    def create_player(self, player_id: str, name: str) -> Player: ...

    def play_round(self, game: GameEngine) -> Sequence[Any]: ...

    def get_round_winner(self, game: GameEngine) -> Player | None: ...

    def get_winners(self, game: GameEngine) -> list[Player]: ...

    def get_game_rules(self) -> GameRules: ...

    def get_game_name(self) -> str: ...

    def get_min_players(self) -> int: ...

    def get_max_players(self) -> int | None: ...

    def can_advance_round(self, game: GameEngine) -> bool: ...

    def submit_choice(self, game: GameEngine, player_id: str, choice: int) -> None: ...

    def describe_state(self, game: GameEngine) -> dict[str, Any]: ...

    def reset(self) -> None: ...

    def on_game_start(self, game: GameEngine) -> None: ...

    def on_round_start(self, game: GameEngine) -> None: ...

    def on_game_end(self, game: GameEngine) -> None: ...


class RuleDefaults:
    """
    Default implementations of the optional RuleEngine capabilities.

    Rule sets mix this in and override only what they need. It holds no
    state of its own.
    """

    max_rounds: int | None = 3

    def get_min_players(self) -> int:
        return 2

    def get_max_players(self) -> int | None:
        return None

    def can_advance_round(self, game: GameEngine) -> bool:
        """Generic policy: the round was played and the cap is not reached."""
        if not game.has_played_this_round:
            return False
        return game.max_rounds is None or game.current_round < game.max_rounds

    def submit_choice(self, game: GameEngine, player_id: str, choice: int) -> None:
        raise StateError(f"{game.get_game_name()} does not accept player choices.")

    def describe_state(self, game: GameEngine) -> dict[str, Any]:
        return {}

    def reset(self) -> None:
        pass

    def on_game_start(self, game: GameEngine) -> None:
        pass

    def on_round_start(self, game: GameEngine) -> None:
        pass

    def on_game_end(self, game: GameEngine) -> None:
        pass


class GameSnapshot(BaseModel):
    """Read-only view of a game for presentation code.

    Rule sets contribute extra fields (e.g. target_number), which are
    readable as attributes and included in model_dump().
    """

    state: GameStatus
    current_round: int
    max_rounds: int | None
    has_played_this_round: bool
    players: list[dict[str, Any]]
    round_winner: dict[str, Any] | None = None
    game_name: str

    model_config = {"frozen": True, "extra": "allow"}


class GameEngine:
    """Generic round-based lifecycle driven by a pluggable RuleEngine.

    Not thread-safe; a single caller owns the instance.
    """

    def __init__(
        self,
        rules: RuleEngine,
        *,
        id_generator: IdGenerator | None = None,
    ) -> None:
        self.rules = rules
        self._next_id = id_generator or uuid_ids()
        self._listeners: list[EventHandler] = []
        self.players: list[Player] = []
        self.status = GameStatus.SETUP
        self.current_round = 1
        self.has_played_this_round = False

    @property
    def max_rounds(self) -> int | None:
        return self.rules.max_rounds

    # -- Roster ----------------------------------------------------------

    def add_player(self, name: str) -> Player:
        """Create a game-specific player and append it to the roster.

        Raises:
            StateError: If the game has already started.
            ValidationError: If the name is empty or taken, or the roster is full.
        """
        self._require_status(GameStatus.SETUP, "add players")
        validate_player_name(name, (p.name for p in self.players))

        max_players = self.rules.get_max_players()
        if max_players is not None and len(self.players) >= max_players:
            raise ValidationError(
                f"{self.get_game_name()} allows at most {max_players} players."
            )

        player = self.rules.create_player(self._next_id(), name)
        self.players.append(player)
        logger.debug("Player %s joined %s as %s", name, self.get_game_name(), player.id)
        self.emit(GameEvent.PLAYER_JOINED, player_id=player.id, name=name)
        return player

    def remove_player(self, player_id: str) -> bool:
        """Remove a player by id. Returns False if no such player exists."""
        self._require_status(GameStatus.SETUP, "remove players")
        for index, player in enumerate(self.players):
            if player.id == player_id:
                del self.players[index]
                self.emit(GameEvent.PLAYER_LEFT, player_id=player_id, name=player.name)
                return True
        return False

    def get_player(self, player_id: str) -> Player:
        for player in self.players:
            if player.id == player_id:
                return player
        raise NotFoundError(f"Player '{player_id}' not found.")

    def active_players(self) -> list[Player]:
        """Players still in the game, in join order."""
        return [p for p in self.players if not getattr(p, "is_eliminated", False)]

    # -- Lifecycle -------------------------------------------------------

    def can_start_game(self) -> bool:
        return len(self.players) >= self.rules.get_min_players()

    def start_game(self) -> None:
        """Transition SETUP -> PLAYING.

        Raises:
            StateError: If not in SETUP or there are too few players.
        """
        self._require_status(GameStatus.SETUP, "start the game")
        if not self.can_start_game():
            raise StateError(
                f"Need at least {self.rules.get_min_players()} players to start."
            )

        self.status = GameStatus.PLAYING
        self.current_round = 1
        self.has_played_this_round = False
        self.rules.on_game_start(self)
        logger.info(
            "%s started with %d players", self.get_game_name(), len(self.players)
        )
        self.emit(GameEvent.GAME_STARTED, players=[p.name for p in self.players])

    def play_round(self) -> list[Any]:
        """Resolve the current round (and, for self-driving games, the following ones).

        Returns:
            The round results produced by this call, oldest first.
        """
        self._require_status(GameStatus.PLAYING, "play a round")
        return list(self.rules.play_round(self))

    def submit_choice(self, player_id: str, choice: int) -> None:
        """Record an externally supplied choice for the current round."""
        self.rules.submit_choice(self, player_id, choice)

    def complete_round(self) -> None:
        """Mark the current round as played. Called by rule sets."""
        self.has_played_this_round = True

    def can_advance_round(self) -> bool:
        return self.status is GameStatus.PLAYING and self.rules.can_advance_round(self)

    def advance_round(self) -> bool:
        """Move to the next round.

        Returns:
            True if a new round began, False if the round cap ended the game.

        Raises:
            StateError: If the game is not being played or the round has not
                been played yet.
        """
        self._require_status(GameStatus.PLAYING, "advance the round")
        if not self.rules.can_advance_round(self):
            if self.max_rounds is not None and self.current_round >= self.max_rounds:
                self.end_game()
                return False
            raise StateError("Cannot advance round: the current round has not been played.")

        self.current_round += 1
        self.has_played_this_round = False
        self.rules.on_round_start(self)
        logger.debug("%s advanced to round %d", self.get_game_name(), self.current_round)
        self.emit(GameEvent.ROUND_ADVANCED)
        return True

    def end_game(self) -> None:
        """Transition to FINISHED. Calling it again re-runs the end hook."""
        self.status = GameStatus.FINISHED
        self.rules.on_game_end(self)
        logger.info(
            "%s finished after %d rounds", self.get_game_name(), self.current_round
        )
        self.emit(GameEvent.GAME_FINISHED)

    def reset(self) -> None:
        """Return to an empty SETUP state, keeping the engine and its subscribers."""
        self.players = []
        self.current_round = 1
        self.has_played_this_round = False
        self.status = GameStatus.SETUP
        self.rules.reset()
        self.emit(GameEvent.GAME_RESET)

    # -- Read side -------------------------------------------------------

    def get_game_state(self) -> GameSnapshot:
        round_winner = self.get_round_winner()
        return GameSnapshot(
            state=self.status,
            current_round=self.current_round,
            max_rounds=self.max_rounds,
            has_played_this_round=self.has_played_this_round,
            players=[p.to_dict() for p in self.players],
            round_winner=round_winner.to_dict() if round_winner else None,
            game_name=self.get_game_name(),
            **self.rules.describe_state(self),
        )

    def get_game_rules(self) -> GameRules:
        return self.rules.get_game_rules()

    def get_game_name(self) -> str:
        return self.rules.get_game_name()

    def get_winners(self) -> list[Player]:
        return self.rules.get_winners(self)

    def get_round_winner(self) -> Player | None:
        return self.rules.get_round_winner(self)

    # -- Events ----------------------------------------------------------

    def subscribe(self, on_event: EventHandler) -> None:
        if on_event not in self._listeners:
            self._listeners.append(on_event)

    def unsubscribe(self, on_event: EventHandler) -> None:
        if on_event in self._listeners:
            self._listeners.remove(on_event)

    def emit(self, event: GameEvent, player_id: str | None = None, **data: Any) -> None:
        """Deliver an event to every subscriber."""
        payload = EventPayload(
            event=event,
            game_name=self.get_game_name(),
            round_number=self.current_round,
            player_id=player_id,
            data=data,
        )
        for handler in list(self._listeners):
            try:
                handler(payload)
            except Exception:
                logger.exception("Error in %s event handler", event.name)

    def _require_status(self, expected: GameStatus, action: str) -> None:
        if self.status is not expected:
            raise StateError(
                f"Cannot {action} while the game is {self.status.value}."
            )
