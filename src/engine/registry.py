"""
Parlor Games - Game Registry

Maps a game identifier to a factory producing a ready-to-use GameEngine.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Callable

from src.config.settings import Settings, get_settings
from src.engine.base import GameMode
from src.engine.dice_game import DiceGameRules
from src.engine.errors import NotFoundError
from src.engine.identity import IdGenerator
from src.engine.king_of_diamond import KingOfDiamondRules
from src.engine.lifecycle import GameEngine, RuleEngine

logger = logging.getLogger(__name__)

RulesFactory = Callable[..., RuleEngine]


@dataclass(frozen=True)
class GameEntry:
    """
    Registry record for one game.

    Attributes:
        name: Display name
        description: One-line summary
        factory: Builds a fresh rule set; receives rng and rule options
        min_players: Players required to start
        max_players: Roster limit (None = unlimited)
    """
    name: str
    description: str
    factory: RulesFactory
    min_players: int = 2
    max_players: int | None = None


class GameRegistry:
    """Central registry for all available games."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        self._games: dict[str, GameEntry] = {}
        self._register_default_games()

    def _register_default_games(self) -> None:
        settings = self._settings

        self.register(GameMode.DICE.value, GameEntry(
            name=DiceGameRules.GAME_NAME,
            description=f"Roll {settings.dice_per_player} dice, highest score wins",
            factory=lambda **options: DiceGameRules.from_settings(settings, **options),
            min_players=DiceGameRules.MIN_PLAYERS,
            max_players=DiceGameRules.MAX_PLAYERS,
        ))
        self.register(GameMode.KING_OF_DIAMOND.value, GameEntry(
            name=KingOfDiamondRules.GAME_NAME,
            description="Choose numbers strategically. Closest to (average x 0.8) wins!",
            factory=lambda **options: KingOfDiamondRules.from_settings(settings, **options),
            min_players=KingOfDiamondRules.MIN_PLAYERS,
            max_players=KingOfDiamondRules.MAX_PLAYERS,
        ))

    def register(self, game_id: str, entry: GameEntry) -> None:
        if game_id in self._games:
            logger.warning("Replacing registered game %s", game_id)
        self._games[game_id] = entry

    def get_entry(self, game_id: str) -> GameEntry:
        try:
            return self._games[game_id]
        except KeyError:
            raise NotFoundError(f"Game '{game_id}' not found in registry.") from None

    def create_game(
        self,
        game_id: str,
        *,
        rng: random.Random | None = None,
        id_generator: IdGenerator | None = None,
        **options: Any,
    ) -> GameEngine:
        """Build a new engine for a registered game.

        Args:
            game_id: Registry identifier, e.g. "king_of_diamond"
            rng: Random source for the rule set
            id_generator: Player id generator for the engine
            **options: Rule set options overriding the settings defaults

        Raises:
            NotFoundError: If the identifier is not registered
        """
        entry = self.get_entry(game_id)
        rules = entry.factory(rng=rng, **options)
        logger.debug("Created %s engine", entry.name)
        return GameEngine(rules, id_generator=id_generator)

    def get_available_games(self) -> list[dict[str, Any]]:
        return [
            {
                "id": game_id,
                "name": entry.name,
                "description": entry.description,
                "min_players": entry.min_players,
                "max_players": entry.max_players,
            }
            for game_id, entry in self._games.items()
        ]

    def game_exists(self, game_id: str) -> bool:
        return game_id in self._games
