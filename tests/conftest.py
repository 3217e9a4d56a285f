"""
Parlor Games - Test Configuration and Fixtures

Common fixtures and helpers for all test modules.
"""

import random
from typing import Callable, Iterable

import pytest

from src.config.settings import get_settings
from src.engine.dice_game import DiceGameRules
from src.engine.identity import sequential_ids
from src.engine.king_of_diamond import KingOfDiamondRules
from src.engine.lifecycle import GameEngine
from src.engine.players import DiamondPlayer


def _scripted_chooser(rounds: Iterable[dict[str, int]]) -> Callable[[DiamondPlayer], int]:
    """
    Chooser replaying fixed choices round by round.

    Each dict maps player name to that player's choice for one round.
    A round advances once every named player has been asked.
    """
    script = [dict(r) for r in rounds]
    state = {"round": 0, "asked": set()}

    def choose(player: DiamondPlayer) -> int:
        current = script[state["round"]]
        choice = current[player.name]
        state["asked"].add(player.name)
        if state["asked"] >= set(current):
            state["round"] += 1
            state["asked"] = set()
        return choice

    return choose


@pytest.fixture
def scripted_chooser() -> Callable[..., Callable[[DiamondPlayer], int]]:
    """Factory for choosers replaying per-round choices keyed by player name."""
    return _scripted_chooser


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Make every test see a fresh Settings instance."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_diamond_game() -> Callable[..., GameEngine]:
    """
    Factory for King of Diamond engines with sequential ids.

    Defaults to interactive play (no chooser, no auto-play) so tests
    control every choice through submit_choice().
    """

    def factory(names: Iterable[str] = (), start: bool = False, **options) -> GameEngine:
        options.setdefault("auto_play", False)
        game = GameEngine(KingOfDiamondRules(**options), id_generator=sequential_ids())
        for name in names:
            game.add_player(name)
        if start:
            game.start_game()
        return game

    return factory


@pytest.fixture
def make_dice_game() -> Callable[..., GameEngine]:
    """Factory for seeded dice game engines with sequential ids."""

    def factory(names: Iterable[str] = (), start: bool = False, **options) -> GameEngine:
        options.setdefault("rng", random.Random(1234))
        game = GameEngine(DiceGameRules(**options), id_generator=sequential_ids())
        for name in names:
            game.add_player(name)
        if start:
            game.start_game()
        return game

    return factory


@pytest.fixture
def submit_round() -> Callable[[GameEngine, dict[str, int]], None]:
    """Submit one choice per named player."""

    def submit(game: GameEngine, choices: dict[str, int]) -> None:
        by_name = {p.name: p for p in game.players}
        for name, choice in choices.items():
            game.submit_choice(by_name[name].id, choice)

    return submit
