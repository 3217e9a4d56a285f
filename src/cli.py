"""
Parlor Games CLI - Command-line simulator.

Usage:
    parlor list                                   List registered games
    parlor play <game_id> --players A B C         Play a game to completion
    parlor play king_of_diamond --players A B --step --seed 7
"""

import argparse
import logging
import random
import sys

from src.config import Settings, configure_logging, get_settings
from src.engine.base import GameMode, GameStatus
from src.engine.dice_game import DiceRoundResult
from src.engine.errors import GameError
from src.engine.king_of_diamond import DiamondRoundResult, random_chooser
from src.engine.lifecycle import GameEngine
from src.engine.registry import GameRegistry
from src.engine.validators import validate_player_count

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Parlor Games - turn-based game simulator",
        prog="parlor",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("list", help="List available games")

    play_parser = subparsers.add_parser("play", help="Simulate a game to completion")
    play_parser.add_argument("game_id", help="Registered game identifier")
    play_parser.add_argument(
        "--players", "-p", nargs="+", required=True, help="Player names in join order"
    )
    play_parser.add_argument("--seed", type=int, default=None, help="Random seed")
    play_parser.add_argument(
        "--step",
        action="store_true",
        help="Resolve one round per step instead of the self-driving cascade",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level, settings.debug)

    if args.command == "list":
        return cmd_list(GameRegistry(settings))
    if args.command == "play":
        seed = args.seed if args.seed is not None else settings.random_seed
        return cmd_play(
            GameRegistry(settings), settings, args.game_id, args.players, seed, args.step
        )

    parser.print_help()
    return 1


def cmd_list(registry: GameRegistry) -> int:
    """Print every registered game."""
    for game in registry.get_available_games():
        max_players = game["max_players"] or "any"
        print(f"{game['id']}: {game['name']} ({game['min_players']}-{max_players} players)")
        print(f"    {game['description']}")
    return 0


def cmd_play(
    registry: GameRegistry,
    settings: Settings,
    game_id: str,
    names: list[str],
    seed: int | None,
    step: bool,
) -> int:
    """Set up a game, play it to the end and print the results."""
    rng = random.Random(seed)
    options = {}
    if step and game_id == GameMode.KING_OF_DIAMOND.value:
        # one round per play_round() call, same random choices as the cascade
        options = {
            "auto_play": False,
            "chooser": random_chooser(rng, settings.choice_min, settings.choice_max),
        }

    try:
        entry = registry.get_entry(game_id)
        validate_player_count(len(names), entry.min_players, entry.max_players)
        game = registry.create_game(game_id, rng=rng, **options)
        for name in names:
            game.add_player(name)
        game.start_game()
        run_to_completion(game)
    except GameError as exc:
        logger.debug("Game %s aborted: %r", game_id, exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    winners = game.get_winners()
    if winners:
        print("Winner(s): " + ", ".join(p.name for p in winners))
    else:
        print("No winners.")
    return 0


def run_to_completion(game: GameEngine) -> None:
    while game.status is GameStatus.PLAYING:
        for result in game.play_round():
            print_round(game, result)
        if game.status is GameStatus.PLAYING:
            game.advance_round()


def print_round(game: GameEngine, result: DiamondRoundResult | DiceRoundResult) -> None:
    names = {p.id: p.name for p in game.players}
    print(f"******* Round {result.round_number} *******")

    if isinstance(result, DiamondRoundResult):
        for player in game.players:
            life_points = result.life_points.get(player.id, player.life_points)
            if player.id not in result.choices:
                print(f"{life_points} {player.name} (Eliminated)")
                continue
            eliminated = " (Eliminated)" if player.id in result.eliminated_ids else ""
            print(
                f"{life_points} {player.name} chose {result.choices[player.id]}{eliminated}"
            )
        print(f"Target Number: {result.target_number:.2f}")
    elif isinstance(result, DiceRoundResult):
        for player_id, roll in result.rolls.items():
            faces = " ".join(str(v) for v in roll.values)
            print(f"{names[player_id]} rolled {faces} ({roll.total})")

    if result.winner_ids:
        print("Round Winner(s): " + ", ".join(names[pid] for pid in result.winner_ids))
    else:
        print("No winners.")
    print()


if __name__ == "__main__":
    sys.exit(main())
