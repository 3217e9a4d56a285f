"""
Parlor Games - Input Validation Utilities

Provides validation functions for game engine inputs. All validators
either return validated data or raise a descriptive ValidationError.
"""

from typing import Iterable, Sequence

from src.engine.base import DiceType
from src.engine.errors import ValidationError


def validate_player_name(name: str, taken_names: Iterable[str] = ()) -> str:
    """
    Validate a new player's name against the current roster.

    Names are compared exactly (case-sensitive) and are returned
    unchanged; only the emptiness check ignores surrounding whitespace.

    Args:
        name: Proposed display name
        taken_names: Names already present in the roster

    Returns:
        The validated name

    Raises:
        ValidationError: If the name is empty, whitespace-only or taken
    """
    if not isinstance(name, str):
        raise ValidationError(f"Player name must be a string, got {type(name).__name__}.")

    if not name.strip():
        raise ValidationError("Player name cannot be empty.")

    if name in set(taken_names):
        raise ValidationError(f"Player name '{name}' already exists.")

    return name


def validate_choice(value: int, min_value: int = 0, max_value: int = 100) -> int:
    """
    Validate a number chosen by a player for the current round.

    Args:
        value: The chosen number
        min_value: Lowest allowed value (inclusive)
        max_value: Highest allowed value (inclusive)

    Returns:
        Validated choice

    Raises:
        ValidationError: If the value is not an integer or out of range
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"Choice must be an integer, got {type(value).__name__}.")

    if not (min_value <= value <= max_value):
        raise ValidationError(
            f"Choice must be between {min_value} and {max_value}, got {value}."
        )

    return value


def validate_dice_values(
    values: Sequence[int],
    dice_type: DiceType = DiceType.D6,
    min_count: int = 1,
    max_count: int | None = None
) -> tuple[int, ...]:
    """
    Validate and normalize dice values.

    Args:
        values: Sequence of dice values to validate
        dice_type: Type of dice (determines valid range)
        min_count: Minimum number of dice required
        max_count: Maximum number of dice allowed (None = no limit)

    Returns:
        Validated values as a tuple

    Raises:
        ValidationError: If validation fails
    """
    values_tuple = tuple(values)
    count = len(values_tuple)

    if count < min_count:
        raise ValidationError(f"At least {min_count} dice required, got {count}.")

    if max_count is not None and count > max_count:
        raise ValidationError(f"At most {max_count} dice allowed, got {count}.")

    max_value = dice_type.value
    for i, value in enumerate(values_tuple):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(
                f"Die value at index {i} must be an integer, got {type(value).__name__}."
            )
        if not (1 <= value <= max_value):
            raise ValidationError(
                f"Die value at index {i} is {value}, must be between 1 and {max_value} for {dice_type.name}."
            )

    return values_tuple


def validate_player_count(count: int, min_players: int, max_players: int | None = None) -> int:
    """
    Validate a number of players against a rule set's limits.

    Args:
        count: Number of players
        min_players: Minimum required
        max_players: Maximum allowed (None = no limit)

    Returns:
        Validated count

    Raises:
        ValidationError: If count is outside the limits
    """
    if not isinstance(count, int):
        raise ValidationError(f"Player count must be an integer, got {type(count).__name__}.")

    if count < min_players:
        raise ValidationError(f"Player count must be at least {min_players}, got {count}.")

    if max_players is not None and count > max_players:
        raise ValidationError(f"Player count must be at most {max_players}, got {count}.")

    return count
