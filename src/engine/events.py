"""
Parlor Games - Game Event Definitions

Event types and payloads emitted by a GameEngine to its subscribers.
ROUND_PLAYED is the per-round checkpoint: it fires once for every round
the engine resolves, including rounds resolved by the self-driving
King of Diamond loop.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable


class GameEvent(Enum):
    """Events that can occur during a game."""

    PLAYER_JOINED = auto()
    PLAYER_LEFT = auto()
    GAME_STARTED = auto()
    CHOICE_SUBMITTED = auto()
    ROUND_PLAYED = auto()
    PLAYER_ELIMINATED = auto()
    ROUND_ADVANCED = auto()
    GAME_FINISHED = auto()
    GAME_RESET = auto()


@dataclass
class EventPayload:
    """Wrapper for event data delivered to subscribers."""

    event: GameEvent
    game_name: str
    round_number: int
    player_id: str | None = None
    data: dict[str, Any] = field(default_factory=dict)


EventHandler = Callable[[EventPayload], None]
