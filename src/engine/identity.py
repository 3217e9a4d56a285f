"""
Parlor Games - Player Identity Generators

The engine never invents ids itself; it calls an injected generator.
Use sequential_ids() for deterministic tests and replays, uuid_ids()
everywhere else.
"""

import itertools
import uuid
from typing import Callable

IdGenerator = Callable[[], str]


def sequential_ids(prefix: str = "player") -> IdGenerator:
    """Return a generator yielding prefix_1, prefix_2, ..."""
    counter = itertools.count(1)

    def next_id() -> str:
        return f"{prefix}_{next(counter)}"

    return next_id


def uuid_ids(prefix: str = "player") -> IdGenerator:
    """Return a generator yielding prefix_<random uuid hex>."""

    def next_id() -> str:
        return f"{prefix}_{uuid.uuid4().hex}"

    return next_id
