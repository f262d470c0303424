"""In-memory store of things behind the authenticated API."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Thing:
    """A thing to be stored."""

    name: str


@dataclass(frozen=True)
class ThingWithId:
    """A stored thing together with its identifier."""

    id: int
    name: str


@dataclass
class ThingStore:
    """A thread-safe collection of things keyed by sequential identifiers."""

    last_id: int = 0
    things: dict[int, Thing] = field(default_factory=dict)
    _lock: threading.RLock = field(
        default_factory=threading.RLock, init=False, repr=False, compare=False
    )

    def list_things(self) -> list[ThingWithId]:
        """Return every stored thing, ordered by identifier."""
        with self._lock:
            return [
                ThingWithId(id=key, name=self.things[key].name)
                for key in sorted(self.things)
            ]

    def add_thing(self, thing: Thing) -> ThingWithId:
        """Store a thing under the next identifier and return it with that id."""
        with self._lock:
            thing_id = self.last_id
            self.things[thing_id] = thing
            self.last_id += 1
        return ThingWithId(id=thing_id, name=thing.name)