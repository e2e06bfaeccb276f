"""
core/ecs.py — Entities, components and world resources

A subject is just an int id.  Its state lives in plain dataclass
components keyed by type (``Humanity``, ``CyberwareLoad``,
``RecoveryState``).  One-per-world services — the game clock, the
delay scheduler, the event bus, the recovery system — are resources.

    w = World()
    e = w.spawn()
    w.add(e, Humanity(damage=40))
    w.set_res(GameClock())

    for eid, hum in w.all_of(Humanity):
        ...

Ids restored from a save are claimed with ``reserve()`` so freshly
spawned subjects never reuse them.
"""

from __future__ import annotations
from typing import Any, Iterator


class World:
    def __init__(self):
        self._next_id = 0
        self._components: dict[type, dict[int, Any]] = {}
        self._resources: dict[type, Any] = {}
        self._dead: set[int] = set()

    # -- Subjects --

    def spawn(self) -> int:
        self._next_id += 1
        return self._next_id

    def reserve(self, eid: int) -> int:
        """Claim a specific id, e.g. one read back from a save file."""
        self._next_id = max(self._next_id, eid)
        self._dead.discard(eid)
        return eid

    def kill(self, eid: int):
        """Mark *eid* dead; its components go at the next ``purge()``.

        Detach it from the recovery system first.
        """
        self._dead.add(eid)

    def alive(self, eid: int) -> bool:
        return 0 < eid <= self._next_id and eid not in self._dead

    def purge(self):
        """Drop components of dead subjects. Called once per frame."""
        if not self._dead:
            return
        for store in self._components.values():
            for eid in self._dead:
                store.pop(eid, None)
        self._dead.clear()

    # -- Components --

    def add(self, eid: int, comp: Any):
        self._components.setdefault(type(comp), {})[eid] = comp

    def get(self, eid: int, comp_type: type) -> Any | None:
        return self._components.get(comp_type, {}).get(eid)

    def has(self, eid: int, comp_type: type) -> bool:
        return eid in self._components.get(comp_type, {})

    def all_of(self, comp_type: type) -> Iterator[tuple[int, Any]]:
        """Yield (eid, component) for every live subject with this type."""
        for eid, comp in self._components.get(comp_type, {}).items():
            if eid not in self._dead:
                yield eid, comp

    # -- Resources --

    def set_res(self, resource: Any):
        self._resources[type(resource)] = resource

    def res(self, res_type: type) -> Any | None:
        return self._resources.get(res_type)
