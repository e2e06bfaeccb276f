"""logic/humanity.py — Damage store and load source over subject components.

The recovery scheduler never touches components directly.  It talks to
two thin adapters bound to one subject:

    store = HumanityStore(world, eid)       # get/set/invalidate damage
    load = CyberwareLoadSource(world, eid)  # load fraction in [0, 1]

``apply_recovery(store, amount)`` is the only write path from the
recovery cycle into the damage store.
"""

from __future__ import annotations
from typing import TYPE_CHECKING

from components import Humanity, CyberwareLoad
from core.events import EventBus, HumanityChanged

if TYPE_CHECKING:
    from core.ecs import World


class HumanityStore:
    """Integer humanity damage for one subject, clamped to ``[0, maximum]``."""

    def __init__(self, world: "World", eid: int) -> None:
        self.world = world
        self.eid = eid

    def _humanity(self) -> Humanity:
        return self.world.get(self.eid, Humanity)

    def get_damage(self) -> int:
        return self._humanity().damage

    def set_damage(self, value: int) -> None:
        hum = self._humanity()
        hum.damage = max(0, min(int(value), hum.maximum))

    def invalidate(self) -> None:
        """Tell dependents (UI, stat recompute) that damage changed."""
        bus = self.world.res(EventBus)
        if bus is not None:
            bus.emit(HumanityChanged(eid=self.eid, damage=self.get_damage()))


class CyberwareLoadSource:
    """Equipped-over-capacity fraction for one subject."""

    def __init__(self, world: "World", eid: int) -> None:
        self.world = world
        self.eid = eid

    def counts(self) -> tuple[float, float]:
        """Raw ``(equipped, capacity)`` for diagnostics."""
        cw = self.world.get(self.eid, CyberwareLoad)
        return cw.equipped, cw.capacity

    def load_fraction(self) -> float:
        equipped, capacity = self.counts()
        if capacity <= 0.0:
            return 0.0
        return max(0.0, min(1.0, equipped / capacity))


def apply_recovery(store: HumanityStore, amount: int) -> bool:
    """Subtract *amount* from the store's damage, floored at zero.

    Returns True if the damage value changed.  An unchanged value is
    neither written nor invalidated.
    """
    current = store.get_damage()
    new_damage = max(0, current - amount)
    if new_damage == current:
        return False
    store.set_damage(new_damage)
    store.invalidate()
    return True
