"""core/bootstrap.py — Session bootstrap helpers.

Extracted from main.py to keep the entry point clean and readable.
Handles:
  - World resources (clock, timers, event bus, dev log, recovery system)
  - Player creation / save restoration
  - Attaching subjects once the world is ready
"""

from __future__ import annotations
from pathlib import Path
from typing import TYPE_CHECKING

from components import GameClock, DevLog
from core import tuning
from core.constants import DEFAULT_TIME_SCALE
from core.events import EventBus, SubjectAttached
from core.save import load_game_state, restore_game_state
from logic.entity_factory import spawn_from_descriptor, descriptor_from_tuning
from logic.recovery_system import RecoverySystem
from simulation.scheduler import DelayScheduler

if TYPE_CHECKING:
    from core.ecs import World


def init_world(world: "World") -> RecoverySystem:
    """Install every world resource the systems need.

    Order matters: ``RecoverySystem`` looks up the others.
    """
    clock = GameClock(time_scale=float(tuning.get("clock", "time_scale",
                                                  DEFAULT_TIME_SCALE)))
    world.set_res(clock)
    world.set_res(DelayScheduler())
    world.set_res(EventBus())
    world.set_res(DevLog())
    return RecoverySystem(world)


def spawn_player(world: "World", slot: int = 0,
                 saves_dir: Path | None = None) -> list[int]:
    """Restore subjects from the save slot, or spawn the default one.

    Emits ``SubjectAttached`` for each; they start recovering on the
    next bus drain.  Returns the subject eids.
    """
    data = load_game_state(slot, saves_dir)
    eids = restore_game_state(world, data) if data is not None else []
    if eids:
        print(f"[BOOT] Restored {len(eids)} subjects from slot {slot}")
    else:
        eids = [spawn_from_descriptor(world, descriptor_from_tuning())]
        print("[BOOT] No save found — spawned default subject")

    bus = world.res(EventBus)
    for eid in eids:
        bus.emit(SubjectAttached(eid=eid))
    return eids
