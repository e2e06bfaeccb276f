"""logic/tick.py — System tick orchestration.

One call per frame advances the game clock, fires due timers (which
runs any recovery cycles) and drains the event bus::

    from logic.tick import tick_systems
    tick_systems(world, dt)
"""

from __future__ import annotations
from typing import TYPE_CHECKING

from components import GameClock
from core.events import EventBus
from simulation.scheduler import DelayScheduler

if TYPE_CHECKING:
    from core.ecs import World


def tick_systems(world: "World", dt: float) -> int:
    """Run all core systems for one frame.

    Parameters
    ----------
    world : World
        The ECS world.
    dt : float
        Real seconds since the last frame; ``GameClock.time_scale``
        converts it to game seconds.

    Returns the number of timers fired.
    """
    clock = world.res(GameClock)
    delays = world.res(DelayScheduler)
    if clock:
        clock.advance(dt)
        if delays:
            # Timers started while draining are due relative to this frame
            delays.advance_to(clock.time)

    # Settle attach/detach/settings events before any timer uses them
    bus = world.res(EventBus)
    if bus:
        bus.drain()

    fired = 0
    if delays and clock:
        fired = delays.tick(clock.time)

    # Timers may have emitted HumanityChanged
    if bus:
        bus.drain()

    world.purge()
    return fired
