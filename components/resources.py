"""components.resources — World-level singletons (not per-entity)."""

from __future__ import annotations
from dataclasses import dataclass

from core.constants import DEFAULT_TIME_SCALE


@dataclass
class GameClock:
    """Monotonic game time in simulated seconds since the session's time base.

    ``time`` stays 0.0 until the first ``advance()``, which is how the
    recovery accumulator tells "no time base yet" apart from a real
    sample.  ``time_scale`` converts real frame ``dt`` to game seconds.
    Updated once per frame by ``tick_systems``.
    """
    time: float = 0.0
    time_scale: float = DEFAULT_TIME_SCALE
    paused: bool = False

    def advance(self, dt: float) -> float:
        """Advance by *dt* real seconds.  Returns the game seconds added."""
        if self.paused or dt <= 0.0:
            return 0.0
        step = dt * self.time_scale
        self.time += step
        return step

    def now_seconds(self) -> float:
        return self.time
