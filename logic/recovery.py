"""logic/recovery.py — Humanity recovery: rate curve, accumulator, scheduler.

Humanity damage recovers (or would degenerate) at a rate set by how
much of the subject's cyberware capacity is in use:

    load < threshold   → recovering, up to ``rate`` HP/day at load 0
    load == threshold  → balanced, exactly 0
    load > threshold   → degenerating, up to ``rate`` HP/day at load 1

Only the recovering side is applied here; degeneration is reported by
``degen_rate`` for previews but never added as damage by this path.

Every ``interval`` game-seconds the ``RecoveryScheduler`` fires one
cycle: the ``RecoveryAccumulator`` converts elapsed game time into a
whole number of HP (carrying the fraction to the next cycle) and the
result is subtracted from the subject's ``HumanityStore``.
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from components import RecoveryState, DevLog
from core import tuning
from core.constants import (
    SECONDS_PER_DAY, RECOVERY_INTERVAL, MIN_RECOVERY_INTERVAL, RECOVERY_TOKEN,
    RATE_EPSILON, THRESHOLD_EPSILON, DEFAULT_RATE, DEFAULT_THRESHOLD, NO_TIMER,
)
from logic.humanity import HumanityStore, CyberwareLoadSource, apply_recovery

if TYPE_CHECKING:
    from components import GameClock
    from simulation.scheduler import DelayScheduler


# ── Rate curve ───────────────────────────────────────────────────────

def degen_rate(rate: float, threshold: float, load: float) -> float:
    """Signed degeneration rate in HP/day (positive = damage increasing).

    Piecewise linear through zero at *threshold*, reaching ``-rate`` at
    load 0 and ``+rate`` at load 1.  Each side is scaled independently so
    *rate* is the same maximum slope wherever the threshold sits.

    >>> degen_rate(2.5, 0.5, 0.75)
    1.25
    """
    d = load - threshold
    if abs(d) <= RATE_EPSILON:
        return 0.0
    if d < 0.0:
        return d * rate / threshold
    return d * rate / (1.0 - threshold)


def recovery_rate(config: "RecoveryConfig", load: float) -> float:
    """HP/day recovered at *load* (positive = damage decreasing)."""
    return -degen_rate(config.rate, config.threshold, load)


def rate_curve(config: "RecoveryConfig",
               samples: int = 41) -> list[tuple[float, float]]:
    """``(load, degen_rate)`` points across [0, 1] for plotting."""
    samples = max(2, samples)
    step = 1.0 / (samples - 1)
    return [(i * step, degen_rate(config.rate, config.threshold, i * step))
            for i in range(samples)]


# ── Configuration snapshot ───────────────────────────────────────────

@dataclass(frozen=True)
class RecoveryConfig:
    """Immutable settings snapshot — replaced wholesale, never mutated."""
    rate: float = DEFAULT_RATE
    threshold: float = DEFAULT_THRESHOLD
    enabled: bool = True
    interval: float = RECOVERY_INTERVAL
    skip_detached_time: bool = False

    @classmethod
    def create(cls, rate: float, threshold: float, *,
               enabled: bool = True,
               interval: float = RECOVERY_INTERVAL,
               skip_detached_time: bool = False) -> "RecoveryConfig":
        """Build a validated snapshot.

        Non-finite values (``inf``, ``nan``) fall back to the defaults.
        Negative rates become 0 and the threshold is kept inside
        ``[THRESHOLD_EPSILON, 1 - THRESHOLD_EPSILON]`` so neither side of
        the curve divides by zero.  The interval is at least
        ``MIN_RECOVERY_INTERVAL`` so every timer moves the clock forward.
        """
        rate = _finite("rate", rate, DEFAULT_RATE)
        threshold = _finite("threshold", threshold, DEFAULT_THRESHOLD)
        interval = _finite("interval", interval, RECOVERY_INTERVAL)

        clamped = min(max(threshold, THRESHOLD_EPSILON), 1.0 - THRESHOLD_EPSILON)
        if clamped != threshold:
            print(f"[RECOVERY] threshold {threshold} clamped to {clamped}")
        if rate < 0.0:
            print(f"[RECOVERY] negative rate {rate} clamped to 0")
            rate = 0.0
        if interval <= 0.0:
            interval = RECOVERY_INTERVAL
        elif interval < MIN_RECOVERY_INTERVAL:
            print(f"[RECOVERY] interval {interval} raised to {MIN_RECOVERY_INTERVAL}")
            interval = MIN_RECOVERY_INTERVAL
        return cls(rate=rate, threshold=clamped, enabled=enabled,
                   interval=interval, skip_detached_time=skip_detached_time)

    @classmethod
    def from_tuning(cls) -> "RecoveryConfig":
        """Snapshot the ``[recovery]`` table of the current tuning data."""
        sec = tuning.section("recovery")
        return cls.create(
            _num(sec, "rate", DEFAULT_RATE),
            _num(sec, "threshold", DEFAULT_THRESHOLD),
            enabled=bool(sec.get("enabled", True)),
            interval=_num(sec, "interval", RECOVERY_INTERVAL),
            skip_detached_time=bool(sec.get("skip_detached_time", False)),
        )


def _num(sec: dict, key: str, default: float) -> float:
    value = sec.get(key, default)
    try:
        return float(value)
    except (TypeError, ValueError):
        print(f"[RECOVERY] [recovery] {key} = {value!r} is not a number — using {default}")
        return default


def _finite(key: str, value: float, default: float) -> float:
    if math.isfinite(value):
        return value
    print(f"[RECOVERY] [recovery] {key} = {value} is not finite — using {default}")
    return default


# ── Accumulator ──────────────────────────────────────────────────────

class RecoveryAccumulator:
    """Turns elapsed game time into whole HP of recovery, losslessly.

    The fractional part of each cycle is kept in ``state.remainder`` and
    added to the next one, so many tiny increments still add up.
    """

    def __init__(self, state: RecoveryState) -> None:
        self.state = state

    def sample(self, now: float, config: RecoveryConfig, load: float) -> int:
        """Whole HP to subtract from humanity damage for this cycle."""
        state = self.state
        delta = now - state.last_sample_time
        # Always advance, even on the no-op paths below
        state.last_sample_time = now

        if now <= 0.0 or delta <= 0.0:
            return 0

        day_frac = delta / SECONDS_PER_DAY
        raw = recovery_rate(config, load) * day_frac
        if raw <= 0.0:
            return 0

        total = state.remainder + raw
        whole = math.trunc(total)
        state.remainder = total - whole
        return whole


# ── Scheduler ────────────────────────────────────────────────────────

class RecoveryScheduler:
    """Owns the one recurring recovery timer of a single subject.

    Idle until ``start()``; each firing runs one cycle and reschedules
    itself ``config.interval`` game-seconds later until ``stop()``.
    Collaborators are handed in by the caller and assumed valid for the
    scheduler's whole running lifetime.
    """

    def __init__(self, eid: int, clock: "GameClock", delays: "DelayScheduler",
                 load_source: CyberwareLoadSource, store: HumanityStore,
                 accumulator: RecoveryAccumulator, config: RecoveryConfig,
                 *, log: DevLog | None = None, name: str = "") -> None:
        self.eid = eid
        self.name = name or f"eid={eid}"
        self.clock = clock
        self.delays = delays
        self.load_source = load_source
        self.store = store
        self.accumulator = accumulator
        self.config = config
        self.log = log

        self.token = f"{RECOVERY_TOKEN}:{eid}"
        self._handle: int = NO_TIMER
        self.cycles: int = 0
        self.last_amount: int = 0

        delays.register_handler(self.token, self._on_fire)

    # ── Control ──────────────────────────────────────────────────────

    def start(self) -> bool:
        """Run one cycle now and keep cycling.

        Refuses (returns False) if a timer is already outstanding.
        """
        if self._handle != NO_TIMER:
            print(f"[RECOVERY] {self.name}: start() while already scheduled — ignored")
            return False
        self._cycle()
        return True

    def stop(self) -> None:
        """Cancel the outstanding timer.  Safe to call when idle."""
        if self._handle != NO_TIMER:
            self.delays.cancel(self._handle)
            self._handle = NO_TIMER

    def is_active(self) -> bool:
        return self._handle != NO_TIMER

    def set_config(self, config: RecoveryConfig) -> None:
        """Swap in a new settings snapshot; used from the next cycle on."""
        self.config = config

    def dispose(self) -> None:
        """Stop and release the timer token.  The scheduler is dead after this."""
        self.stop()
        self.delays.unregister_handler(self.token)

    # ── Cycle ────────────────────────────────────────────────────────

    def _on_fire(self, payload: dict, delays: "DelayScheduler",
                 game_time: float) -> None:
        # The timer that just fired is spent
        self._handle = NO_TIMER
        self._cycle()

    def _cycle(self) -> None:
        now = self.clock.now_seconds()
        load = self.load_source.load_fraction()
        amount = self.accumulator.sample(now, self.config, load)
        changed = apply_recovery(self.store, amount)

        self.cycles += 1
        self.last_amount = amount

        if self.log is not None:
            equipped, capacity = self.load_source.counts()
            self.log.record(
                self.eid, "recovery",
                f"-{amount} HP" if changed else "no change",
                name=self.name, t=now,
                details={
                    "load": round(load, 4),
                    "equipped": equipped,
                    "capacity": capacity,
                    "remainder": self.accumulator.state.remainder,
                    "damage": self.store.get_damage(),
                },
            )

        self._handle = self.delays.schedule(
            self.token, {"eid": self.eid}, self.config.interval)
