"""test_scheduler.py — Headless checks for timers and the recovery scheduler.

Tests:
1. DelayScheduler: handles, ordering, cancellation, self-rescheduling,
   intervals too small to move the clock
2. RecoveryScheduler: start / stop / is_active state machine
3. A full in-game day of recovery cycles driven by tick_systems

Run: python test_scheduler.py
"""
from __future__ import annotations
import sys, traceback

from core.constants import NO_TIMER, SECONDS_PER_DAY, MIN_RECOVERY_INTERVAL
from core.ecs import World
from core.events import EventBus
from components import GameClock, DevLog, Humanity, CyberwareLoad, RecoveryState
from logic.humanity import HumanityStore, CyberwareLoadSource
from logic.recovery import RecoveryAccumulator, RecoveryConfig, RecoveryScheduler
from logic.tick import tick_systems
from simulation.scheduler import DelayScheduler


# ── Test harness ─────────────────────────────────────────────────────

_passed = 0
_failed = 0

def ok(label: str):
    global _passed
    _passed += 1
    print(f"  [PASS] {label}")

def fail(label: str, detail: str = ""):
    global _failed
    _failed += 1
    print(f"  [FAIL] {label}")
    if detail:
        for line in detail.strip().splitlines():
            print(f"         {line}")


def _make_subject(damage: int = 40, equipped: float = 0.0, capacity: float = 40.0,
                  config: RecoveryConfig | None = None):
    """World with one subject and a (not yet started) RecoveryScheduler."""
    w = World()
    clock = GameClock(time_scale=1.0)
    delays = DelayScheduler()
    bus = EventBus()
    log = DevLog()
    for res in (clock, delays, bus, log):
        w.set_res(res)

    eid = w.spawn()
    w.add(eid, Humanity(damage=damage, maximum=100))
    w.add(eid, CyberwareLoad(equipped=equipped, capacity=capacity))
    state = RecoveryState()
    w.add(eid, state)

    sched = RecoveryScheduler(
        eid, clock, delays,
        CyberwareLoadSource(w, eid), HumanityStore(w, eid),
        RecoveryAccumulator(state),
        config or RecoveryConfig(rate=2.5, threshold=0.5),
        log=log, name="Test",
    )
    return w, eid, sched


# ════════════════════════════════════════════════════════════════════════
#  1 — DelayScheduler
# ════════════════════════════════════════════════════════════════════════

def test_delay_scheduler():
    print("\n=== 1: DelayScheduler ===")
    delays = DelayScheduler()
    fired: list[tuple[str, float]] = []
    delays.register_handler("A", lambda p, s, t: fired.append(("A", t)))
    delays.register_handler("B", lambda p, s, t: fired.append(("B", t)))

    h1 = delays.schedule("B", None, 5.0)
    h2 = delays.schedule("A", {"x": 1}, 2.0)
    assert NO_TIMER not in (h1, h2) and h1 != h2
    assert delays.pending_count() == 2
    ok("schedule returns distinct handles, never NO_TIMER")

    assert delays.tick(1.0) == 0 and fired == []
    assert delays.tick(10.0) == 2
    assert [f[0] for f in fired] == ["A", "B"]
    assert delays.pending_count() == 0
    ok("timers fire once, earliest first, when their time is reached")

    h3 = delays.schedule("A", None, 5.0)
    assert delays.cancel(h3) is True
    assert delays.cancel(h3) is False
    assert delays.cancel(h1) is False
    assert delays.cancel(NO_TIMER) is False
    assert delays.tick(100.0) == 0
    ok("cancel is idempotent and safe on spent / unknown handles")

    # A handler that reschedules itself fires once per tick, not in a loop
    count = {"n": 0}
    def again(payload, sched, t):
        count["n"] += 1
        sched.schedule("C", payload, 1.0)
    delays.register_handler("C", again)
    delays.schedule("C", None, 1.0)
    delays.tick(500.0)
    assert count["n"] == 1
    assert delays.peek_time() == 501.0
    delays.tick(501.0)
    assert count["n"] == 2
    ok("self-rescheduling handler lands strictly after the current tick")

    delays.register_handler("D", lambda p, s, t: fired.append(("D", t)))
    delays.schedule("D", None, 1.0)
    delays.unregister_handler("D")
    before = len(fired)
    delays.tick(1000.0)
    assert len(fired) == before
    ok("timer with no registered handler is dropped")

    # Zero-delay reschedule lands at the same time but waits for the next tick
    spins = {"n": 0}
    def spin(payload, sched, t):
        spins["n"] += 1
        sched.schedule("E", payload, 0.0)
    delays = DelayScheduler()
    delays.register_handler("E", spin)
    assert delays.schedule("E", None, 0.0) == 1
    assert delays.tick(2000.0) == 1 and spins["n"] == 1
    assert delays.peek_time() == 2000.0
    assert delays.tick(2000.0) == 1 and spins["n"] == 2
    ok("timer created during a tick never fires in that same tick")


def test_tiny_interval_does_not_spin():
    print("\n=== 1b: intervals too small to move the clock ===")
    cfg = RecoveryConfig.create(2.5, 0.5, interval=1e-14)
    assert cfg.interval == MIN_RECOVERY_INTERVAL
    ok("create() raises sub-second intervals to the minimum")

    # An unvalidated snapshot still can't wedge tick()
    w, eid, sched = _make_subject(config=RecoveryConfig(rate=2.5, threshold=0.5,
                                                        interval=1e-14))
    delays = w.res(DelayScheduler)
    w.res(GameClock).time = 1000.0
    delays.advance_to(1000.0)
    sched.start()
    assert delays.peek_time() == 1000.0
    assert delays.tick(1000.0) == 1
    assert sched.cycles == 2 and sched.is_active()
    ok("same-time reschedule fires once per tick, then waits")


# ════════════════════════════════════════════════════════════════════════
#  2 — RecoveryScheduler state machine
# ════════════════════════════════════════════════════════════════════════

def test_recovery_scheduler_states():
    print("\n=== 2: RecoveryScheduler start/stop ===")
    w, eid, sched = _make_subject()
    delays = w.res(DelayScheduler)

    assert not sched.is_active()
    assert sched.start() is True
    assert sched.is_active() and sched.cycles == 1
    assert delays.pending_count() == 1
    ok("start() runs one cycle immediately and schedules the next")

    assert sched.start() is False
    assert delays.pending_count() == 1 and sched.cycles == 1
    ok("second start() while scheduled is refused — no leaked timer")

    w.res(GameClock).time = 10.0
    delays.tick(10.0)
    assert sched.cycles == 2 and sched.is_active()
    assert delays.pending_count() == 1
    ok("firing runs a cycle and reschedules itself")

    sched.stop()
    assert not sched.is_active() and delays.pending_count() == 0
    sched.stop()
    assert not sched.is_active()
    ok("stop() cancels; stop() again is safe")

    w.res(GameClock).time = 100.0
    delays.tick(100.0)
    assert sched.cycles == 2
    ok("no cycles while stopped")

    assert sched.start() is True
    assert sched.is_active() and sched.cycles == 3
    ok("start() after stop() resumes cycling")

    sched.dispose()
    assert not sched.is_active()
    assert not delays.has_pending(sched.token)
    ok("dispose() stops and releases the timer token")


def test_balance_point_never_writes():
    print("\n=== 2b: zero increments never touch the store ===")
    # load exactly at threshold → rate 0
    w, eid, sched = _make_subject(equipped=20.0, capacity=40.0)
    bus = w.res(EventBus)
    changes = []
    bus.subscribe("HumanityChanged", changes.append)

    clock = w.res(GameClock)
    sched.start()
    for _ in range(100):
        tick_systems(w, 10.0)
    assert sched.cycles > 50
    assert changes == []
    assert w.get(eid, Humanity).damage == 40
    assert sched.is_active()
    ok(f"{sched.cycles} cycles at the balance point: no writes, still running")

    log = w.res(DevLog)
    entries = log.for_cat("recovery", 500)
    assert entries and all(e["msg"] == "no change" for e in entries)
    assert entries[-1]["details"]["load"] == 0.5
    assert clock.time == 1000.0
    ok("each cycle is recorded in the DevLog")


# ════════════════════════════════════════════════════════════════════════
#  3 — One in-game day
# ════════════════════════════════════════════════════════════════════════

def test_one_day_of_recovery():
    print("\n=== 3: One in-game day of cycles ===")
    # load 0 → full recovery rate 2.5 HP/day
    w, eid, sched = _make_subject(damage=40, equipped=0.0)
    bus = w.res(EventBus)
    changes = []
    bus.subscribe("HumanityChanged", changes.append)

    sched.start()
    steps = int(SECONDS_PER_DAY / 10.0)
    for _ in range(steps):
        tick_systems(w, 10.0)

    hum = w.get(eid, Humanity)
    state = w.get(eid, RecoveryState)
    assert w.res(GameClock).time == SECONDS_PER_DAY
    assert hum.damage == 38, hum
    assert abs(state.remainder - 0.5) < 1e-6, state
    assert len(changes) == 2
    ok(f"after one day: damage 40 → {hum.damage}, remainder {state.remainder:.6f}")

    # Pause: clock stops, nothing fires, nothing is lost
    clock = w.res(GameClock)
    clock.paused = True
    cycles = sched.cycles
    for _ in range(100):
        tick_systems(w, 10.0)
    assert sched.cycles == cycles and clock.time == SECONDS_PER_DAY
    clock.paused = False
    for _ in range(steps // 2):
        tick_systems(w, 10.0)
    assert hum.damage == 37, hum
    assert abs(state.remainder - 0.75) < 1e-6, state
    ok("pausing the clock halts cycles; resuming continues losslessly")

    # Raising the load above the threshold halts recovery, never adds damage
    w.get(eid, CyberwareLoad).equipped = 40.0
    for _ in range(steps):
        tick_systems(w, 10.0)
    assert hum.damage == 37
    ok("load above threshold: no recovery, no extra damage")


# ═══════════════════════════════════════════════════════════════════════
#  MAIN
# ═══════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    sections = [
        ("Delay Scheduler", test_delay_scheduler),
        ("Tiny Interval", test_tiny_interval_does_not_spin),
        ("Recovery Scheduler States", test_recovery_scheduler_states),
        ("Balance Point", test_balance_point_never_writes),
        ("One Day", test_one_day_of_recovery),
    ]

    for name, fn in sections:
        try:
            fn()
        except Exception:
            fail(f"{name} — unhandled exception", traceback.format_exc())

    total = _passed + _failed
    print(f"\n{'=' * 60}")
    print(f"  Scheduler Tests: {_passed} passed, {_failed} failed  (total {total})")
    print(f"{'=' * 60}")
    sys.exit(1 if _failed else 0)
