"""logic/recovery_system.py — Lifecycle glue for humanity recovery.

Wires one ``RecoveryScheduler`` per attached subject and keeps it in
step with the session:

    SubjectAttached   → restore/create RecoveryState, build scheduler, start
    SubjectDetached   → stop + dispose scheduler (state is kept)
    SettingsChanged   → new RecoveryConfig pushed to every scheduler,
                        start/stop according to ``[recovery] enabled``

The system is a world resource.  It needs ``GameClock``,
``DelayScheduler`` and ``EventBus`` resources to exist first::

    world.set_res(GameClock())
    world.set_res(DelayScheduler())
    world.set_res(EventBus())
    RecoverySystem(world)
"""

from __future__ import annotations
from typing import TYPE_CHECKING

from components import (
    GameClock, DevLog, Identity, Humanity, CyberwareLoad, RecoveryState,
)
from core import tuning
from core.events import EventBus, SubjectAttached, SubjectDetached, SettingsChanged
from logic.humanity import HumanityStore, CyberwareLoadSource
from logic.recovery import RecoveryAccumulator, RecoveryConfig, RecoveryScheduler
from simulation.scheduler import DelayScheduler

if TYPE_CHECKING:
    from core.ecs import World


class RecoverySystem:
    """Owns the per-subject recovery schedulers."""

    def __init__(self, world: "World") -> None:
        self.world = world
        self.config = RecoveryConfig.from_tuning()
        self.schedulers: dict[int, RecoveryScheduler] = {}

        bus = world.res(EventBus)
        bus.subscribe("SubjectAttached", self._on_attached)
        bus.subscribe("SubjectDetached", self._on_detached)
        bus.subscribe("SettingsChanged", self._on_settings_changed)
        tuning.subscribe(self._on_tuning_reloaded)

        world.set_res(self)

    # ── Event handlers ───────────────────────────────────────────────

    def _on_attached(self, event: SubjectAttached) -> None:
        self.attach(event.eid)

    def _on_detached(self, event: SubjectDetached) -> None:
        self.detach(event.eid)

    def _on_settings_changed(self, event: SettingsChanged) -> None:
        self.apply_config(RecoveryConfig.from_tuning())

    def _on_tuning_reloaded(self) -> None:
        bus = self.world.res(EventBus)
        bus.emit(SettingsChanged(version=tuning.version()))

    # ── Lifecycle ────────────────────────────────────────────────────

    def attach(self, eid: int) -> RecoveryScheduler | None:
        """Start recovery for *eid*.  Returns its scheduler, or None if skipped."""
        w = self.world
        name = _name(w, eid)

        if eid in self.schedulers:
            return self.schedulers[eid]
        if not w.alive(eid) or not w.has(eid, Humanity) or not w.has(eid, CyberwareLoad):
            print(f"[RECOVERY] {name} has no Humanity/CyberwareLoad — not attached")
            log = w.res(DevLog)
            if log is not None:
                log.record(eid, "recovery", "attach skipped", name=name)
            return None

        clock = w.res(GameClock)
        state = w.get(eid, RecoveryState)
        if state is None:
            state = RecoveryState()
            w.add(eid, state)
        elif self.config.skip_detached_time and state.last_sample_time > 0.0:
            # Re-base so the detached gap isn't counted as recovery time
            state.last_sample_time = clock.now_seconds()

        sched = RecoveryScheduler(
            eid,
            clock,
            w.res(DelayScheduler),
            CyberwareLoadSource(w, eid),
            HumanityStore(w, eid),
            RecoveryAccumulator(state),
            self.config,
            log=w.res(DevLog),
            name=name,
        )
        self.schedulers[eid] = sched
        if self.config.enabled:
            sched.start()
        print(f"[RECOVERY] {name} attached (active={sched.is_active()}, "
              f"last_sample={state.last_sample_time:.1f}, remainder={state.remainder:.4f})")
        return sched

    def detach(self, eid: int) -> None:
        """Stop recovery for *eid*.  Must run before the subject goes away."""
        sched = self.schedulers.pop(eid, None)
        if sched is None:
            return
        sched.dispose()
        print(f"[RECOVERY] {sched.name} detached after {sched.cycles} cycles")

    def toggle(self, eid: int) -> bool:
        """Stop a running scheduler or restart an idle one.

        Restarting is refused while ``[recovery] enabled`` is false.
        Returns whether the subject is active afterwards.
        """
        sched = self.schedulers.get(eid)
        if sched is None:
            return False
        if sched.is_active():
            sched.stop()
        elif self.config.enabled:
            sched.start()
        else:
            print(f"[RECOVERY] {sched.name}: recovery is disabled in settings — not started")
        return sched.is_active()

    def apply_config(self, config: RecoveryConfig) -> None:
        """Replace the settings snapshot everywhere."""
        self.config = config
        for sched in self.schedulers.values():
            sched.set_config(config)
            if config.enabled and not sched.is_active():
                sched.start()
            elif not config.enabled and sched.is_active():
                sched.stop()
        print(f"[RECOVERY] settings: rate={config.rate} threshold={config.threshold} "
              f"enabled={config.enabled} interval={config.interval}")

    def shutdown(self) -> None:
        """Detach every subject and drop all subscriptions."""
        for eid in list(self.schedulers):
            self.detach(eid)
        tuning.unsubscribe(self._on_tuning_reloaded)
        bus = self.world.res(EventBus)
        bus.unsubscribe("SubjectAttached", self._on_attached)
        bus.unsubscribe("SubjectDetached", self._on_detached)
        bus.unsubscribe("SettingsChanged", self._on_settings_changed)

    # ── Queries ──────────────────────────────────────────────────────

    def scheduler_for(self, eid: int) -> RecoveryScheduler | None:
        return self.schedulers.get(eid)

    def is_active(self, eid: int) -> bool:
        sched = self.schedulers.get(eid)
        return sched is not None and sched.is_active()


def _name(world: "World", eid: int) -> str:
    ident = world.get(eid, Identity)
    return ident.name if ident else f"eid={eid}"
