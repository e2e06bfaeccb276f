"""scenes/recovery_scene.py — Live preview of humanity recovery.

Plots the degeneration curve for the current settings, marks the
threshold and the subject's current cyberware load, and runs the real
recovery system on the game clock so the humanity bar moves.

Keys:
    Up / Down   equip / unequip one unit of cyberware
    + / -       double / halve the clock's time scale
    P           pause / resume the game clock
    Space       stop / start the recovery scheduler
    F4          hot-reload data/tuning.toml
    F5          save now
    Esc         quit (saves first)
"""

from __future__ import annotations
import pygame
from components import GameClock, DevLog, Identity, Humanity, CyberwareLoad, RecoveryState
from core import tuning
from core.app import App
from core.constants import (
    SECONDS_PER_DAY, COLOR_BG, COLOR_AXIS, COLOR_CURVE, COLOR_THRESHOLD,
    COLOR_LOAD, COLOR_TEXT, COLOR_DIM,
)
from core.events import SubjectDetached, EventBus
from core.save import save_game_state
from core.scene import Scene, KeyAction
from logic.humanity import CyberwareLoadSource
from logic.recovery import RecoveryConfig, degen_rate, rate_curve, recovery_rate
from logic.recovery_system import RecoverySystem
from logic.tick import tick_systems

_GRAPH = pygame.Rect(40, 40, 560, 300)
_MAX_TIME_SCALE = SECONDS_PER_DAY


class RecoveryScene(Scene):
    """Single-subject preview: curve, load marker, humanity bar, dev log."""

    def __init__(self, eid: int, slot: int = 0):
        self.eid = eid
        self.slot = slot
        self._closed = False

    # ── Lifecycle ────────────────────────────────────────────────────

    def on_exit(self, app: App):
        if self._closed:
            return
        self._closed = True
        save_game_state(app.world, self.slot)
        bus = app.world.res(EventBus)
        bus.emit(SubjectDetached(eid=self.eid))
        bus.drain()

    # ── Input ────────────────────────────────────────────────────────

    def bindings(self) -> dict[int, KeyAction]:
        return {
            pygame.K_UP: lambda app: self._equip(app, 1.0),
            pygame.K_DOWN: lambda app: self._equip(app, -1.0),
            pygame.K_EQUALS: lambda app: self._scale_time(app, 2.0),
            pygame.K_PLUS: lambda app: self._scale_time(app, 2.0),
            pygame.K_KP_PLUS: lambda app: self._scale_time(app, 2.0),
            pygame.K_MINUS: lambda app: self._scale_time(app, 0.5),
            pygame.K_KP_MINUS: lambda app: self._scale_time(app, 0.5),
            pygame.K_p: self._toggle_pause,
            pygame.K_SPACE: self._toggle_scheduler,
            pygame.K_F4: lambda app: tuning.reload(),
            pygame.K_F5: lambda app: save_game_state(app.world, self.slot),
            pygame.K_ESCAPE: lambda app: app.quit(),
        }

    def _equip(self, app: App, units: float):
        cw = app.world.get(self.eid, CyberwareLoad)
        if cw:
            cw.equipped = min(cw.capacity, max(0.0, cw.equipped + units))

    def _scale_time(self, app: App, factor: float):
        clock = app.world.res(GameClock)
        clock.time_scale = min(_MAX_TIME_SCALE, max(1.0, clock.time_scale * factor))

    def _toggle_pause(self, app: App):
        clock = app.world.res(GameClock)
        clock.paused = not clock.paused

    def _toggle_scheduler(self, app: App):
        app.world.res(RecoverySystem).toggle(self.eid)

    # ── Per-frame ────────────────────────────────────────────────────

    def update(self, dt: float, app: App):
        tick_systems(app.world, dt)

    def draw(self, surface: pygame.Surface, app: App):
        surface.fill(COLOR_BG)
        config = app.world.res(RecoverySystem).config
        load = CyberwareLoadSource(app.world, self.eid).load_fraction()

        self._draw_curve(surface, app, config, load)
        self._draw_status(surface, app, config, load)
        self._draw_log(surface, app)

    # ── Drawing helpers ──────────────────────────────────────────────

    def _to_screen(self, load: float, rate: float, peak: float) -> tuple[int, int]:
        x = _GRAPH.x + int(load * _GRAPH.w)
        mid = _GRAPH.y + _GRAPH.h // 2
        y = mid - int(rate / peak * (_GRAPH.h // 2 - 8))
        return x, y

    def _draw_curve(self, surface, app: App, config: RecoveryConfig, load: float):
        peak = max(config.rate, 1e-6)
        pygame.draw.rect(surface, COLOR_AXIS, _GRAPH, 1)
        mid = _GRAPH.y + _GRAPH.h // 2
        pygame.draw.line(surface, COLOR_AXIS, (_GRAPH.x, mid), (_GRAPH.right, mid))

        points = [self._to_screen(ld, r, peak) for ld, r in rate_curve(config, 81)]
        pygame.draw.lines(surface, COLOR_CURVE, False, points, 2)

        tx = _GRAPH.x + int(config.threshold * _GRAPH.w)
        pygame.draw.line(surface, COLOR_THRESHOLD, (tx, _GRAPH.y), (tx, _GRAPH.bottom))

        lx, ly = self._to_screen(load, degen_rate(config.rate, config.threshold, load), peak)
        pygame.draw.circle(surface, COLOR_LOAD, (lx, ly), 5)

        labels = [
            (f"+{config.rate:g}/day", (_GRAPH.x + 4, _GRAPH.y + 4), COLOR_DIM),
            (f"-{config.rate:g}/day", (_GRAPH.x + 4, _GRAPH.bottom - 16), COLOR_DIM),
            ("load 0", (_GRAPH.x, _GRAPH.bottom + 4), COLOR_DIM),
            ("load 1", (_GRAPH.right - 40, _GRAPH.bottom + 4), COLOR_DIM),
            (f"threshold {config.threshold:.2f}", (tx + 4, _GRAPH.y + 4), COLOR_THRESHOLD),
        ]
        for text, pos, color in labels:
            app.draw_text(surface, text, pos, color=color, size="sm")

    def _draw_status(self, surface, app: App, config: RecoveryConfig, load: float):
        w = app.world
        clock = w.res(GameClock)
        hum = w.get(self.eid, Humanity)
        state = w.get(self.eid, RecoveryState)
        ident = w.get(self.eid, Identity)
        cw = w.get(self.eid, CyberwareLoad)
        sched = w.res(RecoverySystem).scheduler_for(self.eid)

        x, y = 630, 40
        days, rem = divmod(clock.time, SECONDS_PER_DAY)
        hours, rem = divmod(rem, 3600.0)
        lines = [
            (f"{ident.name if ident else self.eid}", COLOR_TEXT),
            (f"day {int(days)}  {int(hours):02d}:{int(rem // 60):02d}"
             f"  x{clock.time_scale:g}{'  PAUSED' if clock.paused else ''}", COLOR_DIM),
            (f"cyberware {cw.equipped:g}/{cw.capacity:g}  load {load:.2f}"
             if cw else "cyberware -", COLOR_LOAD),
            (f"recovery {recovery_rate(config, load):+.3f}/day", COLOR_CURVE),
            (f"remainder {state.remainder:.4f}" if state else "remainder -", COLOR_DIM),
            (f"scheduler {'ACTIVE' if sched and sched.is_active() else 'IDLE'}"
             f"  cycles {sched.cycles if sched else 0}", COLOR_TEXT),
            (f"enabled {config.enabled}  every {config.interval:g}s", COLOR_DIM),
        ]
        for text, color in lines:
            app.draw_text(surface, text, (x, y), color=color)
            y += 20

        if hum:
            y += 10
            bar_w = 280
            ratio = hum.damage / max(hum.maximum, 1)
            pygame.draw.rect(surface, (40, 40, 40), (x, y, bar_w, 12))
            pygame.draw.rect(surface, (200, 80, 60), (x, y, max(1, int(bar_w * ratio)), 12))
            app.draw_text(surface, f"humanity damage {hum.damage}/{hum.maximum}",
                          (x, y + 16))

        app.draw_text(surface, "Up/Down cyberware  +/- speed  P pause  Space sched  "
                      "F4 reload  F5 save  Esc quit",
                      (40, app.size[1] - 30), color=COLOR_DIM, size="sm")

    def _draw_log(self, surface, app: App):
        log = app.world.res(DevLog)
        if log is None:
            return
        y = 380
        for entry in log.for_eid(self.eid, 10):
            details = entry.get("details") or {}
            text = (f"{entry['t']:10.1f}  {entry['msg']:<10}"
                    f"  load={details.get('load', '-')}"
                    f"  dmg={details.get('damage', '-')}")
            app.draw_text(surface, text, (40, y), color=COLOR_DIM, size="sm")
            y += 14
