"""
core/app.py — Pygame window for the recovery preview

Opens the window, pumps events into the active scene and keeps frame
timing.  Frame ``dt`` is real seconds; ``tick_systems`` turns it into
game time with the clock's ``time_scale``.

    app = App()
    init_world(app.world)
    app.push_scene(RecoveryScene(eid))
    app.run()
"""

from __future__ import annotations
import pygame

from core import tuning
from core.constants import SCREEN_W, SCREEN_H, COLOR_TEXT
from core.ecs import World
from core.scene import Scene

_FONT_SIZES = {"sm": 11, "md": 14, "lg": 18}


class App:
    def __init__(self, title: str | None = None):
        pygame.init()
        self.size = (int(tuning.get("display", "width", SCREEN_W)),
                     int(tuning.get("display", "height", SCREEN_H)))
        self.fps = int(tuning.get("display", "fps", 60))
        self.screen = pygame.display.set_mode(self.size)
        pygame.display.set_caption(
            title or tuning.get("display", "title", "Humanity Recovery"))
        self.clock = pygame.time.Clock()
        self.running = True

        self.world = World()
        self._scenes: list[Scene] = []
        self.fonts = {k: pygame.font.SysFont("monospace", px)
                      for k, px in _FONT_SIZES.items()}

    # -- Scenes --

    @property
    def scene(self) -> Scene | None:
        return self._scenes[-1] if self._scenes else None

    def push_scene(self, scene: Scene):
        self._scenes.append(scene)
        scene.on_enter(self)

    def pop_scene(self):
        if self._scenes:
            self._scenes.pop().on_exit(self)

    def quit(self):
        self.running = False

    # -- Loop --

    def run(self):
        while self.running and self.scene is not None:
            dt = self.clock.tick(self.fps) / 1000.0
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.quit()
                else:
                    self.scene.handle_event(event, self)
            self.scene.update(dt, self)
            self.scene.draw(self.screen, self)
            pygame.display.flip()

        # Scenes save on exit, so unwind before the window goes
        while self._scenes:
            self.pop_scene()
        pygame.quit()

    def draw_text(self, surface: pygame.Surface, text: str, pos: tuple[int, int],
                  color=COLOR_TEXT, size: str = "md") -> pygame.Rect:
        img = self.fonts[size].render(text, True, color)
        return surface.blit(img, pos)
