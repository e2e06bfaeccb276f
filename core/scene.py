"""
core/scene.py — Scene interface

A scene owns one screen of the preview.  ``App`` forwards frames and
events to the scene on top of its stack.  Key presses are looked up in
``bindings()`` so subclasses list their controls in one table instead
of an if/elif chain.

``on_exit`` also runs for every scene still stacked when the window
closes; that is where a scene saves and detaches its subjects.
"""

from __future__ import annotations
from typing import Callable, TYPE_CHECKING

import pygame

if TYPE_CHECKING:
    from core.app import App


KeyAction = Callable[["App"], None]


class Scene:
    def on_enter(self, app: App):
        pass

    def on_exit(self, app: App):
        pass

    def bindings(self) -> dict[int, KeyAction]:
        """pygame key code → action."""
        return {}

    def handle_event(self, event: pygame.event.Event, app: App):
        if event.type == pygame.KEYDOWN:
            action = self.bindings().get(event.key)
            if action is not None:
                action(app)

    def update(self, dt: float, app: App):
        """Advance one frame. dt is real seconds."""
        pass

    def draw(self, surface: pygame.Surface, app: App):
        pass
