"""core/events.py — Lightweight event bus.

Decouples systems that need to *signal* something from systems that
*react* to it.  The bus lives as an ECS resource::

    from core.events import EventBus
    bus = world.res(EventBus)
    bus.emit(SubjectAttached(eid=1))

Consumers subscribe with a callable::

    bus.subscribe("SubjectAttached", my_handler)

And the orchestrator drains once per frame::

    bus.drain()          # calls all handlers for pending events

Design rules:
  - Events are plain dataclasses — no behaviour.
  - ``emit()`` is O(1) (just appends).
  - ``drain()`` processes all queued events in FIFO order.
  - Handlers may emit new events; those are processed in the same drain.
"""

from __future__ import annotations
import traceback
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable


# ═══════════════════════════════════════════════════════════════════
#  Event definitions
# ═══════════════════════════════════════════════════════════════════

@dataclass
class SubjectAttached:
    """A controlled subject entered the session (spawn / load / takeover)."""
    eid: int


@dataclass
class SubjectDetached:
    """A controlled subject is leaving the session and must stop ticking."""
    eid: int


@dataclass
class SettingsChanged:
    """The tuning table was reloaded or replaced."""
    version: int = 0


@dataclass
class HumanityChanged:
    """A subject's humanity damage value changed — dependents recompute."""
    eid: int
    damage: int = 0


# ═══════════════════════════════════════════════════════════════════
#  Event Bus
# ═══════════════════════════════════════════════════════════════════

class EventBus:
    """Fire-and-forget event bus stored as an ECS resource."""

    def __init__(self):
        self._queue: list[Any] = []
        self._subs: dict[str, list[Callable]] = defaultdict(list)

    # ── Public API ───────────────────────────────────────────────────

    def emit(self, event) -> None:
        """Queue an event for processing on next ``drain()``."""
        self._queue.append(event)

    def subscribe(self, event_type: str, handler: Callable) -> None:
        """Register *handler* to receive events of *event_type*.

        *event_type* is the class name, e.g. ``"SubjectAttached"``.
        """
        self._subs[event_type].append(handler)

    def unsubscribe(self, event_type: str, handler: Callable) -> None:
        handlers = self._subs.get(event_type)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def drain(self) -> int:
        """Process all queued events.  Returns number processed.

        Handlers may emit new events — those are processed in the
        same drain pass (breadth-first).
        """
        processed = 0
        safety = 1000  # emit-from-handler cycles
        while self._queue and safety > 0:
            batch = self._queue[:]
            self._queue.clear()
            for event in batch:
                name = type(event).__name__
                for handler in list(self._subs.get(name, ())):
                    try:
                        handler(event)
                    except Exception as exc:
                        print(f"[EVENT] handler error for {name}: {exc}")
                        traceback.print_exc()
            processed += len(batch)
            safety -= 1
        return processed
