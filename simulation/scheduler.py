"""simulation/scheduler.py — Single-shot delayed callbacks on game time.

Each caller posts a timer ``delay`` game-seconds into the future under a
*token* and gets back an integer handle.  When ``tick()`` reaches the
timer's due time the handler registered for that token is called once
with the timer's payload.  Timers are cancelable by handle; cancelling
an unknown or already-fired handle is a no-op.

    delays = DelayScheduler()
    delays.register_handler("HUMANITY_RECOVERY:1", on_fire)
    handle = delays.schedule("HUMANITY_RECOVERY:1", {"eid": 1}, 10.0)
    ...
    delays.tick(current_time=355.0)
"""

from __future__ import annotations
import heapq
from dataclasses import dataclass, field
from typing import Any, Callable


@dataclass(order=True)
class ScheduledTimer:
    """A single pending timer in the priority queue.

    Ordered by ``time`` so the heap gives us earliest-first.
    """
    time: float
    # heapq tiebreaker (insertion order), doubles as the handle
    handle: int = field(compare=True)
    token: str = field(compare=False, default="")
    payload: dict[str, Any] = field(compare=False, default_factory=dict)
    cancelled: bool = field(compare=False, default=False)


class DelayScheduler:
    """Priority-queue timer service stored as a world resource.

    Handler signature: ``handler(payload, scheduler, game_time)``.
    """

    def __init__(self) -> None:
        self._queue: list[ScheduledTimer] = []
        # Handles start at 1; 0 is reserved for NO_TIMER
        self._seq: int = 0
        self._handlers: dict[str, Callable] = {}
        # handle → timer, for O(1) cancellation and queries
        self._pending: dict[int, ScheduledTimer] = {}
        # Time of the last tick; new timers are due relative to this
        self.now: float = 0.0

    # ── Handler registration ─────────────────────────────────────────

    def register_handler(self, token: str, handler: Callable) -> None:
        self._handlers[token] = handler

    def unregister_handler(self, token: str) -> None:
        self._handlers.pop(token, None)

    # ── Scheduling ───────────────────────────────────────────────────

    def schedule(self, token: str, payload: dict[str, Any] | None,
                 delay: float) -> int:
        """Fire *token*'s handler ``delay`` game-seconds from now.

        Returns a handle that is never equal to ``NO_TIMER``.
        """
        self._seq += 1
        timer = ScheduledTimer(
            time=self.now + max(0.0, delay),
            handle=self._seq,
            token=token,
            payload=payload or {},
        )
        heapq.heappush(self._queue, timer)
        self._pending[timer.handle] = timer
        return timer.handle

    def cancel(self, handle: int) -> bool:
        """Cancel a pending timer.  Returns False if nothing was pending."""
        timer = self._pending.pop(handle, None)
        if timer is None:
            return False
        timer.cancelled = True
        return True

    # ── Tick ─────────────────────────────────────────────────────────

    def advance_to(self, current_time: float) -> None:
        """Move ``now`` forward without firing anything.  Never goes back."""
        if current_time > self.now:
            self.now = current_time

    def peek_time(self) -> float:
        """Return the time of the next timer, or inf if empty."""
        while self._queue and self._queue[0].cancelled:
            heapq.heappop(self._queue)
        if self._queue:
            return self._queue[0].time
        return float("inf")

    def tick(self, current_time: float) -> int:
        """Fire every timer due at or before ``current_time``.

        ``now`` is moved to ``current_time`` first, so a handler that
        reschedules itself lands no earlier than this tick.  Timers
        created while this tick runs wait for the next one, even when
        their delay is too small to move the clock, so a handler can't
        fire twice in one tick.  Returns the number of timers fired.
        """
        self.advance_to(current_time)
        last_handle = self._seq
        count = 0

        while self._queue:
            if self._queue[0].cancelled:
                heapq.heappop(self._queue)
                continue
            if self._queue[0].time > current_time:
                break
            # New timers are never earlier than this tick, so they sort
            # after every older due timer
            if self._queue[0].handle > last_handle:
                break

            timer = heapq.heappop(self._queue)
            self._pending.pop(timer.handle, None)

            handler = self._handlers.get(timer.token)
            if handler is None:
                print(f"[TIMER] no handler for {timer.token} — dropped #{timer.handle}")
                continue
            handler(timer.payload, self, current_time)
            count += 1

        return count

    # ── Queries ──────────────────────────────────────────────────────

    def pending_count(self) -> int:
        return len(self._pending)

    def has_pending(self, token: str) -> bool:
        return any(t.token == token for t in self._pending.values())
