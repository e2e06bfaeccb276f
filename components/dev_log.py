"""components.dev_log — Recovery cycle log.

Bounded history of what the recovery system did: one entry per cycle
plus skipped attaches.  The preview scene prints the tail of it.

    log = world.res(DevLog)
    log.record(eid, "recovery", "-1 HP", t=now, details={"load": 0.3})

Entries are plain dicts so they can be dumped straight to JSON:
    {"t", "eid", "name", "cat", "msg", "details"}
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass, field


@dataclass
class DevLog:
    max_entries: int = 500
    entries: deque = field(init=False)

    def __post_init__(self):
        self.entries = deque(maxlen=self.max_entries)

    def record(self, eid: int, cat: str, msg: str, *,
               name: str = "", t: float = 0.0,
               details: dict | None = None) -> None:
        self.entries.append({
            "t": t, "eid": eid, "name": name,
            "cat": cat, "msg": msg, "details": details,
        })

    def for_eid(self, eid: int, n: int = 30) -> list[dict]:
        """Newest *n* entries about *eid*, oldest first."""
        return [e for e in self.entries if e["eid"] == eid][-n:]

    def for_cat(self, cat: str, n: int = 50) -> list[dict]:
        return [e for e in self.entries if e["cat"] == cat][-n:]
