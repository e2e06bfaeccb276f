"""core/constants.py — Shared constants used across the codebase.

Centralises magic numbers so there's exactly one place to change them.

Unit System
-----------
    Time (game)             s       (simulated seconds, see GameClock)
    Time (real)             s       (frame dt from the app loop)
    Humanity damage         HP      (integer points)
    Cyberware load          —       (capacity units, unitless)
    Degeneration rate       HP/day  (per in-game day)

Game Time Scale
~~~~~~~~~~~~~~~
The simulation runs on a game clock measured in simulated seconds.
``DEFAULT_TIME_SCALE`` simulated seconds pass per real second unless
``[clock] time_scale`` overrides it in ``data/tuning.toml``.
"""

# ── Time ─────────────────────────────────────────────────────────────
SECONDS_PER_DAY: float = 86400.0
DEFAULT_TIME_SCALE: float = 8.0          # game seconds per real second

# ── Recovery ─────────────────────────────────────────────────────────
RECOVERY_INTERVAL: float = 10.0          # game seconds between cycles
MIN_RECOVERY_INTERVAL: float = 1.0       # shorter intervals are raised to this
RECOVERY_TOKEN: str = "HUMANITY_RECOVERY"

# |load - threshold| at or below this counts as "at the balance point"
RATE_EPSILON: float = 1e-6

# Threshold is clamped to [eps, 1 - eps] when the config is loaded
THRESHOLD_EPSILON: float = 0.01

DEFAULT_RATE: float = 2.5                # HP/day at full deviation
DEFAULT_THRESHOLD: float = 0.5           # load fraction

# ── Timers ───────────────────────────────────────────────────────────
NO_TIMER: int = 0                        # never a real timer handle

# ── Preview window ───────────────────────────────────────────────────
SCREEN_W: int = 960
SCREEN_H: int = 640

COLOR_BG = (18, 18, 24)
COLOR_AXIS = (90, 90, 110)
COLOR_CURVE = (80, 200, 220)
COLOR_THRESHOLD = (220, 180, 50)
COLOR_LOAD = (220, 80, 120)
COLOR_TEXT = (220, 220, 220)
COLOR_DIM = (140, 140, 150)
