"""logic — Recovery systems package.

Top-level modules
-----------------
tick             — per-frame orchestrator (clock, timers, event bus)
entity_factory   — subject creation from descriptors / TOML data
humanity         — damage store + cyberware load adapters
recovery         — rate curve, accumulator, per-subject scheduler
recovery_system  — attach / detach / settings-change glue
"""
