"""simulation — Game-time services.

Submodules
----------
scheduler       DelayScheduler — single-shot, cancelable timers on game time
"""
