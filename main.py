"""
main.py — Bootstrap

1. Load tuning
2. Create the app and its world resources
3. Restore the save (or spawn the default subject) and attach it
4. Push the preview scene
5. Run — closing the window saves and detaches
"""

from core import tuning
from core.app import App
from core.bootstrap import init_world, spawn_player
from scenes.recovery_scene import RecoveryScene


def main(slot: int = 0):
    tuning.load()

    app = App()
    system = init_world(app.world)

    eids = spawn_player(app.world, slot=slot)
    app.push_scene(RecoveryScene(eids[0], slot=slot))
    try:
        app.run()
    finally:
        system.shutdown()


if __name__ == "__main__":
    main()
