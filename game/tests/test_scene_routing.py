import unittest

from engine.input_connections import MenuConnection, MovementConnection
from engine.input_router import ACTION, InputRouter, InputSource
from engine.scene import SceneManager


class _Scene:
    def __init__(self, connection=None):
        self.connection = connection
        self.log = []

    def on_enter(self, prev): self.log.append("enter")
    def on_exit(self, nxt): self.log.append("exit")
    def on_pause(self): self.log.append("pause")
    def on_resume(self): self.log.append("resume")
    def update(self, dt): self.log.append("update")
    def draw(self, surface): self.log.append("draw")


class _App:
    def __init__(self):
        self.log = []

    def enable_pc_control(self): self.log.append("enable")
    def disable_pc_control(self): self.log.append("disable")
    def pc_action(self): self.log.append("pc")
    def menu_action(self): self.log.append("menu")


class TestSceneRouting(unittest.TestCase):
    def setUp(self):
        self.source = InputSource()
        self.router = InputRouter(self.source)
        self.scenes = SceneManager(screen=None, router=self.router)
        self.app = _App()

    def test_top_scene_owns_input(self):
        town = _Scene(MovementConnection(self.source, self.app))
        menu = _Scene(MenuConnection(self.source, self.app))
        self.scenes.push(town)
        self.scenes.push(menu)
        self.source.emit(ACTION)
        self.scenes.pop()
        self.source.emit(ACTION)
        self.assertEqual(self.app.log, ["enable", "disable", "menu", "enable", "pc"])
        self.assertEqual(town.log, ["enter", "pause", "resume"])
        self.assertEqual(menu.log, ["enter", "exit"])

    def test_scene_without_connection_mutes_input(self):
        self.scenes.push(_Scene(MovementConnection(self.source, self.app)))
        self.scenes.push(_Scene())
        self.assertIsNone(self.router.active)
        self.source.emit(ACTION)
        self.assertEqual(self.app.log, ["enable", "disable"])

    def test_clear_unroutes(self):
        self.scenes.push(_Scene(MovementConnection(self.source, self.app)))
        self.scenes.clear()
        self.assertEqual(len(self.scenes), 0)
        self.assertIsNone(self.router.active)
        self.assertIsNone(self.scenes.pop())

    def test_update_top_draw_all(self):
        a, b = _Scene(), _Scene()
        self.scenes.push(a)
        self.scenes.push(b)
        self.scenes.update(0.1)
        self.scenes.draw()
        self.assertEqual(a.log, ["enter", "pause", "draw"])
        self.assertEqual(b.log, ["enter", "update", "draw"])


if __name__ == "__main__":
    unittest.main()
