import unittest
from types import SimpleNamespace

from engine.input_router import ACTION, InputRouter, InputSource
from engine.narrative.core import NarrativeCore
from engine.narrative.loader import parse_dialogue, parse_town_content
from engine.scene import SceneManager
from game.scenes.dialogue import DialogueScene
from game.scenes.town import TownScene

CONTENT = {
    "flags": {"met_guide": False},
    "players": {
        "1": {"name": "Ana", "position": [100, 100]},
        "2": {"name": "Ben", "position": [400, 400]},
    },
    "storylines": {
        "touristen": {"npcs": {"guide": {"name": "Greta", "position": [120, 100],
                                         "dialogue": "guide.start"}}},
    },
    "quests": {"q1": {"npc": "guide", "icon": "talk", "condition": {"not": "met_guide"},
                      "done_when": "met_guide"}},
}

DIALOGUE = {
    "namespace": "guide",
    "nodes": {"start": {"speaker": "guide", "say": "Hi!",
                        "choices": [{"text": "Hello", "set": {"met_guide": True}}]}},
}


def make_app(content=CONTENT):
    core = NarrativeCore(parse_town_content(content))
    keyboard = InputSource()
    app = SimpleNamespace(
        core=core,
        keyboard=keyboard,
        dialogues=parse_dialogue(DIALOGUE),
        cfg=SimpleNamespace(input=SimpleNamespace(interact_radius=90.0)),
    )
    app.scenes = SceneManager(screen=None, router=InputRouter(keyboard))
    return app


class TestTownScene(unittest.TestCase):
    def setUp(self):
        self.app = make_app()
        self.town = TownScene(self.app)
        self.app.scenes.push(self.town)
        self.app.core.start()

    def test_every_player_gets_a_player_marker(self):
        self.assertEqual(list(self.town.pcs), ["1", "2"])
        self.assertEqual(self.town.pc_id, "1")
        self.assertEqual(self.town.pcs["1"]["marker"], "player-1")
        self.assertEqual(self.town.pcs["2"]["marker"], "player-2")
        self.assertEqual(self.town.pc_pos, (100.0, 100.0))

    def test_remove_pc_keeps_the_local_character(self):
        self.town.remove_pc("2")
        self.town.remove_pc("1")
        self.assertEqual(list(self.town.pcs), ["1"])

    def test_no_players_configured_gives_a_local_character(self):
        content = dict(CONTENT, players={})
        town = TownScene(make_app(content))
        self.assertEqual(list(town.pcs), ["local"])
        self.assertIsNone(town.pcs["local"]["marker"])

    def test_markers_follow_quests(self):
        self.assertEqual(self.town.markers.shown, {"guide": "talk"})
        self.app.core.set_flag("met_guide", True)
        self.assertEqual(self.town.markers.shown, {})

    def test_action_near_npc_opens_dialogue_and_closes_it(self):
        self.assertTrue(self.town.pc_control)
        self.app.keyboard.emit(ACTION)
        scene = self.app.scenes.active()
        self.assertIsInstance(scene, DialogueScene)
        self.assertFalse(self.town.pc_control)

        self.app.keyboard.emit(ACTION)      # "Hello" ends the conversation
        self.assertIs(self.app.scenes.active(), self.town)
        self.assertTrue(self.town.pc_control)
        self.assertIs(self.app.core.flag("met_guide"), True)

    def test_action_far_from_npcs_does_nothing(self):
        self.town.pc_pos = (900.0, 900.0)
        self.assertIsNone(self.town.nearest_npc())
        self.app.keyboard.emit(ACTION)
        self.assertIs(self.app.scenes.active(), self.town)


class TestDialogueScene(unittest.TestCase):
    def test_speaker_names_are_read_once(self):
        app = make_app()
        app.core.start()
        calls = []
        npcs = app.core.npcs

        def counting_npcs():
            calls.append(1)
            return npcs()

        app.core.npcs = counting_npcs
        scene = DialogueScene(app, "guide", "guide.start")
        app.scenes.push(scene)
        for _ in range(5):
            self.assertEqual(scene.speaker_name(), "Greta")
        self.assertEqual(len(calls), 1)

    def test_no_speaker_when_idle(self):
        app = make_app()
        scene = DialogueScene(app, "guide", "guide.start")
        self.assertIsNone(scene.speaker_name())


if __name__ == "__main__":
    unittest.main()
