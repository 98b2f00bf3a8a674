import os
import tempfile
import unittest

from engine.errors import ConfigError
from engine.narrative.core import NarrativeCore
from engine.narrative.loader import (
    load_dialogue_dir, load_dialogue_file, load_town_content, parse_dialogue, parse_town_content,
)
from engine.settings import load_settings

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
TOWN = os.path.join(ROOT, "game", "content", "town.yaml")
DIALOGUES = os.path.join(ROOT, "game", "content", "dialogues")


class TestShippedContent(unittest.TestCase):
    def test_town_loads_and_validates(self):
        core = NarrativeCore.from_file(TOWN)
        core.start()
        self.assertEqual(core.storylines.current, "touristen")
        self.assertEqual(core.markers(), {"guide": "talk"})

    def test_full_tour(self):
        core = NarrativeCore(load_town_content(TOWN))
        core.start()
        core.set_flag("met_guide", True)
        self.assertEqual(core.markers(), {"curator": "museum", "kiosk": "postcard"})
        core.set_flags({"museum_visited": True, "postcards": 3})
        self.assertEqual(core.markers(), {"guide": "star"})
        core.set_flag("tour_finished", True)
        self.assertEqual(core.markers(), {})

    def test_npc_dialogues_exist(self):
        story = load_dialogue_dir(DIALOGUES)
        content = load_town_content(TOWN)
        for sl in content.storylines.values():
            for npc in sl.npcs:
                ref = npc.props.get("dialogue")
                if ref:
                    self.assertIn(ref, story.nodes, f"{sl.id}.{npc.id}")

    def test_single_dialogue_file(self):
        story = load_dialogue_file(os.path.join(DIALOGUES, "guide.yaml"))
        self.assertEqual(story.start, "guide.start")
        first = story.nodes["guide.start"].choices[0]
        self.assertEqual(first.goto, "guide.tips")
        self.assertEqual(first.set_flags, {"met_guide": True})

    def test_missing_dialogue_dir_is_empty(self):
        self.assertEqual(load_dialogue_dir(os.path.join(ROOT, "no_such_dir")).nodes, {})


class TestContentErrors(unittest.TestCase):
    def test_town_errors(self):
        bad = [
            {},
            {"storylines": {}},
            {"storylines": {"a": {"npcs": ["guide"]}}},
            {"storylines": {"a": {}}, "start": "b"},
            {"storylines": {"a": {}}, "quests": {"q": {"npc": "x", "icon": "i"}}},
            {"storylines": {"a": {}}, "flags": {"bag": [1, 2]}},
            {"storylines": {"a": {"npcs": {"g": {}}}},
             "quests": {"q": {"npc": "g", "icon": "i", "condition": True, "priority": "high"}}},
            {"storylines": {"a": {"npcs": {"g": {}}}},
             "quests": {"q": {"npc": "g", "icon": "i", "condition": True, "priority": 1.5}}},
            {"storylines": {"a": {}}, "players": ["x"]},
            {"storylines": {"a": {}}, "players": {"1": "You"}},
        ]
        for data in bad:
            with self.subTest(data=data):
                with self.assertRaises(ConfigError):
                    parse_town_content(data)

    def test_declaration_order_is_kept(self):
        content = parse_town_content({
            "storylines": {"a": {"npcs": {"g": {}}}},
            "quests": {
                "z": {"npc": "g", "icon": "1", "condition": True},
                "a": {"npc": "g", "icon": "2", "condition": True},
            },
        })
        self.assertEqual([(q.id, q.order) for q in content.quests], [("z", 0), ("a", 1)])

    def test_dialogue_errors(self):
        bad = [
            {"nodes": {"a": {}}},
            {"namespace": "n", "nodes": {}},
            {"namespace": "n", "nodes": {"a": "text"}},
            {"namespace": "n", "nodes": {"a": {"choices": [{"text": "x", "goto": "missing"}]}}},
            {"namespace": "n", "nodes": {"a": {"choices": [{"text": "x", "set": {"f": None}}]}}},
        ]
        for data in bad:
            with self.subTest(data=data):
                with self.assertRaises(ConfigError):
                    parse_dialogue(data)

    def test_non_mapping_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "town.yaml")
            with open(path, "w", encoding="utf-8") as f:
                f.write("- just\n- a list\n")
            with self.assertRaises(ConfigError):
                load_town_content(path)


class TestSettings(unittest.TestCase):
    def test_shipped_defaults(self):
        cfg = load_settings(os.path.join(ROOT, "game", "config", "defaults.yaml"))
        self.assertEqual(cfg.window.width, 1280)
        self.assertIn("e", cfg.input.keymap["action"])
        self.assertIsNone(cfg.content.start_storyline)

    def test_missing_file_falls_back(self):
        cfg = load_settings(os.path.join(ROOT, "nope.yaml"))
        self.assertEqual(cfg.fps, 60)
        self.assertEqual(cfg.input.keymap["up"], ["UP", "w"])
        self.assertEqual(cfg.content.town, "game/content/town.yaml")

    def test_partial_override(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "s.yaml")
            with open(path, "w", encoding="utf-8") as f:
                f.write("input:\n  keymap:\n    action: SPACE\ncontent:\n  start_storyline: festival\n")
            cfg = load_settings(path)
        self.assertEqual(cfg.input.keymap["action"], ["SPACE"])
        self.assertEqual(cfg.input.keymap["down"], ["DOWN", "s"])
        self.assertEqual(cfg.content.start_storyline, "festival")


if __name__ == "__main__":
    unittest.main()
