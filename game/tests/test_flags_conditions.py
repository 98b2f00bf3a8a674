import unittest

from engine.errors import ConfigError
from engine.narrative.conditions import (
    AllOf, AnyOf, FlagCompare, FlagTruthy, Not, NpcPresent, StorylineIs, compare, parse_condition,
)
from engine.narrative.flags import FlagStore


class _Ctx:
    def __init__(self, flags=None, npcs=(), storyline=None):
        self.store = FlagStore(flags or {})
        self.npcs = set(npcs)
        self.storyline = storyline

    def flag(self, name):
        return self.store.get(name)

    def npc_present(self, npc_id):
        return npc_id in self.npcs

    def current_storyline(self):
        return self.storyline


class TestFlagStore(unittest.TestCase):
    def test_unknown_flag_reads_default(self):
        flags = FlagStore()
        self.assertIsNone(flags.get("never_set"))
        self.assertEqual(flags.get("never_set", 0), 0)
        self.assertNotIn("never_set", flags)

    def test_set_overwrites(self):
        flags = FlagStore({"coins": 1})
        flags.set("coins", 5)
        self.assertEqual(flags.get("coins"), 5)
        self.assertEqual(flags.snapshot(), {"coins": 5})

    def test_snapshot_is_a_copy(self):
        flags = FlagStore({"a": True})
        snap = flags.snapshot()
        snap["a"] = False
        self.assertIs(flags.get("a"), True)

    def test_rejects_unsupported_values(self):
        flags = FlagStore()
        with self.assertRaises(TypeError):
            flags.set("bag", ["apple"])
        with self.assertRaises(TypeError):
            flags.set("nothing", None)


class TestCompare(unittest.TestCase):
    def test_kinds_do_not_cross(self):
        # True == 1 in Python, but a boolean flag is not a numeric flag
        self.assertFalse(compare("eq", True, 1))
        self.assertTrue(compare("ne", True, 1))
        self.assertFalse(compare("eq", "1", 1))

    def test_numeric_ordering(self):
        self.assertTrue(compare("gte", 3, 3))
        self.assertTrue(compare("lt", 2.5, 3))
        self.assertFalse(compare("gt", 3, 3))

    def test_ordering_non_numbers_is_false(self):
        self.assertFalse(compare("gt", "rain", 1))
        self.assertFalse(compare("lt", True, 5))

    def test_absent_reads_as_false(self):
        self.assertTrue(compare("eq", None, False))
        self.assertFalse(compare("eq", None, True))
        self.assertTrue(compare("ne", None, "rain"))
        self.assertFalse(compare("gte", None, 0))


class TestParseCondition(unittest.TestCase):
    def test_shapes(self):
        self.assertEqual(parse_condition("met_guide"), FlagTruthy("met_guide"))
        self.assertEqual(parse_condition({"flag": "coins", "gte": 3}), FlagCompare("coins", "gte", 3))
        self.assertEqual(parse_condition({"not": "x"}), Not(FlagTruthy("x")))
        self.assertEqual(parse_condition({"npc_present": "guide"}), NpcPresent("guide"))
        self.assertEqual(parse_condition({"storyline": "festival"}), StorylineIs("festival"))
        self.assertIsInstance(parse_condition({"any": ["a", "b"]}), AnyOf)
        self.assertIsInstance(parse_condition(["a", "b"]), AllOf)

    def test_referenced_names(self):
        c = parse_condition({"all": ["a", {"not": {"flag": "b", "eq": "x"}}, {"npc_present": "guide"},
                                     {"storyline": "touristen"}]})
        self.assertEqual(c.flags(), {"a", "b"})
        self.assertEqual(c.npcs(), {"guide"})
        self.assertEqual(c.storylines(), {"touristen"})

    def test_bad_input_is_config_error(self):
        for raw in ({}, {"flag": "a", "gte": "three"}, {"flag": "a", "eq": 1, "ne": 2},
                    {"bogus": 1}, {"all": []}, "", 3, {"flag": "a", "eq": [1]}):
            with self.subTest(raw=raw):
                with self.assertRaises(ConfigError):
                    parse_condition(raw)

    def test_evaluation(self):
        ctx = _Ctx({"met_guide": True, "coins": 2, "weather": "rain"}, npcs=["guide"], storyline="touristen")
        self.assertTrue(parse_condition("met_guide").evaluate(ctx))
        self.assertFalse(parse_condition({"flag": "coins", "gte": 3}).evaluate(ctx))
        self.assertTrue(parse_condition({"flag": "weather", "eq": "rain"}).evaluate(ctx))
        self.assertTrue(parse_condition({"all": ["met_guide", {"npc_present": "guide"}]}).evaluate(ctx))
        self.assertFalse(parse_condition({"npc_present": "musician"}).evaluate(ctx))
        self.assertTrue(parse_condition({"any": ["unset", {"storyline": "touristen"}]}).evaluate(ctx))
        self.assertTrue(parse_condition({"not": "unset"}).evaluate(ctx))


if __name__ == "__main__":
    unittest.main()
