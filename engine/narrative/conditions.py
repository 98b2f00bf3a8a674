"""
Quest conditions.

Content writes them as small YAML expressions, e.g.::

    condition: met_guide                      # flag is truthy
    condition: {flag: coins, gte: 3}          # numeric comparison
    condition: {flag: weather, eq: rain}      # enumerated value
    condition: {all: [met_guide, {not: museum_visited}]}
    condition: {npc_present: guide}
    condition: {storyline: touristen}

`parse_condition` turns them into Condition objects; `evaluate` runs against
an EvalContext (flags + storyline state). Comparisons match on the kind of the
flag value (bool / numeric / enumerated) exhaustively: comparing across kinds
is false, ordering an enumerated value is false, never an exception.
"""
from __future__ import annotations
import operator
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, Iterable, Optional, Protocol, Tuple

from engine.errors import ConfigError
from engine.narrative.types import FlagValue, is_flag_value


class EvalContext(Protocol):
    def flag(self, name: str) -> Optional[FlagValue]: ...
    def npc_present(self, npc_id: str) -> bool: ...
    def current_storyline(self) -> Optional[str]: ...


# --- value kinds ------------------------------------------------------------
KIND_ABSENT = "absent"
KIND_BOOL = "bool"
KIND_NUMBER = "number"
KIND_ENUM = "enum"


def value_kind(v: Any) -> str:
    # bool before int: bool is a subclass of int
    if v is None:
        return KIND_ABSENT
    if isinstance(v, bool):
        return KIND_BOOL
    if isinstance(v, (int, float)):
        return KIND_NUMBER
    if isinstance(v, str):
        return KIND_ENUM
    raise TypeError(f"Unsupported flag value: {v!r}")


_ORDERING: Dict[str, Callable[[Any, Any], bool]] = {
    "gt": operator.gt,
    "gte": operator.ge,
    "lt": operator.lt,
    "lte": operator.le,
}
_EQUALITY = ("eq", "ne")


def compare(op: str, actual: Optional[FlagValue], expected: FlagValue) -> bool:
    a_kind = value_kind(actual)
    e_kind = value_kind(expected)

    if a_kind == KIND_ABSENT:
        # Unset flags read as "false": only `eq: false` / `ne: <anything>` hold.
        if op == "eq":
            return expected is False
        return op == "ne" and expected is not False

    if op in _EQUALITY:
        same = a_kind == e_kind and actual == expected
        return same if op == "eq" else not same

    if op in _ORDERING:
        if a_kind == KIND_NUMBER and e_kind == KIND_NUMBER:
            return _ORDERING[op](actual, expected)
        return False  # booleans and enumerated values have no ordering

    raise ConfigError(f"Unknown comparison operator '{op}'")


# --- condition tree ---------------------------------------------------------
class Condition:
    def evaluate(self, ctx: EvalContext) -> bool:
        raise NotImplementedError

    def flags(self) -> FrozenSet[str]:
        return frozenset()

    def npcs(self) -> FrozenSet[str]:
        return frozenset()

    def storylines(self) -> FrozenSet[str]:
        return frozenset()


@dataclass(frozen=True)
class Always(Condition):
    value: bool = True

    def evaluate(self, ctx: EvalContext) -> bool:
        return self.value


@dataclass(frozen=True)
class FlagTruthy(Condition):
    name: str

    def evaluate(self, ctx: EvalContext) -> bool:
        return bool(ctx.flag(self.name))

    def flags(self) -> FrozenSet[str]:
        return frozenset((self.name,))


@dataclass(frozen=True)
class FlagCompare(Condition):
    name: str
    op: str
    value: FlagValue

    def evaluate(self, ctx: EvalContext) -> bool:
        return compare(self.op, ctx.flag(self.name), self.value)

    def flags(self) -> FrozenSet[str]:
        return frozenset((self.name,))


@dataclass(frozen=True)
class NpcPresent(Condition):
    npc_id: str

    def evaluate(self, ctx: EvalContext) -> bool:
        return ctx.npc_present(self.npc_id)

    def npcs(self) -> FrozenSet[str]:
        return frozenset((self.npc_id,))


@dataclass(frozen=True)
class StorylineIs(Condition):
    storyline_id: str

    def evaluate(self, ctx: EvalContext) -> bool:
        return ctx.current_storyline() == self.storyline_id

    def storylines(self) -> FrozenSet[str]:
        return frozenset((self.storyline_id,))


@dataclass(frozen=True)
class Not(Condition):
    inner: Condition

    def evaluate(self, ctx: EvalContext) -> bool:
        return not self.inner.evaluate(ctx)

    def flags(self): return self.inner.flags()
    def npcs(self): return self.inner.npcs()
    def storylines(self): return self.inner.storylines()


@dataclass(frozen=True)
class AllOf(Condition):
    parts: Tuple[Condition, ...]

    def evaluate(self, ctx: EvalContext) -> bool:
        return all(p.evaluate(ctx) for p in self.parts)

    def flags(self): return _union(p.flags() for p in self.parts)
    def npcs(self): return _union(p.npcs() for p in self.parts)
    def storylines(self): return _union(p.storylines() for p in self.parts)


@dataclass(frozen=True)
class AnyOf(AllOf):
    def evaluate(self, ctx: EvalContext) -> bool:
        return any(p.evaluate(ctx) for p in self.parts)


def _union(sets: Iterable[FrozenSet[str]]) -> FrozenSet[str]:
    out: FrozenSet[str] = frozenset()
    for s in sets:
        out = out | s
    return out


# --- parsing ----------------------------------------------------------------
_OPS = tuple(_EQUALITY) + tuple(_ORDERING)


def parse_condition(raw: Any, where: str = "condition") -> Condition:
    """Build a Condition from its YAML form. Raises ConfigError on bad input."""
    if isinstance(raw, bool):
        return Always(raw)
    if isinstance(raw, str):
        name = raw.strip()
        if not name:
            raise ConfigError(f"{where}: empty flag name")
        return FlagTruthy(name)
    if isinstance(raw, list):
        return AllOf(tuple(parse_condition(r, f"{where}[{i}]") for i, r in enumerate(raw)))
    if not isinstance(raw, dict) or not raw:
        raise ConfigError(f"{where}: expected a flag name, list or mapping, got {raw!r}")

    if "flag" in raw:
        name = str(raw["flag"]).strip()
        ops = [k for k in raw if k != "flag"]
        if not ops:
            return FlagTruthy(name)
        if len(ops) != 1 or ops[0] not in _OPS:
            raise ConfigError(f"{where}: flag '{name}' needs exactly one of {', '.join(_OPS)}")
        op = ops[0]
        value = raw[op]
        if not is_flag_value(value):
            raise ConfigError(f"{where}: flag '{name}' compared to unsupported value {value!r}")
        if op in _ORDERING and value_kind(value) != KIND_NUMBER:
            raise ConfigError(f"{where}: '{op}' needs a number, got {value!r}")
        return FlagCompare(name, op, value)

    if len(raw) != 1:
        raise ConfigError(f"{where}: ambiguous condition {raw!r}")
    (key, body), = raw.items()
    if key == "not":
        return Not(parse_condition(body, f"{where}.not"))
    if key in ("all", "any"):
        if not isinstance(body, list) or not body:
            raise ConfigError(f"{where}.{key}: expected a non-empty list")
        parts = tuple(parse_condition(r, f"{where}.{key}[{i}]") for i, r in enumerate(body))
        return AllOf(parts) if key == "all" else AnyOf(parts)
    if key == "npc_present":
        return NpcPresent(str(body))
    if key == "storyline":
        return StorylineIs(str(body))
    raise ConfigError(f"{where}: unknown condition '{key}'")
