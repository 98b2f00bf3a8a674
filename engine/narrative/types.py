from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple, Union

if TYPE_CHECKING:
    from engine.narrative.conditions import Condition

# Flag values are a closed set: boolean | numeric | enumerated (string).
FlagValue = Union[bool, int, float, str]
FLAG_VALUE_TYPES: Tuple[type, ...] = (bool, int, float, str)


def is_flag_value(v: Any) -> bool:
    return isinstance(v, FLAG_VALUE_TYPES)


@dataclass(frozen=True)
class NpcDef:
    id: str
    props: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class StorylineDef:
    id: str
    npcs: Tuple[NpcDef, ...] = ()

    def npc_ids(self) -> List[str]:
        return [n.id for n in self.npcs]


@dataclass(frozen=True)
class QuestDef:
    id: str
    npc: str                            # owning NPC id
    icon: str                           # marker icon id
    condition: "Condition"              # inactive -> active
    done_when: Optional["Condition"] = None  # active -> done (None: condition turns false)
    priority: int = 0                   # marker tie-break, higher wins
    order: int = 0                      # declaration order, second tie-break


@dataclass(frozen=True)
class TownContent:
    """Everything the narrative core reads; loaded once, never mutated."""
    storylines: Dict[str, StorylineDef]
    quests: Tuple[QuestDef, ...] = ()
    flags: Dict[str, FlagValue] = field(default_factory=dict)   # declared flags + initial values
    players: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    start_storyline: Optional[str] = None

    def all_npc_ids(self) -> set:
        return {n.id for s in self.storylines.values() for n in s.npcs}


# --- dialogue -------------------------------------------------------------
@dataclass(eq=False)
class Choice:
    id: str
    text: str
    goto: Optional[str] = None  # Fully-qualified "namespace.key" or None (ends dialogue)
    set_flags: Dict[str, FlagValue] = field(default_factory=dict)


@dataclass(eq=False)
class Node:
    fqid: str                   # Fully-qualified id: "<namespace>.<key>"
    namespace: str
    key: str
    say: str
    speaker: Optional[str] = None
    choices: List[Choice] = field(default_factory=list)


@dataclass
class Story:
    nodes: Dict[str, Node]      # FQID -> Node
    start: str                  # FQID

    def merge(self, other: "Story") -> "Story":
        nodes = dict(self.nodes)
        nodes.update(other.nodes)
        return Story(nodes=nodes, start=self.start or other.start)
