from __future__ import annotations
import logging
from enum import Enum
from typing import Callable, Dict, List, Optional

from engine.errors import ConfigError
from engine.events import Signal
from engine.narrative.flags import FlagStore
from engine.narrative.storyline import StorylineManager
from engine.narrative.types import FlagValue, QuestDef, TownContent

logger = logging.getLogger(__name__)


class QuestStatus(str, Enum):
    INACTIVE = "inactive"
    ACTIVE = "active"
    DONE = "done"


class _Context:
    """EvalContext over the live flag store and storyline manager."""

    def __init__(self, flags: FlagStore, storylines: StorylineManager) -> None:
        self._flags = flags
        self._storylines = storylines

    def flag(self, name: str) -> Optional[FlagValue]:
        return self._flags.get(name)

    def npc_present(self, npc_id: str) -> bool:
        return self._storylines.has_npc(npc_id)

    def current_storyline(self) -> Optional[str]:
        return self._storylines.current


class QuestTracker:
    """
    Derives quest state from flags + current storyline.

    Lifecycle per quest is one-way: inactive -> active -> done.
      - inactive -> active: owning NPC present and `condition` holds
      - active -> done:     `done_when` holds (or, without done_when,
                            `condition` stopped holding while the NPC is here)
      - done is final; it never shows up as active again.

    update() re-evaluates everything, commits all statuses, and only then fires
    `quest_active` / `quest_done` (once per transitioning quest), so listeners
    see post-transition state through get_npcs_with_quests().
    """

    # Run ahead of presentation listeners on storyline_changed.
    STORYLINE_PRIORITY = 100

    def __init__(
        self,
        content: TownContent,
        storylines: StorylineManager,
        flags: FlagStore,
        *,
        on_active: Optional[Callable[[], None]] = None,
        on_done: Optional[Callable[[], None]] = None,
    ) -> None:
        self.content = content
        self.storylines = storylines
        self.flags = flags
        self.quest_active = Signal("quest_active")
        self.quest_done = Signal("quest_done")
        if on_active:
            self.quest_active.connect(on_active)
        if on_done:
            self.quest_done.connect(on_done)

        self._quests: List[QuestDef] = sorted(content.quests, key=lambda q: q.order)
        self._validate()
        self._status: Dict[str, QuestStatus] = {q.id: QuestStatus.INACTIVE for q in self._quests}
        self._ctx = _Context(flags, storylines)

        storylines.storyline_changed.connect(self.update, priority=self.STORYLINE_PRIORITY)
        # Quests that are already true at startup count immediately.
        self.update()

    # --- validation ---------------------------------------------------------
    def _validate(self) -> None:
        seen = set()
        npc_ids = self.content.all_npc_ids()
        declared_flags = set(self.content.flags)
        for q in self._quests:
            if q.id in seen:
                raise ConfigError(f"Quest '{q.id}' defined twice")
            seen.add(q.id)
            if q.npc not in npc_ids:
                raise ConfigError(f"Quest '{q.id}': npc '{q.npc}' is not in any storyline")
            conds = [c for c in (q.condition, q.done_when) if c is not None]
            for c in conds:
                for npc in c.npcs():
                    if npc not in npc_ids:
                        raise ConfigError(f"Quest '{q.id}': condition names unknown npc '{npc}'")
                for sid in c.storylines():
                    if sid not in self.content.storylines:
                        raise ConfigError(f"Quest '{q.id}': condition names unknown storyline '{sid}'")
                # Only enforceable when the content declares its flags.
                if declared_flags:
                    for name in c.flags():
                        if name not in declared_flags:
                            raise ConfigError(f"Quest '{q.id}': condition uses undeclared flag '{name}'")

    # --- evaluation ---------------------------------------------------------
    def update(self) -> None:
        activated: List[str] = []
        finished: List[str] = []

        for q in self._quests:
            status = self._status[q.id]
            if status is QuestStatus.DONE:
                continue
            if not self.storylines.has_npc(q.npc):
                # Owner not on the map: nothing can change for this quest now.
                continue

            if status is QuestStatus.INACTIVE and q.condition.evaluate(self._ctx):
                status = QuestStatus.ACTIVE
                activated.append(q.id)

            if status is QuestStatus.ACTIVE and self._is_done(q):
                status = QuestStatus.DONE
                finished.append(q.id)

            self._status[q.id] = status

        for qid in activated:
            logger.info("Quest '%s' active", qid)
        for qid in finished:
            logger.info("Quest '%s' done", qid)

        for _ in activated:
            self.quest_active.emit()
        for _ in finished:
            self.quest_done.emit()

    def _is_done(self, q: QuestDef) -> bool:
        if q.done_when is not None:
            return q.done_when.evaluate(self._ctx)
        return not q.condition.evaluate(self._ctx)

    # --- queries ------------------------------------------------------------
    def status(self, quest_id: str) -> QuestStatus:
        try:
            return self._status[quest_id]
        except KeyError:
            raise ConfigError(f"Unknown quest '{quest_id}'") from None

    def active_quests(self) -> List[str]:
        return [q.id for q in self._quests if self._status[q.id] is QuestStatus.ACTIVE]

    def done_quests(self) -> List[str]:
        return [q.id for q in self._quests if self._status[q.id] is QuestStatus.DONE]

    def get_npcs_with_quests(self) -> Dict[str, str]:
        """
        npc id -> icon id for NPCs on the map with an active quest.
        Several candidates: highest priority wins, then declaration order.
        """
        best: Dict[str, QuestDef] = {}
        for q in self._quests:
            if self._status[q.id] is not QuestStatus.ACTIVE:
                continue
            if not self.storylines.has_npc(q.npc):
                continue
            cur = best.get(q.npc)
            if cur is None or q.priority > cur.priority:
                best[q.npc] = q
        return {npc: q.icon for npc, q in best.items()}
