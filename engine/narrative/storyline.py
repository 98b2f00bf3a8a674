from __future__ import annotations
import copy
import logging
from typing import Any, Dict, List, Optional

from engine.errors import UnknownStorylineError
from engine.events import Signal
from engine.narrative.types import TownContent

logger = logging.getLogger(__name__)


class StorylineManager:
    """
    Owns the current storyline and its NPC population.

    set_current_storyline(id):
      - unknown id        -> UnknownStorylineError (content bug, surfaced)
      - same as current   -> nothing, no event
      - otherwise         -> rebuild NPCs, then emit `storyline_changed`
    Listeners get no payload and re-query get_npcs().
    """

    def __init__(self, content: TownContent) -> None:
        self.content = content
        self.storyline_changed = Signal("storyline_changed")
        self._current: Optional[str] = None
        self._npcs: Dict[str, Dict[str, Any]] = {}

    @property
    def current(self) -> Optional[str]:
        return self._current

    def storyline_ids(self) -> List[str]:
        return list(self.content.storylines)

    def set_current_storyline(self, storyline_id: str) -> None:
        definition = self.content.storylines.get(storyline_id)
        if definition is None:
            raise UnknownStorylineError(storyline_id, self.storyline_ids())

        if storyline_id == self._current:
            logger.debug("Storyline '%s' already current", storyline_id)
            return

        previous = self._current
        # Full state swap before anyone hears about it.
        self._npcs = {npc.id: copy.deepcopy(dict(npc.props)) for npc in definition.npcs}
        self._current = storyline_id
        logger.info("Storyline %s -> %s (%d npcs)", previous, storyline_id, len(self._npcs))
        self.storyline_changed.emit()

    def get_npcs(self) -> Dict[str, Dict[str, Any]]:
        """Snapshot of id -> properties; mutating it does not touch our state."""
        return copy.deepcopy(self._npcs)

    def has_npc(self, npc_id: str) -> bool:
        return npc_id in self._npcs
