from __future__ import annotations
import logging
from typing import Dict, Mapping, Optional

from engine.narrative.flags import FlagStore
from engine.narrative.loader import load_town_content
from engine.narrative.quests import QuestTracker
from engine.narrative.storyline import StorylineManager
from engine.narrative.types import FlagValue, TownContent

logger = logging.getLogger(__name__)


class NarrativeCore:
    """
    Flags + storylines + quests, wired together.

    Every mutation from the outside goes through here so derived quest state
    is re-evaluated before the call returns:
      - set_flag / set_flags   (the flag-mutation notification path)
      - set_storyline          (admin/debug hook; also used at startup)
    """

    def __init__(self, content: TownContent) -> None:
        self.content = content
        self.flags = FlagStore(content.flags)
        self.storylines = StorylineManager(content)
        self.quests = QuestTracker(content, self.storylines, self.flags)

    @classmethod
    def from_file(cls, path: str) -> "NarrativeCore":
        return cls(load_town_content(path))

    # --- mutation -----------------------------------------------------------
    def set_flag(self, name: str, value: FlagValue) -> None:
        self.flags.set(name, value)
        logger.debug("flag %s = %r", name, value)
        self.quests.update()

    def set_flags(self, values: Mapping[str, FlagValue]) -> None:
        if not values:
            return
        for name, value in values.items():
            self.flags.set(name, value)
            logger.debug("flag %s = %r", name, value)
        self.quests.update()

    def set_storyline(self, storyline_id: str) -> None:
        self.storylines.set_current_storyline(storyline_id)

    def start(self, storyline_id: Optional[str] = None) -> None:
        """Select the opening storyline (explicit id, else the content's `start`)."""
        sid = storyline_id or self.content.start_storyline
        if sid is None:
            sid = self.storylines.storyline_ids()[0]
        self.set_storyline(sid)

    # --- read side ----------------------------------------------------------
    def flag(self, name: str) -> Optional[FlagValue]:
        return self.flags.get(name)

    def npcs(self) -> Dict[str, dict]:
        return self.storylines.get_npcs()

    def markers(self) -> Dict[str, str]:
        return self.quests.get_npcs_with_quests()
