from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from engine.errors import ConfigError
from engine.events import Signal
from engine.narrative.core import NarrativeCore
from engine.narrative.types import Node, Story

logger = logging.getLogger(__name__)


@dataclass
class ResponseOptions:
    """Selection model behind the dialogue overlay's response list."""
    lines: List[str] = field(default_factory=list)
    sel: int = -1

    def show(self, lines: List[str]) -> None:
        self.lines = list(lines or [])
        self.sel = 0 if self.lines else -1

    def hide(self) -> None:
        self.lines.clear()
        self.sel = -1

    def active(self) -> bool:
        return bool(self.lines)

    def move(self, delta: int) -> None:
        if not self.lines:
            return
        self.sel = (self.sel + delta) % len(self.lines)

    def select_next_response_option(self) -> None:
        self.move(+1)

    def select_previous_response_option(self) -> None:
        self.move(-1)


class DialogueSequencer:
    """
    Walks a Story one node at a time.

    action():
      - node with choices -> apply the selected choice's `set` flags through the
        core (so quests re-evaluate), then follow `goto` or end if it has none
      - node without choices -> end
    """

    def __init__(
        self,
        story: Story,
        core: NarrativeCore,
        options: Optional[ResponseOptions] = None,
        on_end: Optional[Callable[[], None]] = None,
    ) -> None:
        self.story = story
        self.core = core
        self.options = options or ResponseOptions()
        self.node: Optional[Node] = None
        self.node_changed = Signal("dialogue_node_changed")
        self.ended = Signal("dialogue_ended")
        if on_end:
            self.ended.connect(on_end)

    @property
    def running(self) -> bool:
        return self.node is not None

    def start(self, fqid: Optional[str] = None) -> None:
        self._goto(fqid or self.story.start)

    def _goto(self, fqid: str) -> None:
        node = self.story.nodes.get(fqid)
        if node is None:
            raise ConfigError(f"Dialogue node '{fqid}' does not exist")
        self.node = node
        self.options.show([c.text or c.id for c in node.choices])
        logger.debug("dialogue -> %s", fqid)
        self.node_changed.emit()

    def action(self) -> None:
        node = self.node
        if node is None:
            return
        if not node.choices:
            self.end()
            return
        choice = node.choices[max(0, self.options.sel)]
        self.core.set_flags(choice.set_flags)
        if choice.goto:
            self._goto(choice.goto)
        else:
            self.end()

    def end(self) -> None:
        if self.node is None:
            return
        self.node = None
        self.options.hide()
        self.ended.emit()
