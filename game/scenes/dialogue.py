from __future__ import annotations
from typing import TYPE_CHECKING, Dict, Optional

import pygame

from engine.input_connections import DialogueConnection
from engine.narrative.dialogue import DialogueSequencer, ResponseOptions

if TYPE_CHECKING:
    from engine.app import GameApp
    from engine.scene import Scene


class DialogueScene:
    """Overlay: one NPC conversation. Pops itself when the sequencer ends."""

    def __init__(self, app: "GameApp", npc_id: str, start: str):
        self.app = app
        self.npc_id = npc_id
        self.start = start
        self.options = ResponseOptions()
        self.sequencer = DialogueSequencer(app.dialogues, app.core, self.options, on_end=self._finish)
        self.connection = DialogueConnection(app.keyboard, self.options, self.sequencer)
        self.names: Dict[str, str] = {}

    def _finish(self) -> None:
        if self.app.scenes.active() is self:
            self.app.scenes.pop()

    # --- lifecycle ----------------------------------------------------------
    def on_enter(self, prev: Optional["Scene"]) -> None:
        # NPC names don't change mid-conversation; read them once.
        self.names = {npc_id: str(props.get("name", npc_id)) for npc_id, props in self.app.core.npcs().items()}
        self.sequencer.start(self.start)

    def speaker_name(self) -> Optional[str]:
        node = self.sequencer.node
        if node is None:
            return None
        return self.names.get(node.speaker or self.npc_id)

    def on_exit(self, nxt: Optional["Scene"]) -> None:
        self.sequencer.ended.disconnect(self._finish)
        self.sequencer.end()

    def on_pause(self) -> None: pass
    def on_resume(self) -> None: pass

    # --- loop ---------------------------------------------------------------
    def update(self, dt: float) -> None:
        pass

    def draw(self, surface: pygame.Surface) -> None:
        node = self.sequencer.node
        if node is None:
            return
        w, h = surface.get_size()
        panel = pygame.Rect(40, int(h * 0.62), w - 80, int(h * 0.34))
        shade = pygame.Surface(panel.size, pygame.SRCALPHA)
        shade.fill((15, 15, 20, 210))
        surface.blit(shade, panel.topleft)

        font, small = self.app.font, self.app.small
        y = panel.top + 16
        speaker = self.speaker_name()
        if speaker:
            surface.blit(small.render(str(speaker), True, (240, 200, 90)), (panel.left + 20, y))
            y += 24
        for line in node.say.splitlines() or [""]:
            surface.blit(font.render(line, True, (235, 235, 240)), (panel.left + 20, y))
            y += 28
        y += 8
        for i, text in enumerate(self.options.lines):
            sel = i == self.options.sel
            img = font.render(("> " if sel else "  ") + text, True, (255, 220, 120) if sel else (190, 190, 200))
            surface.blit(img, (panel.left + 32, y))
            y += 28
