from __future__ import annotations
import logging
import math
from typing import TYPE_CHECKING, Dict, Optional, Tuple

import pygame

from engine.input_connections import MovementConnection
from engine.narrative.markers import QuestMarkerBoard

if TYPE_CHECKING:
    from engine.app import GameApp
    from engine.scene import Scene

logger = logging.getLogger(__name__)

Vec = Tuple[float, float]


class TownScene:
    """
    The map: NPCs of the current storyline, the player character, and quest
    markers. Everything shown here is re-queried from the core on its events.
    """

    def __init__(self, app: "GameApp"):
        self.app = app
        self.core = app.core
        self.connection = MovementConnection(app.keyboard, self)
        self.pc_control = False

        self.npcs: Dict[str, dict] = {}
        self.markers = QuestMarkerBoard()

        # Every configured player character is on the map; the first one is ours.
        self.pcs: Dict[str, dict] = {}
        for pc_id in self.core.content.players:
            self.add_pc(pc_id)
        self.pc_id: str = next(iter(self.pcs), "local")
        if self.pc_id not in self.pcs:
            self.pcs[self.pc_id] = {"name": "You", "pos": (640.0, 600.0), "marker": None}

        self.core.storylines.storyline_changed.connect(self.handle_storyline_changed)
        self.core.quests.quest_active.connect(self.update_quest_markers)
        self.core.quests.quest_done.connect(self.update_quest_markers)

    # --- player characters ---------------------------------------------------
    def add_pc(self, pc_id: str) -> None:
        props = self.core.content.players.get(pc_id, {})
        self.pcs[pc_id] = {
            "name": str(props.get("name", pc_id)),
            "pos": _pos(props.get("position"), (640.0, 600.0)),
            "marker": f"player-{pc_id}",
        }

    def remove_pc(self, pc_id: str) -> None:
        if pc_id == self.pc_id:
            return  # the local character stays on the map
        self.pcs.pop(pc_id, None)

    @property
    def pc_pos(self) -> Vec:
        return self.pcs[self.pc_id]["pos"]

    @pc_pos.setter
    def pc_pos(self, pos: Vec) -> None:
        self.pcs[self.pc_id]["pos"] = pos

    # --- core events --------------------------------------------------------
    def handle_storyline_changed(self) -> None:
        self.npcs = self.core.npcs()
        self.update_quest_markers()

    def update_quest_markers(self) -> None:
        ops = self.markers.sync(self.core.markers(), present=set(self.npcs))
        for op in ops:
            logger.debug("marker %s %s %s", op.kind, op.npc_id, op.icon or "")

    # --- PlayerApp (driven by MovementConnection) ---------------------------
    def enable_pc_control(self) -> None:
        self.pc_control = True

    def disable_pc_control(self) -> None:
        self.pc_control = False

    def pc_action(self) -> None:
        npc_id = self.nearest_npc()
        if npc_id is None:
            return
        dialogue = self.npcs[npc_id].get("dialogue")
        if not dialogue:
            return
        from game.scenes.dialogue import DialogueScene
        self.app.scenes.push(DialogueScene(self.app, npc_id, str(dialogue)))

    def menu_action(self) -> None:
        pass

    def nearest_npc(self) -> Optional[str]:
        best, best_d = None, self.app.cfg.input.interact_radius
        for npc_id, props in self.npcs.items():
            x, y = _pos(props.get("position"), (0.0, 0.0))
            d = math.hypot(x - self.pc_pos[0], y - self.pc_pos[1])
            if d <= best_d:
                best, best_d = npc_id, d
        return best

    # --- lifecycle ----------------------------------------------------------
    def on_enter(self, prev: Optional["Scene"]) -> None: pass
    def on_exit(self, nxt: Optional["Scene"]) -> None: pass
    def on_pause(self) -> None: pass
    def on_resume(self) -> None: pass

    # --- loop ---------------------------------------------------------------
    def update(self, dt: float) -> None:
        if not self.pc_control:
            return
        keys = pygame.key.get_pressed()
        dx = (keys[pygame.K_RIGHT] or keys[pygame.K_d]) - (keys[pygame.K_LEFT] or keys[pygame.K_a])
        dy = (keys[pygame.K_DOWN] or keys[pygame.K_s]) - (keys[pygame.K_UP] or keys[pygame.K_w])
        if dx or dy:
            n = math.hypot(dx, dy)
            step = self.app.cfg.input.pc_speed * dt / n
            w, h = self.app.screen.get_size()
            self.pc_pos = (min(max(0.0, self.pc_pos[0] + dx * step), w),
                           min(max(0.0, self.pc_pos[1] + dy * step), h))

    def draw(self, surface: pygame.Surface) -> None:
        font = self.app.small
        shown = self.markers.shown
        # y-sorted, like the map's main layer
        for npc_id, props in sorted(self.npcs.items(), key=lambda kv: _pos(kv[1].get("position"), (0, 0))[1]):
            x, y = _pos(props.get("position"), (0.0, 0.0))
            pygame.draw.circle(surface, tuple(props.get("color", (70, 110, 160))), (int(x), int(y)), 16)
            label = font.render(str(props.get("name", npc_id)), True, (30, 30, 30))
            surface.blit(label, label.get_rect(midtop=(int(x), int(y) + 18)))
            if npc_id in shown:
                _draw_marker(surface, font, (x, y - 22), shown[npc_id])

        for pc in self.pcs.values():
            x, y = pc["pos"]
            pygame.draw.circle(surface, (200, 70, 60), (int(x), int(y)), 14)
            label = font.render(pc["name"], True, (30, 30, 30))
            surface.blit(label, label.get_rect(midtop=(int(x), int(y) + 16)))
            if pc["marker"]:
                _draw_marker(surface, font, (x, y - 20), pc["marker"])


def _pos(raw, default: Vec) -> Vec:
    if isinstance(raw, (list, tuple)) and len(raw) == 2:
        return float(raw[0]), float(raw[1])
    return default


def _draw_marker(surface: pygame.Surface, font: pygame.font.Font, anchor: Vec, icon: str) -> None:
    x, y = int(anchor[0]), int(anchor[1])
    pygame.draw.polygon(surface, (240, 190, 40), [(x, y), (x - 10, y - 16), (x + 10, y - 16)])
    pygame.draw.circle(surface, (240, 190, 40), (x, y - 22), 12)
    # "player-2" shows "2", quest icons show their initial
    glyph = icon.rsplit("-", 1)[-1] if icon.startswith("player-") else icon[:1].upper()
    txt = font.render(glyph or "!", True, (40, 30, 10))
    surface.blit(txt, txt.get_rect(center=(x, y - 22)))
