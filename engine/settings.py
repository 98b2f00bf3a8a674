from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional
import yaml

from engine.keyboard_input import DEFAULT_KEYMAP


@dataclass
class WindowCfg:
    width: int = 1280
    height: int = 720
    title: str = "TOWN MAP"
    bg_rgb: tuple[int, int, int] = (232, 228, 214)


@dataclass
class InputCfg:
    keymap: Dict[str, List[str]] = field(default_factory=lambda: {k: list(v) for k, v in DEFAULT_KEYMAP.items()})
    debug_toggle: str = "F3"        # flags/quests overlay
    menu_toggle: str = "ESCAPE"
    pc_speed: float = 220.0         # px per second
    interact_radius: float = 90.0   # px; pc_action talks to the nearest NPC within this


@dataclass
class ContentCfg:
    town: str = "game/content/town.yaml"
    dialogues: str = "game/content/dialogues"
    start_storyline: Optional[str] = None   # None -> content's `start`, else first storyline


@dataclass
class AppCfg:
    fps: int = 60
    window: WindowCfg = field(default_factory=WindowCfg)
    input: InputCfg = field(default_factory=InputCfg)
    content: ContentCfg = field(default_factory=ContentCfg)


def _get(d: dict, path: str, default: Any):
    cur = d
    for part in path.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return default
        cur = cur[part]
    return cur


def _keymap(raw: Any) -> Dict[str, List[str]]:
    keymap = {k: list(v) for k, v in DEFAULT_KEYMAP.items()}
    if isinstance(raw, dict):
        for signal, names in raw.items():
            if isinstance(names, str):
                names = [names]
            keymap[str(signal)] = [str(n) for n in (names or [])]
    return keymap


def load_settings(path: str = "game/config/defaults.yaml") -> AppCfg:
    data = {}
    p = Path(path)
    if p.exists():
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    start = _get(data, "content.start_storyline", None)
    return AppCfg(
        fps=int(_get(data, "fps", 60)),
        window=WindowCfg(
            width=int(_get(data, "window.width", 1280)),
            height=int(_get(data, "window.height", 720)),
            title=str(_get(data, "window.title", "TOWN MAP")),
            bg_rgb=tuple(_get(data, "window.bg_rgb", (232, 228, 214))),
        ),
        input=InputCfg(
            keymap=_keymap(_get(data, "input.keymap", None)),
            debug_toggle=str(_get(data, "input.debug_toggle", "F3")),
            menu_toggle=str(_get(data, "input.menu_toggle", "ESCAPE")),
            pc_speed=float(_get(data, "input.pc_speed", 220.0)),
            interact_radius=float(_get(data, "input.interact_radius", 90.0)),
        ),
        content=ContentCfg(
            town=str(_get(data, "content.town", "game/content/town.yaml")),
            dialogues=str(_get(data, "content.dialogues", "game/content/dialogues")),
            start_storyline=None if start is None else str(start),
        ),
    )
