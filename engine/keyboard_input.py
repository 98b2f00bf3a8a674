from __future__ import annotations
from typing import Callable, Dict, Iterable, List, Mapping, Optional
import pygame

from engine.input_router import InputSource


DEFAULT_KEYMAP: Dict[str, List[str]] = {
    "up": ["UP", "w"],
    "down": ["DOWN", "s"],
    "action": ["SPACE", "RETURN"],
}


def key_code(name: str) -> int:
    """'UP' -> pygame.K_UP, 'w' -> pygame.K_w. Unknown names raise ValueError."""
    code = getattr(pygame, f"K_{name}", None)
    if code is None:
        raise ValueError(f"Unknown key name '{name}'")
    return int(code)


class KeyboardInput(InputSource):
    """
    pygame KEYDOWN -> named signals.

    Toggles are for overlays that sit outside the connection scheme (debug
    panel, menu); they fire regardless of which connection is routed.
    """

    def __init__(self, keymap: Optional[Mapping[str, Iterable[str]]] = None) -> None:
        super().__init__()
        self._keys: Dict[int, str] = {}
        self._toggles: Dict[int, Callable[[], None]] = {}
        for signal, names in (keymap or DEFAULT_KEYMAP).items():
            for name in names:
                self.bind(name, signal)

    def bind(self, key_name: str, signal: str) -> None:
        self._keys[key_code(key_name)] = signal

    def add_toggle(self, key_name: str, callback: Callable[[], None]) -> None:
        self._toggles[key_code(key_name)] = callback

    def remove_toggle(self, key_name: str) -> None:
        self._toggles.pop(key_code(key_name), None)

    def feed(self, e) -> bool:
        """Return True if the event was consumed."""
        if getattr(e, "type", None) != pygame.KEYDOWN:
            return False
        key = getattr(e, "key", None)
        toggle = self._toggles.get(key)
        if toggle is not None:
            toggle()
            return True
        signal = self._keys.get(key)
        if signal is None:
            return False
        return self.emit(signal)
