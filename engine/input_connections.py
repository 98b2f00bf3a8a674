from __future__ import annotations
from typing import Callable, List, Protocol, Tuple

from engine.input_router import ACTION, DOWN, UP, InputSource


class DialogueOverlay(Protocol):
    def select_next_response_option(self) -> None: ...
    def select_previous_response_option(self) -> None: ...


class Sequencer(Protocol):
    def action(self) -> None: ...


class PlayerApp(Protocol):
    def enable_pc_control(self) -> None: ...
    def disable_pc_control(self) -> None: ...
    def pc_action(self) -> None: ...
    def menu_action(self) -> None: ...


class _BaseConnection:
    """
    Keeps its own bound handlers, so unroute() detaches exactly what route()
    attached. Both calls are no-ops when already in that state.
    """

    def __init__(self, source: InputSource) -> None:
        self.source = source
        self.routed = False

    def _bindings(self) -> List[Tuple[str, Callable[[], None]]]:
        raise NotImplementedError

    def _on_route(self) -> None:
        pass

    def _on_unroute(self) -> None:
        pass

    def route(self) -> None:
        if self.routed:
            return
        self._on_route()
        for name, handler in self._bindings():
            self.source.on(name, handler)
        self.routed = True

    def unroute(self) -> None:
        if not self.routed:
            return
        for name, handler in self._bindings():
            self.source.off(name, handler)
        self._on_unroute()
        self.routed = False


class DialogueConnection(_BaseConnection):
    # down -> next option, up -> previous option, action -> advance
    def __init__(self, source: InputSource, overlay: DialogueOverlay, sequencer: Sequencer) -> None:
        super().__init__(source)
        self.overlay = overlay
        self.sequencer = sequencer

    def _bindings(self):
        return [(DOWN, self.handle_down), (UP, self.handle_up), (ACTION, self.handle_action)]

    def handle_down(self) -> None:
        self.overlay.select_next_response_option()

    def handle_up(self) -> None:
        self.overlay.select_previous_response_option()

    def handle_action(self) -> None:
        self.sequencer.action()


class MovementConnection(_BaseConnection):
    def __init__(self, source: InputSource, player_app: PlayerApp) -> None:
        super().__init__(source)
        self.player_app = player_app

    def _bindings(self):
        return [(ACTION, self.handle_action)]

    def _on_route(self) -> None:
        self.player_app.enable_pc_control()

    def _on_unroute(self) -> None:
        self.player_app.disable_pc_control()

    def handle_action(self) -> None:
        self.player_app.pc_action()


class MenuConnection(_BaseConnection):
    def __init__(self, source: InputSource, player_app: PlayerApp) -> None:
        super().__init__(source)
        self.player_app = player_app

    def _bindings(self):
        return [(ACTION, self.handle_action)]

    def handle_action(self) -> None:
        self.player_app.menu_action()
