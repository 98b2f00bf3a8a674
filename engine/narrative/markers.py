from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

ADD = "add"
SWAP = "swap"
REMOVE = "remove"


@dataclass(frozen=True)
class MarkerOp:
    kind: str                   # add | swap | remove
    npc_id: str
    icon: Optional[str] = None  # new icon (None for remove)
    previous: Optional[str] = None


def diff_markers(displayed: Mapping[str, str], wanted: Mapping[str, str]) -> List[MarkerOp]:
    """Ops turning `displayed` into `wanted`; ordered by npc id for stable output."""
    ops: List[MarkerOp] = []
    for npc_id in sorted(set(displayed) | set(wanted)):
        old = displayed.get(npc_id)
        new = wanted.get(npc_id)
        if old is None and new is not None:
            ops.append(MarkerOp(ADD, npc_id, new))
        elif old is not None and new is None:
            ops.append(MarkerOp(REMOVE, npc_id, None, old))
        elif old != new:
            ops.append(MarkerOp(SWAP, npc_id, new, old))
    return ops


class QuestMarkerBoard:
    """What the map currently shows; sync() brings it in line with the tracker."""

    def __init__(self) -> None:
        self._shown: Dict[str, str] = {}

    @property
    def shown(self) -> Dict[str, str]:
        return dict(self._shown)

    def sync(self, wanted: Mapping[str, str], present: Optional[set] = None) -> List[MarkerOp]:
        if present is not None:
            # Markers of NPCs that left the map vanish with their sprite.
            self._shown = {k: v for k, v in self._shown.items() if k in present}
        ops = diff_markers(self._shown, wanted)
        for op in ops:
            if op.kind == REMOVE:
                self._shown.pop(op.npc_id, None)
            else:
                self._shown[op.npc_id] = op.icon
        return ops

    def clear(self) -> None:
        self._shown.clear()
