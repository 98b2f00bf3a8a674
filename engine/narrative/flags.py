from __future__ import annotations
from typing import Dict, Iterator, Mapping, Optional

from engine.narrative.types import FlagValue, is_flag_value


class FlagStore:
    """
    Passive name -> value store for story progress.

    - get() never fails: unknown names give `default` (None).
    - set() just overwrites. It fires nothing; whoever mutates is responsible
      for re-evaluating derived state (see NarrativeCore.set_flag).
    """

    def __init__(self, initial: Optional[Mapping[str, FlagValue]] = None) -> None:
        self._flags: Dict[str, FlagValue] = {}
        for name, value in (initial or {}).items():
            self.set(name, value)

    def get(self, name: str, default: Optional[FlagValue] = None) -> Optional[FlagValue]:
        return self._flags.get(name, default)

    def set(self, name: str, value: FlagValue) -> None:
        if not is_flag_value(value):
            raise TypeError(f"Flag '{name}': unsupported value {value!r} "
                            "(expected bool, number or string)")
        self._flags[name] = value

    def snapshot(self) -> Dict[str, FlagValue]:
        return dict(self._flags)

    def __contains__(self, name: object) -> bool:
        return name in self._flags

    def __iter__(self) -> Iterator[str]:
        return iter(dict(self._flags))

    def __len__(self) -> int:
        return len(self._flags)

    def __repr__(self) -> str:
        return f"FlagStore({self._flags!r})"
