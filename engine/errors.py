from __future__ import annotations


class ConfigError(ValueError):
    """Content/authoring bug: bad storyline, quest, flag or dialogue definition."""


class UnknownStorylineError(ConfigError):
    def __init__(self, storyline_id: str, known: list[str] | None = None) -> None:
        self.storyline_id = storyline_id
        self.known = list(known or [])
        hint = f" (known: {', '.join(self.known)})" if self.known else ""
        super().__init__(f"Unknown storyline '{storyline_id}'{hint}")


class SignalLoopError(RuntimeError):
    """A listener chain kept re-triggering the same signal."""
