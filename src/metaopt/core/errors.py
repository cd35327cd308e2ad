"""
Exception hierarchy for metaopt.

All library errors derive from MetaoptError, which carries an optional
suggestion and a details dict alongside the message.
"""
from __future__ import annotations
from typing import Any


class MetaoptError(Exception):
    def __init__(self, message: str, suggestion: str | None = None,
                 details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = self.message
        if self.suggestion:
            msg += f"\n\nSuggestion: {self.suggestion}"
        return msg


class ConfigurationError(MetaoptError):
    """Raised before a run starts when the configuration or problem is unusable."""


class MissingCapabilityError(ConfigurationError):
    def __init__(self, algorithm: str, capability: str, problem: str) -> None:
        super().__init__(
            f"{algorithm} needs '{capability}' but problem '{problem}' does not provide it.",
            suggestion=f"Build the Problem with a {capability} function.",
            details={"algorithm": algorithm, "capability": capability, "problem": problem},
        )


class UnknownAlgorithmError(ConfigurationError):
    def __init__(self, name: str, available: list[str]) -> None:
        super().__init__(f"Unknown algorithm '{name}'.",
                         suggestion=f"Available algorithms: {', '.join(available)}",
                         details={"algorithm": name, "available": available})


class NeighborhoodExhausted(MetaoptError):
    """A neighbor/generate function could not produce a candidate."""


__all__ = ["MetaoptError", "ConfigurationError", "MissingCapabilityError",
           "UnknownAlgorithmError", "NeighborhoodExhausted"]
