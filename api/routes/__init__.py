"""Route registration helpers."""

from . import (  # noqa: F401
    config,
    health,
    league,
    standings,
)

__all__ = [
    "config",
    "health",
    "league",
    "standings",
]
