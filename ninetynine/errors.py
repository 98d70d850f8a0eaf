"""Exception hierarchy shared across the engine.

Expected rejections (off-suit plays, oversized bids, repeat declarations) are
never raised; they come back as ``Transition`` results. These exceptions cover
programming and integration errors only.
"""

from __future__ import annotations


class NinetyNineError(Exception):
    """Base class for engine errors."""


class UnknownPlayer(NinetyNineError, KeyError):
    """Raised when a command references a player who is not seated."""

    def __init__(self, player_id: str) -> None:
        super().__init__(player_id)
        self.player_id = player_id

    def __str__(self) -> str:
        return f"Unknown player {self.player_id!r}."


class GameNotFound(NinetyNineError, LookupError):
    """Raised when a requested game session does not exist."""

    def __init__(self, game_id: str) -> None:
        super().__init__(game_id)
        self.game_id = game_id

    def __str__(self) -> str:
        return f"Game {self.game_id!r} not found."


class ConflictError(NinetyNineError):
    """Raised when a conflict strategy produces an unusable result."""
