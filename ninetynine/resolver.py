"""Reconciliation of a local optimistic state with a remote authoritative one."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from .state import GameState

logger = logging.getLogger(__name__)

S = TypeVar("S")

ConflictStrategy = Callable[[S, S], Awaitable[S]]


class ConflictResolver(Generic[S]):
    """Holds at most one resolution strategy.

    Without a strategy the remote state always wins. Installing a strategy
    replaces whatever was installed before.
    """

    def __init__(self, strategy: Optional[ConflictStrategy] = None) -> None:
        self._strategy: Optional[ConflictStrategy] = strategy

    @property
    def strategy(self) -> Optional[ConflictStrategy]:
        return self._strategy

    def on_conflict(self, strategy: ConflictStrategy) -> None:
        if self._strategy is not None:
            logger.debug("Replacing conflict strategy %r with %r", self._strategy, strategy)
        self._strategy = strategy

    def clear(self) -> None:
        self._strategy = None

    async def resolve(self, local: S, remote: S) -> S:
        if self._strategy is None:
            return remote
        return await self._strategy(local, remote)


async def remote_wins(local: GameState, remote: GameState) -> GameState:
    return remote


async def newest_version_wins(local: GameState, remote: GameState) -> GameState:
    """Keep whichever side has advanced its logical clock further.

    Ties go to the remote side.
    """
    if local.version > remote.version:
        logger.info("Keeping local state v%d over remote v%d", local.version, remote.version)
        return local
    return remote
