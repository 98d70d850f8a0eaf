"""Client-side owner of the current game state."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, List, Mapping, Optional, Union

from .codec import load_state
from .errors import ConflictError
from .resolver import ConflictResolver, ConflictStrategy
from .rules_schema import DEFAULT_RULES, RuleSet
from .state import Command, GameState, Transition, apply_command

logger = logging.getLogger(__name__)

StateHandler = Callable[[GameState], None]
ErrorHandler = Callable[[Exception], None]


class GameStore:
    """Applies local intents in submission order and folds in remote updates.

    Local intents are synchronous. Remote updates go through the conflict
    resolver, which is the only await point. Reconciliations are serialised and
    the state is swapped in a single step once the resolver returns; a resolved
    state older than the local one is refused. No timeout is applied here.
    """

    def __init__(
        self,
        state: GameState,
        *,
        rules: RuleSet = DEFAULT_RULES,
        resolver: Optional[ConflictResolver] = None,
    ) -> None:
        self._state = state
        self.rules = rules
        self.resolver: ConflictResolver = resolver or ConflictResolver()
        self._subscribers: List[StateHandler] = []
        self._error_handlers: List[ErrorHandler] = []
        self._reconcile_lock = asyncio.Lock()

    @property
    def state(self) -> GameState:
        return self._state

    # Intents -------------------------------------------------------------

    def apply(self, command: Command) -> Transition:
        transition = apply_command(self._state, command, self.rules)
        if transition.accepted:
            self._set_state(transition.state)
        return transition

    # Remote sync ---------------------------------------------------------

    def on_conflict(self, strategy: ConflictStrategy) -> None:
        self.resolver.on_conflict(strategy)

    async def receive_remote(self, remote: GameState) -> bool:
        """Reconcile ``remote`` with the local state; False if that failed.

        Reconciliations run one at a time. If a local intent lands while the
        strategy is running, the strategy is run again against the newer local
        state so the intent is not lost.
        """
        async with self._reconcile_lock:
            try:
                resolved = await self._resolve_against_current(remote)
            except Exception as exc:
                logger.exception("Conflict resolution failed; keeping local v%d", self._state.version)
                self._notify_error(exc)
                return False
            current = self._state
            if resolved.version < current.version:
                exc = ConflictError(
                    f"Resolved state v{resolved.version} is older than local v{current.version}."
                )
                logger.warning("%s Keeping local state.", exc)
                self._notify_error(exc)
                return False
            logger.info(
                "Reconciled local v%d with remote v%d -> v%d", current.version, remote.version, resolved.version
            )
            self._set_state(resolved)
            return True

    async def _resolve_against_current(self, remote: GameState) -> GameState:
        while True:
            local = self._state
            resolved = await self.resolver.resolve(local, remote)
            if not isinstance(resolved, GameState):
                raise ConflictError(f"Conflict strategy returned {type(resolved).__name__}, not a GameState.")
            if self._state is local:
                return resolved
            logger.debug("Local state moved to v%d during resolution; resolving again", self._state.version)

    async def receive_remote_payload(self, payload: Union[str, bytes, Mapping[str, Any]]) -> bool:
        try:
            remote = load_state(payload)
        except ValueError as exc:
            logger.error("Discarding undecodable remote state: %s", exc)
            self._notify_error(exc)
            return False
        return await self.receive_remote(remote)

    # Subscriptions -------------------------------------------------------

    def subscribe(self, handler: StateHandler) -> Callable[[], None]:
        self._subscribers.append(handler)

        def unsubscribe() -> None:
            if handler in self._subscribers:
                self._subscribers.remove(handler)

        return unsubscribe

    def on_error(self, handler: ErrorHandler) -> Callable[[], None]:
        self._error_handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._error_handlers:
                self._error_handlers.remove(handler)

        return unsubscribe

    def _set_state(self, state: GameState) -> None:
        self._state = state
        for handler in list(self._subscribers):
            handler(state)

    def _notify_error(self, exc: Exception) -> None:
        for handler in list(self._error_handlers):
            handler(exc)
