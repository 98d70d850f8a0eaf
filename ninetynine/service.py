"""Convenience service layer for UI, server and bots."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from .cards import Card, card_label, serialize_card
from .errors import GameNotFound
from .rules_schema import DEFAULT_RULES, RuleSet
from .state import (
    ClearTrick,
    Declare,
    PlayCard,
    ResolveTrick,
    SettleRound,
    StartRound,
    SubmitBid,
    Transition,
    can_declare,
    new_game,
    playable_cards,
)
from .store import GameStore

logger = logging.getLogger(__name__)

CardRef = Union[str, Mapping[str, Any]]


@dataclass
class TrickPlayView:
    player_id: str
    card: dict
    label: str


@dataclass
class PlayerView:
    player_id: str
    hand: Optional[list[dict]]
    hand_size: int
    playable: Optional[list[dict]]
    bid_cards: Optional[list[dict]]
    bid_value: Optional[int]
    can_declare: bool
    declaration: Optional[str]
    tricks_won: int
    score: int


@dataclass
class GameView:
    version: int
    round_number: int
    round_settled: bool
    deck_remaining: int
    led_suit: Optional[str]
    trick: list[TrickPlayView]
    players: list[PlayerView]
    scores: dict[str, int]


@dataclass
class ActionResult:
    accepted: bool
    reason: Optional[str]
    view: GameView
    winner_id: Optional[str] = None


class GameService:
    """Facade around a GameStore for UI consumers."""

    def __init__(
        self,
        player_ids: Optional[Sequence[str]] = None,
        *,
        store: Optional[GameStore] = None,
        rules: RuleSet = DEFAULT_RULES,
        reveal_hands: bool = True,
    ) -> None:
        if store is None:
            if not player_ids:
                raise ValueError("Either player ids or a store is required.")
            store = GameStore(new_game(player_ids), rules=rules)
        self.store = store
        self.reveal_hands = reveal_hands

    # Actions -----------------------------------------------------------

    def start_round(self, seed: Optional[int] = None) -> ActionResult:
        return self._result(self.store.apply(StartRound(seed=seed)))

    def play_card(self, player_id: str, card: CardRef) -> ActionResult:
        found = self._find_card(player_id, card)
        if found is None:
            return self._rejected("Card is not in hand.", player_id)
        return self._result(self.store.apply(PlayCard(player_id, found)), player_id)

    def submit_bid(self, player_id: str, cards: Sequence[CardRef]) -> ActionResult:
        selection: List[Card] = []
        for ref in cards:
            found = self._find_card(player_id, ref)
            if found is None:
                return self._rejected("Bid cards must come from the player's hand.", player_id)
            selection.append(found)
        return self._result(self.store.apply(SubmitBid(player_id, tuple(selection))), player_id)

    def declare(self, player_id: str, kind: str) -> ActionResult:
        return self._result(self.store.apply(Declare(player_id, kind)), player_id)

    def resolve_trick(self) -> ActionResult:
        return self._result(self.store.apply(ResolveTrick()))

    def clear_trick(self) -> ActionResult:
        return self._result(self.store.apply(ClearTrick()))

    def settle_round(self) -> ActionResult:
        return self._result(self.store.apply(SettleRound()))

    async def sync_remote(self, payload: Union[str, bytes, Mapping[str, Any]]) -> bool:
        return await self.store.receive_remote_payload(payload)

    # Views -------------------------------------------------------------

    def get_view(self, perspective: Optional[str] = None) -> GameView:
        """Build a read-only view.

        With a perspective only that player's cards are shown. Without one every
        hand is shown if ``reveal_hands`` is set and none otherwise.
        """
        state = self.store.state
        if perspective is not None:
            state.require_player(perspective)
        players: list[PlayerView] = []
        for player_id in state.player_ids:
            visible = perspective == player_id or (perspective is None and self.reveal_hands)
            hand = state.hands[player_id]
            bid = state.bids.get(player_id)
            declaration = state.declarations.get(player_id)
            players.append(
                PlayerView(
                    player_id=player_id,
                    hand=[serialize_card(card) for card in hand] if visible else None,
                    hand_size=len(hand),
                    playable=[serialize_card(card) for card in playable_cards(state, player_id)] if visible else None,
                    bid_cards=[serialize_card(card) for card in bid.cards] if visible and bid else None,
                    bid_value=bid.value if bid else None,
                    can_declare=can_declare(state, player_id),
                    declaration=declaration.kind.value if declaration else None,
                    tricks_won=state.tricks_won[player_id],
                    score=state.ledger.score(player_id),
                )
            )
        led = state.trick.led_suit()
        return GameView(
            version=state.version,
            round_number=state.round_number,
            round_settled=state.round_settled,
            deck_remaining=len(state.deck),
            led_suit=str(led) if led is not None else None,
            trick=[
                TrickPlayView(player_id=play.player_id, card=serialize_card(play.card), label=card_label(play.card))
                for play in state.trick.plays
            ],
            players=players,
            scores=state.ledger.snapshot(),
        )

    # Helpers -----------------------------------------------------------

    def _find_card(self, player_id: str, ref: CardRef) -> Optional[Card]:
        state = self.store.state
        card_id = ref if isinstance(ref, str) else ref.get("id")
        bid = state.bids.get(player_id)
        candidates = list(state.hand(player_id)) + (list(bid.cards) if bid else [])
        for card in candidates:
            if card.card_id == card_id:
                return card
        return None

    def _result(self, transition: Transition, perspective: Optional[str] = None) -> ActionResult:
        return ActionResult(
            accepted=transition.accepted,
            reason=transition.reason,
            view=self.get_view(perspective),
            winner_id=transition.winner_id,
        )

    def _rejected(self, reason: str, perspective: Optional[str] = None) -> ActionResult:
        logger.debug("Rejected before reaching the engine: %s", reason)
        return ActionResult(accepted=False, reason=reason, view=self.get_view(perspective))


class GameRegistry:
    """Game services keyed by game id."""

    def __init__(self, rules: RuleSet = DEFAULT_RULES, *, reveal_hands: bool = True) -> None:
        self.rules = rules
        self.reveal_hands = reveal_hands
        self._games: Dict[str, GameService] = {}

    def create(self, player_ids: Iterable[str]) -> str:
        game_id = uuid.uuid4().hex
        self._games[game_id] = GameService(list(player_ids), rules=self.rules, reveal_hands=self.reveal_hands)
        logger.info("Created game %s", game_id)
        return game_id

    def get(self, game_id: str) -> GameService:
        service = self._games.get(game_id)
        if service is None:
            raise GameNotFound(game_id)
        return service

    def discard(self, game_id: str) -> None:
        if self._games.pop(game_id, None) is None:
            raise GameNotFound(game_id)
        logger.info("Discarded game %s", game_id)

    def __len__(self) -> int:
        return len(self._games)
