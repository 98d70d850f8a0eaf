"""Game state aggregate and its single transition function.

Every intent is a command value. ``apply_command`` is the one place where a
``GameState`` turns into the next one; the typed helpers below it only build
commands. States are immutable, so a caller can keep the previous value
around (for instance as the optimistic copy handed to the conflict resolver).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from random import Random
from types import MappingProxyType
from typing import Callable, Dict, Iterable, Mapping, Optional, Sequence, Tuple, Union

from .bidding import Bid, make_bid
from .cards import Card
from .deck import build_deck, deal, shuffle
from .declarations import (
    Declaration,
    DeclarationKind,
    can_declare as _can_declare,
    hand_supports,
    make_declaration,
)
from .errors import UnknownPlayer
from .rules_schema import DEFAULT_RULES, RuleSet
from .scoring import PlayerSettlement, ScoreLedger, settle_ledger
from .trick import Trick, TrickPhase, determine_winner, play_card as _trick_play

logger = logging.getLogger(__name__)


def _frozen(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class GameState:
    player_ids: Tuple[str, ...]
    deck: Tuple[Card, ...] = ()
    hands: Mapping[str, Tuple[Card, ...]] = field(default_factory=dict)
    trick: Trick = field(default_factory=Trick)
    bids: Mapping[str, Bid] = field(default_factory=dict)
    declarations: Mapping[str, Declaration] = field(default_factory=dict)
    won_cards: Mapping[str, Tuple[Card, ...]] = field(default_factory=dict)
    tricks_won: Mapping[str, int] = field(default_factory=dict)
    discard: Tuple[Card, ...] = ()
    ledger: ScoreLedger = field(default_factory=ScoreLedger)
    round_number: int = 0
    round_settled: bool = False
    version: int = 0

    def __post_init__(self) -> None:
        # Normalise containers so no caller keeps a handle on mutable internals.
        object.__setattr__(self, "player_ids", tuple(self.player_ids))
        object.__setattr__(self, "deck", tuple(self.deck))
        object.__setattr__(self, "discard", tuple(self.discard))
        object.__setattr__(
            self, "hands", _frozen({pid: tuple(self.hands.get(pid, ())) for pid in self.player_ids})
        )
        object.__setattr__(
            self, "won_cards", _frozen({pid: tuple(self.won_cards.get(pid, ())) for pid in self.player_ids})
        )
        object.__setattr__(
            self, "tricks_won", _frozen({pid: int(self.tricks_won.get(pid, 0)) for pid in self.player_ids})
        )
        object.__setattr__(self, "bids", _frozen(self.bids))
        object.__setattr__(self, "declarations", _frozen(self.declarations))

    def active_players(self) -> int:
        return len(self.player_ids)

    def hand(self, player_id: str) -> Tuple[Card, ...]:
        self.require_player(player_id)
        return self.hands[player_id]

    def require_player(self, player_id: str) -> None:
        if player_id not in self.player_ids:
            raise UnknownPlayer(player_id)

    def has_declared(self, player_id: str) -> bool:
        return player_id in self.declarations

    def trick_phase(self) -> TrickPhase:
        return self.trick.phase(self.active_players())

    def all_cards(self) -> Tuple[Card, ...]:
        """Every card the aggregate tracks, across all containers."""
        cards = list(self.deck)
        for player_id in self.player_ids:
            cards.extend(self.hands[player_id])
            cards.extend(self.won_cards[player_id])
        for bid in self.bids.values():
            cards.extend(bid.cards)
        cards.extend(self.trick.cards())
        cards.extend(self.discard)
        return tuple(cards)


def new_game(player_ids: Iterable[str]) -> GameState:
    ids = tuple(player_ids)
    if not ids:
        raise ValueError("A game needs at least one player.")
    if len(set(ids)) != len(ids) or not all(ids):
        raise ValueError("Player ids must be unique and non-empty.")
    return GameState(player_ids=ids, ledger=ScoreLedger.for_players(ids))


# Commands ---------------------------------------------------------------


@dataclass(frozen=True)
class StartRound:
    seed: Optional[int] = None
    deck: Optional[Tuple[Card, ...]] = None


@dataclass(frozen=True)
class PlayCard:
    player_id: str
    card: Card


@dataclass(frozen=True)
class SubmitBid:
    player_id: str
    cards: Tuple[Card, ...]


@dataclass(frozen=True)
class Declare:
    player_id: str
    kind: Union[DeclarationKind, str]


@dataclass(frozen=True)
class ResolveTrick:
    pass


@dataclass(frozen=True)
class ClearTrick:
    pass


@dataclass(frozen=True)
class SettleRound:
    pass


Command = Union[StartRound, PlayCard, SubmitBid, Declare, ResolveTrick, ClearTrick, SettleRound]


@dataclass(frozen=True)
class Transition:
    """Result of applying a command.

    A rejected command carries the unchanged input state and a reason.
    """

    state: GameState
    accepted: bool
    reason: Optional[str] = None
    winner_id: Optional[str] = None
    bid: Optional[Bid] = None
    declaration: Optional[Declaration] = None
    settlement: Tuple[PlayerSettlement, ...] = ()

    def __bool__(self) -> bool:
        return self.accepted


def _reject(state: GameState, reason: str) -> Transition:
    logger.debug("Rejected at version %d: %s", state.version, reason)
    return Transition(state=state, accepted=False, reason=reason)


def _advance(state: GameState, **changes) -> GameState:
    return replace(state, version=state.version + 1, **changes)


# Handlers ---------------------------------------------------------------


def _start_round(state: GameState, command: StartRound, rules: RuleSet) -> Transition:
    if command.deck is not None:
        cards = list(command.deck)
    else:
        cards = shuffle(build_deck(), Random(command.seed))
    hands, undealt = deal(cards, state.active_players())
    new_state = _advance(
        state,
        deck=tuple(undealt),
        hands={pid: tuple(hand) for pid, hand in zip(state.player_ids, hands)},
        trick=Trick(),
        bids={},
        declarations={},
        won_cards={},
        tricks_won={},
        discard=(),
        round_number=state.round_number + 1,
        round_settled=False,
    )
    logger.info("Round %d dealt to %d players", new_state.round_number, state.active_players())
    return Transition(state=new_state, accepted=True)


def _play_card(state: GameState, command: PlayCard, rules: RuleSet) -> Transition:
    player_id, card = command.player_id, command.card
    state.require_player(player_id)
    hand = state.hands[player_id]
    if card not in hand:
        bid = state.bids.get(player_id)
        if bid is not None and card in bid.cards:
            return _reject(state, "Card is set aside for a bid.")
        return _reject(state, "Card is not in hand.")
    if state.trick_phase() is TrickPhase.COMPLETE:
        return _reject(state, "Trick is already complete.")
    if state.trick.has_played(player_id):
        return _reject(state, "Player already played in this trick.")

    outcome = _trick_play(state.trick, card, player_id)
    if not outcome.accepted:
        return _reject(state, f"Must follow {state.trick.led_suit()}.")

    hands = dict(state.hands)
    hands[player_id] = tuple(c for c in hand if c != card)
    return Transition(state=_advance(state, hands=hands, trick=outcome.trick), accepted=True)


def _submit_bid(state: GameState, command: SubmitBid, rules: RuleSet) -> Transition:
    player_id = command.player_id
    state.require_player(player_id)
    bid = make_bid(player_id, command.cards, rules.max_bid_cards, rules.weight_table())
    if bid is None:
        return _reject(state, f"Bid must hold between 1 and {rules.max_bid_cards} distinct cards.")

    # A replaced bid hands its cards back before the new selection is taken.
    previous = state.bids.get(player_id)
    available = list(state.hands[player_id])
    if previous is not None:
        available.extend(previous.cards)
    if any(card not in available for card in bid.cards):
        return _reject(state, "Bid cards must come from the player's hand.")

    hands = dict(state.hands)
    hands[player_id] = tuple(card for card in available if card not in bid.cards)
    bids = dict(state.bids)
    bids[player_id] = bid
    logger.debug("Player %s bids %d with %d cards", player_id, bid.value, len(bid.cards))
    return Transition(state=_advance(state, hands=hands, bids=bids), accepted=True, bid=bid)


def _declare(state: GameState, command: Declare, rules: RuleSet) -> Transition:
    player_id = command.player_id
    state.require_player(player_id)
    declaration = make_declaration(player_id, command.kind)
    if declaration is None:
        return _reject(state, f"Unknown declaration {command.kind!r}.")
    bid = state.bids.get(player_id)
    if not _can_declare(bid, state.has_declared(player_id)):
        return _reject(state, "Player cannot declare this round.")
    # Proof is checked against the cards set aside for the bid.
    if rules.require_declaration_proof and not hand_supports(declaration.kind, bid.cards):
        return _reject(state, f"Bid cards do not support a {declaration.kind} declaration.")

    declarations = dict(state.declarations)
    declarations[player_id] = declaration
    logger.debug("Player %s declares %s", player_id, declaration.kind)
    return Transition(
        state=_advance(state, declarations=declarations), accepted=True, declaration=declaration
    )


def _resolve_trick(state: GameState, command: ResolveTrick, rules: RuleSet) -> Transition:
    trick = state.trick
    index = determine_winner(trick)
    if index < 0:
        return _reject(state, "No cards in the trick.")
    winner_id = trick.plays[index].player_id

    won_cards = dict(state.won_cards)
    won_cards[winner_id] = won_cards[winner_id] + trick.cards()
    tricks_won = dict(state.tricks_won)
    tricks_won[winner_id] += 1
    new_state = _advance(
        state,
        trick=Trick(),
        won_cards=won_cards,
        tricks_won=tricks_won,
        ledger=state.ledger.credit_trick(winner_id, rules.points_per_trick),
    )
    logger.debug("Trick won by %s with %s", winner_id, trick.plays[index].card)
    return Transition(state=new_state, accepted=True, winner_id=winner_id)


def _clear_trick(state: GameState, command: ClearTrick, rules: RuleSet) -> Transition:
    if state.trick.is_empty():
        return _reject(state, "Trick is already empty.")
    new_state = _advance(state, trick=Trick(), discard=state.discard + state.trick.cards())
    return Transition(state=new_state, accepted=True)


def _settle_round(state: GameState, command: SettleRound, rules: RuleSet) -> Transition:
    if state.round_settled:
        return _reject(state, "Round already settled.")
    ledger, results = settle_ledger(
        state.ledger,
        player_ids=state.player_ids,
        bids=state.bids,
        tricks_won=state.tricks_won,
        declarations=state.declarations,
        declaration_bonus=rules.bonus_table(),
        exact_contract_bonus=rules.exact_contract_bonus,
        failed_contract_penalty=rules.failed_contract_penalty,
    )
    new_state = _advance(state, ledger=ledger, round_settled=True)
    logger.info("Round %d settled: %s", state.round_number, ledger.snapshot())
    return Transition(state=new_state, accepted=True, settlement=results)


_HANDLERS: Dict[type, Callable[[GameState, object, RuleSet], Transition]] = {
    StartRound: _start_round,
    PlayCard: _play_card,
    SubmitBid: _submit_bid,
    Declare: _declare,
    ResolveTrick: _resolve_trick,
    ClearTrick: _clear_trick,
    SettleRound: _settle_round,
}


def apply_command(state: GameState, command: Command, rules: RuleSet = DEFAULT_RULES) -> Transition:
    """Apply one command; accepted commands bump ``version`` by exactly one."""
    handler = _HANDLERS.get(type(command))
    if handler is None:
        raise TypeError(f"Unsupported command {command!r}.")
    return handler(state, command, rules)


# Typed intents ----------------------------------------------------------


def start_round(
    state: GameState,
    *,
    seed: Optional[int] = None,
    deck: Optional[Sequence[Card]] = None,
    rules: RuleSet = DEFAULT_RULES,
) -> Transition:
    return apply_command(state, StartRound(seed=seed, deck=tuple(deck) if deck is not None else None), rules)


def play_card(state: GameState, player_id: str, card: Card, rules: RuleSet = DEFAULT_RULES) -> Transition:
    return apply_command(state, PlayCard(player_id, card), rules)


def submit_bid(
    state: GameState, player_id: str, cards: Sequence[Card], rules: RuleSet = DEFAULT_RULES
) -> Transition:
    return apply_command(state, SubmitBid(player_id, tuple(cards)), rules)


def declare(
    state: GameState, player_id: str, kind: Union[DeclarationKind, str], rules: RuleSet = DEFAULT_RULES
) -> Transition:
    return apply_command(state, Declare(player_id, kind), rules)


def resolve_trick(state: GameState, rules: RuleSet = DEFAULT_RULES) -> Transition:
    return apply_command(state, ResolveTrick(), rules)


def clear_trick(state: GameState, rules: RuleSet = DEFAULT_RULES) -> Transition:
    return apply_command(state, ClearTrick(), rules)


def settle_round(state: GameState, rules: RuleSet = DEFAULT_RULES) -> Transition:
    return apply_command(state, SettleRound(), rules)


# Queries ----------------------------------------------------------------


def can_declare(state: GameState, player_id: str) -> bool:
    state.require_player(player_id)
    return _can_declare(state.bids.get(player_id), state.has_declared(player_id))


def playable_cards(state: GameState, player_id: str) -> Tuple[Card, ...]:
    """Hand cards the trick engine would accept from this player right now."""
    hand = state.hand(player_id)
    if state.trick_phase() is TrickPhase.COMPLETE or state.trick.has_played(player_id):
        return ()
    led = state.trick.led_suit()
    if led is None:
        return hand
    return tuple(card for card in hand if card.suit is led)
