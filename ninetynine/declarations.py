"""Special-hand declarations made after bidding."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Union

from .bidding import Bid
from .cards import Card, RANK_STRENGTH, Rank, STANDARD_SUITS, cards_by_suit


class DeclarationKind(Enum):
    FLUSH = "flush"
    SEQUENCE = "sequence"
    MARRIAGE = "marriage"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Declaration:
    player_id: str
    kind: DeclarationKind


def parse_declaration_kind(value: Union[str, DeclarationKind, None]) -> Optional[DeclarationKind]:
    """Map boundary input onto the closed set of kinds, or None if it is not one."""
    if isinstance(value, DeclarationKind):
        return value
    if not isinstance(value, str):
        return None
    normalized = value.strip().lower()
    for kind in DeclarationKind:
        if kind.value == normalized:
            return kind
    return None


def can_declare(bid: Optional[Bid], already_declared: bool) -> bool:
    return bid is not None and bid.has_cards() and not already_declared


def make_declaration(player_id: str, kind: Union[str, DeclarationKind, None]) -> Optional[Declaration]:
    parsed = parse_declaration_kind(kind)
    if parsed is None:
        return None
    return Declaration(player_id=player_id, kind=parsed)


def is_flush(cards: Iterable[Card]) -> bool:
    cards = list(cards)
    if len(cards) < 2:
        return False
    return len({card.suit for card in cards}) == 1 and not cards[0].is_joker()


def is_sequence(cards: Iterable[Card]) -> bool:
    """True if three consecutive ranks of one suit are present."""
    cards = list(cards)
    for suit in STANDARD_SUITS:
        strengths = sorted({RANK_STRENGTH[card.rank] for card in cards_by_suit(cards, suit)})
        for low in strengths:
            if low + 1 in strengths and low + 2 in strengths:
                return True
    return False


def is_marriage(cards: Iterable[Card]) -> bool:
    cards = list(cards)
    for suit in STANDARD_SUITS:
        ranks = {card.rank for card in cards_by_suit(cards, suit)}
        if Rank.KING in ranks and Rank.QUEEN in ranks:
            return True
    return False


_CHECKS = {
    DeclarationKind.FLUSH: is_flush,
    DeclarationKind.SEQUENCE: is_sequence,
    DeclarationKind.MARRIAGE: is_marriage,
}


def hand_supports(kind: DeclarationKind, cards: Iterable[Card]) -> bool:
    return _CHECKS[kind](cards)


def best_declaration(cards: Iterable[Card]) -> Optional[DeclarationKind]:
    """Return the first kind the cards support, checking sequence, flush, marriage."""
    cards = list(cards)
    for kind in (DeclarationKind.SEQUENCE, DeclarationKind.FLUSH, DeclarationKind.MARRIAGE):
        if hand_supports(kind, cards):
            return kind
    return None
