"""Card-related data structures and helpers for Ninety-Nine."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterable, Mapping, Optional


class Suit(Enum):
    SPADES = auto()
    HEARTS = auto()
    CLUBS = auto()
    DIAMONDS = auto()
    JOKER = auto()

    def __str__(self) -> str:
        return self.name.lower()


class Rank(Enum):
    TWO = auto()
    THREE = auto()
    FOUR = auto()
    FIVE = auto()
    SIX = auto()
    SEVEN = auto()
    EIGHT = auto()
    NINE = auto()
    TEN = auto()
    JACK = auto()
    QUEEN = auto()
    KING = auto()
    ACE = auto()
    JOKER = auto()

    def __str__(self) -> str:
        return self.name.lower()


# Suits that make up the standard deck; JOKER is never dealt from it.
STANDARD_SUITS: list[Suit] = [Suit.SPADES, Suit.HEARTS, Suit.CLUBS, Suit.DIAMONDS]

# Rank order from lowest to highest for trick resolution. Jokers are unranked.
RANK_ORDER: list[Rank] = [
    Rank.TWO,
    Rank.THREE,
    Rank.FOUR,
    Rank.FIVE,
    Rank.SIX,
    Rank.SEVEN,
    Rank.EIGHT,
    Rank.NINE,
    Rank.TEN,
    Rank.JACK,
    Rank.QUEEN,
    Rank.KING,
    Rank.ACE,
]

RANK_STRENGTH: dict[Rank, int] = {rank: index for index, rank in enumerate(RANK_ORDER)}

RANK_SYMBOLS: dict[Rank, str] = {
    Rank.TWO: "2",
    Rank.THREE: "3",
    Rank.FOUR: "4",
    Rank.FIVE: "5",
    Rank.SIX: "6",
    Rank.SEVEN: "7",
    Rank.EIGHT: "8",
    Rank.NINE: "9",
    Rank.TEN: "10",
    Rank.JACK: "J",
    Rank.QUEEN: "Q",
    Rank.KING: "K",
    Rank.ACE: "A",
    Rank.JOKER: "*",
}

SUIT_SYMBOLS: dict[Suit, str] = {
    Suit.SPADES: "♠",
    Suit.HEARTS: "♥",
    Suit.CLUBS: "♣",
    Suit.DIAMONDS: "♦",
    Suit.JOKER: "★",
}

# Number of tricks each bid card commits to, keyed by its suit.
SUIT_BID_WEIGHTS: dict[Suit, int] = {
    Suit.CLUBS: 3,
    Suit.HEARTS: 2,
    Suit.SPADES: 1,
    Suit.DIAMONDS: 0,
    Suit.JOKER: 0,
}


def new_card_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Card:
    """Immutable playing card.

    Identity is carried by ``card_id`` so that two cards with the same rank
    and suit (jokers, duplicate decks) stay distinguishable.
    """

    rank: Rank = field(compare=False)
    suit: Suit = field(compare=False)
    card_id: str = field(default_factory=new_card_id)

    def __post_init__(self) -> None:
        if (self.rank is Rank.JOKER) != (self.suit is Suit.JOKER):
            raise ValueError("Jokers must have both JOKER rank and JOKER suit.")

    def is_joker(self) -> bool:
        return self.suit is Suit.JOKER

    def __str__(self) -> str:
        return f"{RANK_SYMBOLS[self.rank]}{SUIT_SYMBOLS[self.suit]}"


def joker(card_id: Optional[str] = None) -> Card:
    if card_id is None:
        return Card(Rank.JOKER, Suit.JOKER)
    return Card(Rank.JOKER, Suit.JOKER, card_id)


def card_strength(card: Card) -> int:
    """Return an integer strength used for ordering cards within a suit.

    Jokers sit below every ranked card so they never outrank a suited card.
    """
    return RANK_STRENGTH.get(card.rank, -1)


def bid_weight(card: Card, weights: Optional[Mapping[Suit, int]] = None) -> int:
    table = SUIT_BID_WEIGHTS if weights is None else weights
    return table.get(card.suit, 0)


def cards_by_suit(cards: Iterable[Card], suit: Suit) -> list[Card]:
    return [card for card in cards if card.suit is suit]


def serialize_card(card: Card) -> dict[str, str]:
    return {"id": card.card_id, "rank": card.rank.name.lower(), "suit": card.suit.name.lower()}


def deserialize_card(payload: Mapping[str, str]) -> Card:
    rank_name = payload["rank"].upper()
    suit_name = payload["suit"].upper()
    return Card(Rank[rank_name], Suit[suit_name], payload["id"])


def card_label(card: Card) -> str:
    if card.is_joker():
        return "Joker"
    return f"{card.rank.name.title()} of {card.suit.name.title()}"
