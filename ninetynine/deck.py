"""Deck creation, shuffling and dealing for Ninety-Nine."""

from __future__ import annotations

import logging
from random import Random
from typing import List, Optional, Sequence, Tuple

from .cards import Card, RANK_ORDER, STANDARD_SUITS
from .errors import NinetyNineError

logger = logging.getLogger(__name__)

DECK_SIZE = 52


class DealError(NinetyNineError, ValueError):
    """Raised when a deal is requested for an impossible table size."""


def build_deck() -> List[Card]:
    """Return the ordered 52-card deck, each card with a fresh id."""
    return [Card(rank, suit) for suit in STANDARD_SUITS for rank in RANK_ORDER]


def shuffle(deck: Sequence[Card], rng: Optional[Random] = None) -> List[Card]:
    """Return a Fisher-Yates permutation of ``deck``; the input is left as is."""
    if rng is None:
        rng = Random()
    cards = list(deck)
    for i in range(len(cards) - 1, 0, -1):
        j = rng.randint(0, i)
        cards[i], cards[j] = cards[j], cards[i]
    return cards


def deal(deck: Sequence[Card], num_players: int) -> Tuple[List[List[Card]], List[Card]]:
    """Split the deck into ``num_players`` equal contiguous hands.

    Each hand holds ``len(deck) // num_players`` cards. The remainder is not
    dealt and comes back as the second element.
    """
    if num_players < 1:
        raise DealError(f"Cannot deal to {num_players} players.")
    cards = list(deck)
    hand_size = len(cards) // num_players
    hands = [cards[i * hand_size : (i + 1) * hand_size] for i in range(num_players)]
    undealt = cards[num_players * hand_size :]
    logger.debug("Dealt %d hands of %d cards, %d undealt", num_players, hand_size, len(undealt))
    return hands, undealt
