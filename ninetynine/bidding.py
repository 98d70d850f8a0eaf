"""Bid selection and valuation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Sequence, Tuple

from .cards import Card, SUIT_BID_WEIGHTS, Suit, bid_weight

logger = logging.getLogger(__name__)

DEFAULT_MAX_BID_CARDS = 3


def compute_bid_value(selection: Iterable[Card], weights: Optional[Mapping[Suit, int]] = None) -> int:
    """Sum the suit weights of the selected cards (0 for an empty selection)."""
    return sum(bid_weight(card, weights) for card in selection)


def select_bid_card(
    hand: Sequence[Card],
    card: Card,
    selection: Sequence[Card],
    max_bid_cards: int = DEFAULT_MAX_BID_CARDS,
) -> Tuple[Card, ...]:
    """Toggle ``card`` in the bid selection.

    Selecting past ``max_bid_cards`` or selecting a card that is not in the
    hand leaves the selection as it was.
    """
    current = tuple(selection)
    if card in current:
        return tuple(c for c in current if c != card)
    if card not in hand:
        logger.debug("Ignoring bid selection of %s: not in hand", card)
        return current
    if len(current) >= max_bid_cards:
        logger.debug("Ignoring bid selection of %s: already %d cards", card, len(current))
        return current
    return current + (card,)


@dataclass(frozen=True)
class Bid:
    player_id: str
    cards: Tuple[Card, ...]
    value: int

    def has_cards(self) -> bool:
        return bool(self.cards)


def make_bid(
    player_id: str,
    selection: Sequence[Card],
    max_bid_cards: int = DEFAULT_MAX_BID_CARDS,
    weights: Optional[Mapping[Suit, int]] = None,
) -> Optional[Bid]:
    """Build a bid from a selection, or return None if it cannot be placed."""
    cards = tuple(selection)
    if not cards:
        return None
    if len(cards) > max_bid_cards or len(set(cards)) != len(cards):
        return None
    return Bid(player_id=player_id, cards=cards, value=compute_bid_value(cards, weights or SUIT_BID_WEIGHTS))
