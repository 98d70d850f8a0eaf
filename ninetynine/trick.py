"""Trick representation and resolution."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import NamedTuple, Optional, Tuple

from .cards import Card, Suit, card_strength

logger = logging.getLogger(__name__)

NO_WINNER = -1


class TrickPhase(Enum):
    EMPTY = auto()
    IN_PROGRESS = auto()
    COMPLETE = auto()


class TrickPlay(NamedTuple):
    player_id: str
    card: Card


@dataclass(frozen=True)
class Trick:
    plays: Tuple[TrickPlay, ...] = ()

    def is_empty(self) -> bool:
        return not self.plays

    def led_suit(self) -> Optional[Suit]:
        return self.plays[0].card.suit if self.plays else None

    def has_played(self, player_id: str) -> bool:
        return any(play.player_id == player_id for play in self.plays)

    def phase(self, active_players: int) -> TrickPhase:
        if not self.plays:
            return TrickPhase.EMPTY
        if len(self.plays) >= active_players:
            return TrickPhase.COMPLETE
        return TrickPhase.IN_PROGRESS

    def cards(self) -> Tuple[Card, ...]:
        return tuple(play.card for play in self.plays)

    def __len__(self) -> int:
        return len(self.plays)


class PlayOutcome(NamedTuple):
    accepted: bool
    trick: Trick


def play_card(trick: Trick, card: Card, player_id: str) -> PlayOutcome:
    """Append a play unless it breaks the follow-suit rule.

    Only the suit of the card is checked against the leading suit. Whether the
    player could have followed suit is left to the caller.
    """
    led = trick.led_suit()
    if led is not None and card.suit is not led:
        logger.debug("Rejected %s from %s: %s led", card, player_id, led)
        return PlayOutcome(False, trick)
    return PlayOutcome(True, Trick(trick.plays + (TrickPlay(player_id, card),)))


def determine_winner(trick: Trick) -> int:
    """Return the play index of the highest leading-suit card.

    Off-suit plays never win. Equal strengths keep the earliest play, so a
    trick led with a joker is won by the first joker. An empty trick has no
    winner and yields ``NO_WINNER``.
    """
    if trick.is_empty():
        return NO_WINNER
    led = trick.led_suit()
    winner = 0
    best = card_strength(trick.plays[0].card)
    for index, play in enumerate(trick.plays[1:], start=1):
        if play.card.suit is not led:
            continue
        strength = card_strength(play.card)
        if strength > best:
            winner, best = index, strength
    return winner


def winning_play(trick: Trick) -> Optional[TrickPlay]:
    index = determine_winner(trick)
    if index == NO_WINNER:
        return None
    return trick.plays[index]


def clear_trick(trick: Trick) -> Trick:
    return Trick()
