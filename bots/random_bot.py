"""Random baseline bot."""

from __future__ import annotations

import random
from typing import Optional, Sequence

from ninetynine.cards import Card
from ninetynine.declarations import DeclarationKind
from ninetynine.rules_schema import RuleSet
from ninetynine.state import GameState, playable_cards

from .base import BotStrategy


class RandomBot(BotStrategy):
    name = "Random"

    def __init__(self, seed: Optional[int] = None, declare_probability: float = 0.2) -> None:
        self._rng = random.Random(seed)
        self.declare_probability = declare_probability

    def choose_bid(self, state: GameState, player_id: str, rules: RuleSet) -> Sequence[Card]:
        hand = list(state.hand(player_id))
        if not hand:
            return []
        size = self._rng.randint(1, min(rules.max_bid_cards, len(hand)))
        return self._rng.sample(hand, size)

    def choose_declaration(self, state: GameState, player_id: str) -> Optional[DeclarationKind]:
        if self._rng.random() >= self.declare_probability:
            return None
        return self._rng.choice(list(DeclarationKind))

    def play_card(self, state: GameState, player_id: str) -> Card:
        legal = list(playable_cards(state, player_id))
        if not legal:
            raise RuntimeError("No legal plays available for bot.")
        return self._rng.choice(legal)
