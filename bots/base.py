"""Common bot strategy interfaces."""

from __future__ import annotations

from typing import Optional, Sequence

from ninetynine.cards import Card
from ninetynine.declarations import DeclarationKind
from ninetynine.rules_schema import RuleSet
from ninetynine.state import GameState, playable_cards


class BotStrategy:
    """Base class for bot policies."""

    name: str = "BaseBot"

    def on_round_start(self, state: GameState, player_id: str) -> None:
        """Optional hook invoked after each deal."""
        return None

    def choose_bid(self, state: GameState, player_id: str, rules: RuleSet) -> Sequence[Card]:
        """Return the cards to set aside as a bid; an empty sequence skips bidding."""
        return list(state.hand(player_id)[: rules.max_bid_cards])

    def choose_declaration(self, state: GameState, player_id: str) -> Optional[DeclarationKind]:
        """Return a declaration kind, or None to stay silent."""
        return None

    def play_card(self, state: GameState, player_id: str) -> Card:
        legal = playable_cards(state, player_id)
        if not legal:
            raise RuntimeError("No legal plays available for bot.")
        return legal[0]
