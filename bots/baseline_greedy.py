"""Baseline greedy bot."""

from __future__ import annotations

from itertools import combinations
from typing import Optional, Sequence

from ninetynine.bidding import compute_bid_value
from ninetynine.cards import Card, Rank, card_strength
from ninetynine.declarations import DeclarationKind, best_declaration
from ninetynine.rules_schema import RuleSet
from ninetynine.state import GameState, playable_cards
from ninetynine.trick import winning_play

from .base import BotStrategy

HIGH_RANKS = {Rank.ACE, Rank.KING}
# Only the weakest cards are considered for the bid set-aside.
BID_CANDIDATES = 8


def estimate_tricks(cards: Sequence[Card]) -> int:
    return sum(1 for card in cards if card.rank in HIGH_RANKS)


def _wants_tricks(state: GameState, player_id: str) -> bool:
    bid = state.bids.get(player_id)
    if bid is None:
        return True
    return state.tricks_won[player_id] < bid.value


class GreedyBot(BotStrategy):
    name = "Greedy"

    def choose_bid(self, state: GameState, player_id: str, rules: RuleSet) -> Sequence[Card]:
        hand = sorted(state.hand(player_id), key=card_strength)
        if not hand:
            return []
        weights = rules.weight_table()
        weakest = hand[:BID_CANDIDATES]
        kept_strength = estimate_tricks(hand)
        best: Sequence[Card] = [weakest[0]]
        best_gap = abs(compute_bid_value(best, weights) - kept_strength)
        for size in range(1, min(rules.max_bid_cards, len(weakest)) + 1):
            for combo in combinations(weakest, size):
                gap = abs(compute_bid_value(combo, weights) - kept_strength)
                if gap < best_gap:
                    best, best_gap = list(combo), gap
        return best

    def choose_declaration(self, state: GameState, player_id: str) -> Optional[DeclarationKind]:
        bid = state.bids.get(player_id)
        if bid is None:
            return None
        return best_declaration(bid.cards)

    def play_card(self, state: GameState, player_id: str) -> Card:
        legal = sorted(playable_cards(state, player_id), key=card_strength)
        if not legal:
            raise RuntimeError("No legal plays available for bot.")
        wants = _wants_tricks(state, player_id)
        current = winning_play(state.trick)
        if current is None:
            return legal[-1] if wants else legal[0]

        to_beat = card_strength(current.card)
        winners = [card for card in legal if card_strength(card) > to_beat]
        losers = [card for card in legal if card_strength(card) <= to_beat]
        if wants and winners:
            return winners[0]
        if not wants and losers:
            return losers[-1]
        return legal[0]
