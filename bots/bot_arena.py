"""Headless bot arena for Ninety-Nine."""

from __future__ import annotations

import argparse
import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ninetynine.log import configure_logging
from ninetynine.rules_schema import DEFAULT_RULES, RuleSet
from ninetynine.scoring import PlayerSettlement
from ninetynine.state import (
    GameState,
    declare,
    new_game,
    play_card,
    playable_cards,
    resolve_trick,
    settle_round,
    start_round,
    submit_bid,
)

from .base import BotStrategy
from .baseline_greedy import GreedyBot
from .random_bot import RandomBot

logger = logging.getLogger(__name__)

BOT_REGISTRY: Dict[str, type[BotStrategy]] = {
    "greedy": GreedyBot,
    "random": RandomBot,
}


def _rotation(player_ids: Sequence[str], leader: str) -> List[str]:
    start = player_ids.index(leader)
    return list(player_ids[start:]) + list(player_ids[:start])


def _collect_bids(state: GameState, bots: Dict[str, BotStrategy], rules: RuleSet) -> GameState:
    for player_id in state.player_ids:
        cards = bots[player_id].choose_bid(state, player_id, rules)
        if not cards:
            continue
        transition = submit_bid(state, player_id, cards, rules)
        if not transition:
            logger.warning("Bid from %s rejected: %s", player_id, transition.reason)
        state = transition.state
    return state


def _collect_declarations(state: GameState, bots: Dict[str, BotStrategy], rules: RuleSet) -> GameState:
    for player_id in state.player_ids:
        kind = bots[player_id].choose_declaration(state, player_id)
        if kind is None:
            continue
        transition = declare(state, player_id, kind, rules)
        if not transition:
            logger.debug("Declaration from %s rejected: %s", player_id, transition.reason)
        state = transition.state
    return state


def _next_leader(state: GameState, preferred: str) -> Optional[str]:
    for player_id in _rotation(state.player_ids, preferred):
        if state.hands[player_id]:
            return player_id
    return None


def _play_out(state: GameState, bots: Dict[str, BotStrategy], leader: str, rules: RuleSet) -> GameState:
    # Players who cannot follow the leading suit sit the trick out; the engine
    # itself never lets them discard off-suit.
    current = _next_leader(state, leader)
    while current is not None:
        for player_id in _rotation(state.player_ids, current):
            if not playable_cards(state, player_id):
                continue
            card = bots[player_id].play_card(state, player_id)
            transition = play_card(state, player_id, card, rules)
            if not transition:
                raise RuntimeError(f"Bot {player_id} made an illegal play: {transition.reason}")
            state = transition.state
        transition = resolve_trick(state, rules)
        state = transition.state
        if transition.winner_id is None:
            raise RuntimeError(f"Trick could not be resolved: {transition.reason}")
        current = _next_leader(state, transition.winner_id)
    return state


def play_round(
    state: GameState,
    bots: Dict[str, BotStrategy],
    *,
    seed: Optional[int] = None,
    rules: RuleSet = DEFAULT_RULES,
) -> Tuple[GameState, Tuple[PlayerSettlement, ...]]:
    state = start_round(state, seed=seed, rules=rules).state
    for player_id in state.player_ids:
        bots[player_id].on_round_start(state, player_id)
    state = _collect_bids(state, bots, rules)
    state = _collect_declarations(state, bots, rules)
    leader = state.player_ids[(state.round_number - 1) % state.active_players()]
    state = _play_out(state, bots, leader, rules)
    transition = settle_round(state, rules)
    return transition.state, transition.settlement


def run_match(
    bots: Sequence[BotStrategy],
    *,
    n_rounds: int = 5,
    seed: Optional[int] = None,
    rules: RuleSet = DEFAULT_RULES,
) -> dict:
    player_ids = [f"p{index}" for index in range(len(bots))]
    seats = dict(zip(player_ids, bots))
    state = new_game(player_ids)
    history = []
    for idx in range(n_rounds):
        round_seed = None if seed is None else seed + idx
        state, settlement = play_round(state, seats, seed=round_seed, rules=rules)
        history.append(
            {
                "scores": state.ledger.snapshot(),
                "contracts_made": [entry.player_id for entry in settlement if entry.contract_made],
                "tricks_won": dict(state.tricks_won),
            }
        )
    return {"scores": state.ledger.snapshot(), "history": history, "version": state.version}


def main(argv: Iterable[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Run a Ninety-Nine bot match.")
    parser.add_argument("--bots", nargs="+", default=["greedy", "random", "greedy"], choices=BOT_REGISTRY.keys())
    parser.add_argument("--n", type=int, default=5, help="Number of rounds to play.")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args(argv)

    configure_logging(args.log_level)
    bots = [BOT_REGISTRY[name]() for name in args.bots]
    results = run_match(bots, n_rounds=args.n, seed=args.seed)

    print(f"Scores after {args.n} rounds: {results['scores']}")
    made = sum(len(entry["contracts_made"]) for entry in results["history"])
    print(f"Contracts made: {made}/{args.n * len(bots)}")


if __name__ == "__main__":
    main()
