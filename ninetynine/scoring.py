"""Score ledger and round settlement for Ninety-Nine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping, Optional, Tuple

from .bidding import Bid
from .declarations import Declaration, DeclarationKind


@dataclass(frozen=True)
class ScoreLedger:
    """Accumulated points per player. Updates return a new ledger."""

    _scores: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def for_players(cls, player_ids: Iterable[str]) -> "ScoreLedger":
        return cls({player_id: 0 for player_id in player_ids})

    def score(self, player_id: str) -> int:
        return self._scores.get(player_id, 0)

    def credit(self, player_id: str, amount: int) -> "ScoreLedger":
        if amount < 0:
            raise ValueError("Credits must not be negative.")
        scores = dict(self._scores)
        scores[player_id] = scores.get(player_id, 0) + amount
        return ScoreLedger(scores)

    def credit_trick(self, player_id: str, points: int) -> "ScoreLedger":
        return self.credit(player_id, points)

    def credit_declaration(
        self,
        player_id: str,
        kind: DeclarationKind,
        bonuses: Mapping[DeclarationKind, int],
    ) -> "ScoreLedger":
        return self.credit(player_id, bonuses.get(kind, 0))

    def apply_penalty(self, player_id: str, points: int) -> "ScoreLedger":
        if points < 0:
            raise ValueError("Penalty must not be negative.")
        scores = dict(self._scores)
        scores[player_id] = scores.get(player_id, 0) - points
        return ScoreLedger(scores)

    def snapshot(self) -> Dict[str, int]:
        return dict(self._scores)


@dataclass(frozen=True)
class PlayerSettlement:
    player_id: str
    bid_value: Optional[int]
    tricks_won: int
    contract_made: bool
    points_added: int


def settle_ledger(
    ledger: ScoreLedger,
    *,
    player_ids: Iterable[str],
    bids: Mapping[str, Bid],
    tricks_won: Mapping[str, int],
    declarations: Mapping[str, Declaration],
    declaration_bonus: Mapping[DeclarationKind, int],
    exact_contract_bonus: int,
    failed_contract_penalty: int = 0,
) -> Tuple[ScoreLedger, Tuple[PlayerSettlement, ...]]:
    """Apply end-of-round bonuses to the ledger.

    A player without a bid has no contract to make or miss. Declaration
    bonuses are credited regardless of the contract outcome.
    """
    results = []
    for player_id in player_ids:
        before = ledger.score(player_id)
        declaration = declarations.get(player_id)
        if declaration is not None:
            ledger = ledger.credit_declaration(player_id, declaration.kind, declaration_bonus)

        bid = bids.get(player_id)
        won = tricks_won.get(player_id, 0)
        made = False
        if bid is not None:
            made = won == bid.value
            if made:
                ledger = ledger.credit(player_id, exact_contract_bonus)
            elif failed_contract_penalty:
                ledger = ledger.apply_penalty(player_id, failed_contract_penalty * abs(won - bid.value))

        results.append(
            PlayerSettlement(
                player_id=player_id,
                bid_value=bid.value if bid is not None else None,
                tricks_won=won,
                contract_made=made,
                points_added=ledger.score(player_id) - before,
            )
        )
    return ledger, tuple(results)
