import pytest

from ninetynine.bidding import Bid
from ninetynine.declarations import Declaration, DeclarationKind
from ninetynine.scoring import ScoreLedger, settle_ledger

BONUSES = {DeclarationKind.FLUSH: 20, DeclarationKind.SEQUENCE: 30, DeclarationKind.MARRIAGE: 20}


def test_ledger_updates_are_additive_and_return_new_ledgers():
    ledger = ScoreLedger.for_players(["a", "b"])

    updated = ledger.credit_trick("a", 1).credit_trick("a", 1).credit("b", 5)

    assert ledger.snapshot() == {"a": 0, "b": 0}
    assert updated.score("a") == 2
    assert updated.score("b") == 5


def test_snapshot_is_a_copy():
    ledger = ScoreLedger.for_players(["a"]).credit("a", 3)

    snapshot = ledger.snapshot()
    snapshot["a"] = 100

    assert ledger.score("a") == 3


def test_negative_credit_is_refused():
    with pytest.raises(ValueError):
        ScoreLedger.for_players(["a"]).credit("a", -1)


def test_settlement_rewards_exact_contracts_and_declarations():
    ledger = ScoreLedger.for_players(["a", "b", "c"])
    bids = {"a": Bid("a", (), 2), "b": Bid("b", (), 1)}
    declarations = {"a": Declaration("a", DeclarationKind.SEQUENCE), "c": Declaration("c", DeclarationKind.FLUSH)}

    ledger, results = settle_ledger(
        ledger,
        player_ids=["a", "b", "c"],
        bids=bids,
        tricks_won={"a": 2, "b": 3, "c": 0},
        declarations=declarations,
        declaration_bonus=BONUSES,
        exact_contract_bonus=30,
    )

    assert ledger.snapshot() == {"a": 60, "b": 0, "c": 20}
    by_player = {entry.player_id: entry for entry in results}
    assert by_player["a"].contract_made
    assert not by_player["b"].contract_made
    assert by_player["c"].bid_value is None
    assert by_player["a"].points_added == 60


def test_failed_contract_penalty_scales_with_miss():
    ledger = ScoreLedger.for_players(["a"])

    ledger, results = settle_ledger(
        ledger,
        player_ids=["a"],
        bids={"a": Bid("a", (), 1)},
        tricks_won={"a": 4},
        declarations={},
        declaration_bonus=BONUSES,
        exact_contract_bonus=30,
        failed_contract_penalty=5,
    )

    assert ledger.score("a") == -15
    assert results[0].points_added == -15
