import json

import pytest

from ninetynine.cards import joker
from ninetynine.codec import CodecError, dump_state, load_state, state_to_dict
from ninetynine.state import GameState, declare, new_game, play_card, resolve_trick, start_round, submit_bid


def mid_round_state():
    state = start_round(new_game(["a", "b", "c"]), seed=21).state
    state = submit_bid(state, "a", list(state.hands["a"][:2])).state
    state = declare(state, "a", "sequence").state
    leader_card = state.hands["b"][0]
    state = play_card(state, "b", leader_card).state
    state = resolve_trick(state).state
    return play_card(state, "c", state.hands["c"][0]).state


def test_mid_round_state_survives_the_wire():
    state = mid_round_state()

    restored = load_state(dump_state(state))

    assert restored == state
    assert [card.card_id for card in restored.all_cards()] == [card.card_id for card in state.all_cards()]
    assert restored.ledger.snapshot() == state.ledger.snapshot()


def test_dict_payload_is_plain_json():
    state = mid_round_state()

    payload = state_to_dict(state)

    assert json.loads(json.dumps(payload)) == payload
    assert payload["version"] == state.version
    assert payload["declarations"]["a"]["kind"] == "sequence"
    assert load_state(payload) == state


def test_jokers_keep_their_identity():
    card = joker("j1")
    state = GameState(player_ids=("a",), deck=(card,))

    restored = load_state(dump_state(state))

    assert restored.deck[0].card_id == "j1"
    assert restored.deck[0].is_joker()


@pytest.mark.parametrize(
    "payload",
    [
        "{not json",
        {"player_ids": ["a"], "deck": [{"id": "x", "rank": "eleven", "suit": "spades"}]},
        {"player_ids": ["a"], "deck": [{"id": "x", "rank": "ace", "suit": "joker"}]},
        {"player_ids": ["a"], "version": -1},
        {"player_ids": ["a", "a"]},
        {"player_ids": ["a"], "hands": {"ghost": [{"id": "x", "rank": "ace", "suit": "spades"}]}},
        {"player_ids": ["a"], "tricks_won": {"ghost": 1}},
        {"player_ids": ["a"], "trick": [{"player_id": "ghost", "card": {"id": "x", "rank": "ace", "suit": "spades"}}]},
        {
            "player_ids": ["a", "b"],
            "hands": {
                "a": [{"id": "x", "rank": "ace", "suit": "spades"}],
                "b": [{"id": "x", "rank": "ace", "suit": "spades"}],
            },
        },
        {
            "player_ids": ["a"],
            "deck": [{"id": "x", "rank": "two", "suit": "clubs"}],
            "discard": [{"id": "x", "rank": "two", "suit": "clubs"}],
        },
    ],
)
def test_bad_payloads_raise_codec_error(payload):
    with pytest.raises(CodecError):
        load_state(payload)


def test_card_moved_between_payload_containers_is_rejected():
    payload = state_to_dict(start_round(new_game(["a", "b"]), seed=6).state)
    payload["hands"]["b"].append(payload["hands"]["a"][0])

    with pytest.raises(CodecError):
        load_state(payload)
