from ninetynine.bidding import compute_bid_value, make_bid, select_bid_card
from ninetynine.cards import Card, Rank, Suit, joker


def sample_hand():
    return [
        Card(Rank.THREE, Suit.CLUBS),
        Card(Rank.FIVE, Suit.HEARTS),
        Card(Rank.KING, Suit.SPADES),
        Card(Rank.TWO, Suit.DIAMONDS),
        Card(Rank.ACE, Suit.CLUBS),
    ]


def test_bid_value_uses_suit_weights():
    hand = sample_hand()

    assert compute_bid_value([hand[0], hand[1]]) == 5
    assert compute_bid_value([hand[2], hand[3]]) == 1
    assert compute_bid_value([joker()]) == 0
    assert compute_bid_value([]) == 0


def test_selection_toggles_membership():
    hand = sample_hand()

    selection = select_bid_card(hand, hand[0], ())
    assert selection == (hand[0],)

    selection = select_bid_card(hand, hand[0], selection)
    assert selection == ()


def test_fourth_card_is_silently_ignored():
    hand = sample_hand()
    selection = ()
    for card in hand[:3]:
        selection = select_bid_card(hand, card, selection, max_bid_cards=3)

    capped = select_bid_card(hand, hand[3], selection, max_bid_cards=3)

    assert capped == selection
    assert len(capped) == 3


def test_card_outside_hand_is_not_selected():
    hand = sample_hand()

    assert select_bid_card(hand, Card(Rank.ACE, Suit.HEARTS), ()) == ()


def test_make_bid_rejects_empty_and_oversized_selections():
    hand = sample_hand()

    assert make_bid("p0", []) is None
    assert make_bid("p0", hand[:4], max_bid_cards=3) is None

    bid = make_bid("p0", hand[:2])
    assert bid is not None
    assert bid.value == 5
    assert bid.cards == tuple(hand[:2])
