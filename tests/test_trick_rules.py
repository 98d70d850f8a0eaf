from ninetynine.cards import Card, Rank, Suit, joker
from ninetynine.trick import (
    NO_WINNER,
    Trick,
    TrickPhase,
    TrickPlay,
    clear_trick,
    determine_winner,
    play_card,
    winning_play,
)


def test_leader_may_play_any_suit():
    outcome = play_card(Trick(), Card(Rank.TWO, Suit.HEARTS), "p0")

    assert outcome.accepted
    assert outcome.trick.led_suit() is Suit.HEARTS
    assert len(outcome.trick) == 1


def test_off_suit_play_is_rejected_and_trick_unchanged():
    trick = play_card(Trick(), Card(Rank.TEN, Suit.SPADES), "p0").trick

    outcome = play_card(trick, Card(Rank.ACE, Suit.HEARTS), "p1")

    assert not outcome.accepted
    assert outcome.trick is trick
    assert len(trick) == 1


def test_following_suit_appends_in_play_order():
    trick = play_card(Trick(), Card(Rank.TEN, Suit.SPADES), "p0").trick
    trick = play_card(trick, Card(Rank.TWO, Suit.SPADES), "p1").trick

    assert [play.player_id for play in trick.plays] == ["p0", "p1"]


def test_highest_leading_suit_card_wins_and_off_suit_is_ignored():
    trick = Trick(
        (
            TrickPlay("p0", Card(Rank.ACE, Suit.SPADES)),
            TrickPlay("p1", Card(Rank.KING, Suit.SPADES)),
            TrickPlay("p2", Card(Rank.TWO, Suit.HEARTS)),
        )
    )

    assert determine_winner(trick) == 0


def test_later_higher_card_takes_the_trick():
    trick = Trick(
        (
            TrickPlay("p0", Card(Rank.NINE, Suit.CLUBS)),
            TrickPlay("p1", Card(Rank.ACE, Suit.DIAMONDS)),
            TrickPlay("p2", Card(Rank.JACK, Suit.CLUBS)),
        )
    )

    assert determine_winner(trick) == 2
    assert winning_play(trick).player_id == "p2"


def test_duplicate_rank_keeps_first_play():
    trick = Trick(
        (
            TrickPlay("p0", Card(Rank.FIVE, Suit.CLUBS)),
            TrickPlay("p1", Card(Rank.ACE, Suit.CLUBS)),
            TrickPlay("p2", Card(Rank.ACE, Suit.CLUBS)),
        )
    )

    assert determine_winner(trick) == 1


def test_jokers_only_compete_when_joker_led():
    trick = play_card(Trick(), joker(), "p0").trick

    assert not play_card(trick, Card(Rank.ACE, Suit.SPADES), "p1").accepted
    trick = play_card(trick, joker(), "p1").trick
    assert determine_winner(trick) == 0


def test_empty_trick_has_no_winner():
    assert determine_winner(Trick()) == NO_WINNER
    assert winning_play(Trick()) is None


def test_trick_phases_and_clear():
    trick = Trick()
    assert trick.phase(2) is TrickPhase.EMPTY

    trick = play_card(trick, Card(Rank.TWO, Suit.SPADES), "p0").trick
    assert trick.phase(2) is TrickPhase.IN_PROGRESS

    trick = play_card(trick, Card(Rank.THREE, Suit.SPADES), "p1").trick
    assert trick.phase(2) is TrickPhase.COMPLETE

    assert clear_trick(trick).is_empty()
