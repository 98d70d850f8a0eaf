"""Wire format for game states exchanged with remote peers."""

from __future__ import annotations

from typing import Any, Mapping, Union

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .bidding import Bid
from .cards import Card, Rank, Suit
from .declarations import Declaration, DeclarationKind
from .errors import NinetyNineError
from .scoring import ScoreLedger
from .state import GameState
from .trick import Trick, TrickPlay


class CodecError(NinetyNineError, ValueError):
    """Raised when a payload cannot be turned back into a game state."""


class CardModel(BaseModel):
    id: str = Field(min_length=1)
    rank: str
    suit: str

    @field_validator("rank")
    @classmethod
    def validate_rank(cls, value: str) -> str:
        if value.upper() not in Rank.__members__:
            raise ValueError(f"Unknown rank: {value!r}")
        return value.lower()

    @field_validator("suit")
    @classmethod
    def validate_suit(cls, value: str) -> str:
        if value.upper() not in Suit.__members__:
            raise ValueError(f"Unknown suit: {value!r}")
        return value.lower()

    @classmethod
    def from_card(cls, card: Card) -> "CardModel":
        return cls(id=card.card_id, rank=card.rank.name.lower(), suit=card.suit.name.lower())

    def to_card(self) -> Card:
        return Card(Rank[self.rank.upper()], Suit[self.suit.upper()], self.id)


class PlayModel(BaseModel):
    player_id: str
    card: CardModel


class BidModel(BaseModel):
    player_id: str
    cards: list[CardModel]
    value: int = Field(ge=0)


class DeclarationModel(BaseModel):
    player_id: str
    kind: DeclarationKind


class GameStateModel(BaseModel):
    player_ids: list[str]
    deck: list[CardModel] = Field(default_factory=list)
    hands: dict[str, list[CardModel]] = Field(default_factory=dict)
    trick: list[PlayModel] = Field(default_factory=list)
    bids: dict[str, BidModel] = Field(default_factory=dict)
    declarations: dict[str, DeclarationModel] = Field(default_factory=dict)
    won_cards: dict[str, list[CardModel]] = Field(default_factory=dict)
    tricks_won: dict[str, int] = Field(default_factory=dict)
    discard: list[CardModel] = Field(default_factory=list)
    scores: dict[str, int] = Field(default_factory=dict)
    round_number: int = Field(0, ge=0)
    round_settled: bool = False
    version: int = Field(0, ge=0)

    @model_validator(mode="after")
    def check_consistency(self) -> "GameStateModel":
        players = set(self.player_ids)
        if len(players) != len(self.player_ids):
            raise ValueError("Player ids must be unique.")
        for name in ("hands", "bids", "declarations", "won_cards", "tricks_won", "scores"):
            unknown = set(getattr(self, name)) - players
            if unknown:
                raise ValueError(f"{name} references unknown players: {sorted(unknown)}")
        strangers = {play.player_id for play in self.trick} - players
        if strangers:
            raise ValueError(f"trick references unknown players: {sorted(strangers)}")

        card_ids = [card.id for card in self.deck] + [card.id for card in self.discard]
        card_ids += [play.card.id for play in self.trick]
        for pile in list(self.hands.values()) + list(self.won_cards.values()):
            card_ids += [card.id for card in pile]
        for bid in self.bids.values():
            card_ids += [card.id for card in bid.cards]
        if len(set(card_ids)) != len(card_ids):
            raise ValueError("A card id appears in more than one place.")
        return self

    @classmethod
    def from_state(cls, state: GameState) -> "GameStateModel":
        def cards(seq) -> list[CardModel]:
            return [CardModel.from_card(card) for card in seq]

        return cls(
            player_ids=list(state.player_ids),
            deck=cards(state.deck),
            hands={pid: cards(hand) for pid, hand in state.hands.items()},
            trick=[PlayModel(player_id=p.player_id, card=CardModel.from_card(p.card)) for p in state.trick.plays],
            bids={
                pid: BidModel(player_id=bid.player_id, cards=cards(bid.cards), value=bid.value)
                for pid, bid in state.bids.items()
            },
            declarations={
                pid: DeclarationModel(player_id=decl.player_id, kind=decl.kind)
                for pid, decl in state.declarations.items()
            },
            won_cards={pid: cards(pile) for pid, pile in state.won_cards.items()},
            tricks_won=dict(state.tricks_won),
            discard=cards(state.discard),
            scores=state.ledger.snapshot(),
            round_number=state.round_number,
            round_settled=state.round_settled,
            version=state.version,
        )

    def to_state(self) -> GameState:
        def cards(seq: list[CardModel]) -> tuple[Card, ...]:
            return tuple(model.to_card() for model in seq)

        return GameState(
            player_ids=tuple(self.player_ids),
            deck=cards(self.deck),
            hands={pid: cards(hand) for pid, hand in self.hands.items()},
            trick=Trick(tuple(TrickPlay(p.player_id, p.card.to_card()) for p in self.trick)),
            bids={
                pid: Bid(player_id=bid.player_id, cards=cards(bid.cards), value=bid.value)
                for pid, bid in self.bids.items()
            },
            declarations={
                pid: Declaration(player_id=decl.player_id, kind=decl.kind)
                for pid, decl in self.declarations.items()
            },
            won_cards={pid: cards(pile) for pid, pile in self.won_cards.items()},
            tricks_won=dict(self.tricks_won),
            discard=cards(self.discard),
            ledger=ScoreLedger(dict(self.scores)),
            round_number=self.round_number,
            round_settled=self.round_settled,
            version=self.version,
        )


def dump_state(state: GameState) -> str:
    return GameStateModel.from_state(state).model_dump_json()


def state_to_dict(state: GameState) -> dict[str, Any]:
    return GameStateModel.from_state(state).model_dump(mode="json")


def load_state(payload: Union[str, bytes, Mapping[str, Any]]) -> GameState:
    try:
        if isinstance(payload, (str, bytes)):
            model = GameStateModel.model_validate_json(payload)
        else:
            model = GameStateModel.model_validate(payload)
        return model.to_state()
    except ValidationError as exc:
        raise CodecError(f"Invalid game state payload: {exc}") from exc
    except ValueError as exc:
        # Card construction rejects mismatched joker rank/suit pairs.
        raise CodecError(str(exc)) from exc
