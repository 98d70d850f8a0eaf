"""Validation schema for Ninety-Nine rules configuration."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from .cards import SUIT_BID_WEIGHTS, Suit
from .declarations import DeclarationKind
from .errors import NinetyNineError

SUIT_NAMES = tuple(suit.name.lower() for suit in Suit)
DECLARATION_NAMES = tuple(kind.value for kind in DeclarationKind)


class RulesError(NinetyNineError, ValueError):
    """Raised when a rules file cannot be read or validated."""


def _default_suit_weights() -> dict[str, int]:
    return {suit.name.lower(): weight for suit, weight in SUIT_BID_WEIGHTS.items()}


def _default_declaration_bonus() -> dict[str, int]:
    return {"flush": 20, "sequence": 30, "marriage": 20}


class RuleSet(BaseModel):
    max_bid_cards: int = Field(3, ge=1, description="Largest number of cards a bid may set aside.")
    suit_weights: dict[str, int] = Field(
        default_factory=_default_suit_weights,
        description="Tricks committed per bid card, keyed by suit.",
    )
    points_per_trick: int = Field(1, ge=0, description="Points credited to the winner of each trick.")
    declaration_bonus: dict[str, int] = Field(
        default_factory=_default_declaration_bonus,
        description="Bonus credited at settlement for each declaration kind.",
    )
    exact_contract_bonus: int = Field(30, ge=0, description="Bonus for winning exactly the bid number of tricks.")
    failed_contract_penalty: int = Field(
        0,
        ge=0,
        description="Points deducted per trick of difference from the bid; 0 disables deductions.",
    )
    require_declaration_proof: bool = Field(
        False,
        description="Reject declarations the declarer's cards do not support.",
    )

    @field_validator("suit_weights")
    @classmethod
    def validate_suit_weights(cls, value: dict[str, int]) -> dict[str, int]:
        normalized: dict[str, int] = {}
        for suit, weight in value.items():
            name = suit.lower()
            if name not in SUIT_NAMES:
                raise ValueError(f"Unknown suit: {suit!r}")
            if weight < 0:
                raise ValueError(f"Suit {suit} has a negative weight.")
            normalized[name] = weight
        return normalized

    @field_validator("declaration_bonus")
    @classmethod
    def validate_declaration_bonus(cls, value: dict[str, int]) -> dict[str, int]:
        normalized: dict[str, int] = {}
        for kind, points in value.items():
            name = kind.lower()
            if name not in DECLARATION_NAMES:
                raise ValueError(f"Unknown declaration kind: {kind!r}")
            if points < 0:
                raise ValueError(f"Declaration bonus for {kind} must not be negative.")
            normalized[name] = points
        return normalized

    def weight_table(self) -> dict[Suit, int]:
        return {suit: self.suit_weights.get(suit.name.lower(), 0) for suit in Suit}

    def bonus_table(self) -> dict[DeclarationKind, int]:
        return {kind: self.declaration_bonus.get(kind.value, 0) for kind in DeclarationKind}


DEFAULT_RULES = RuleSet()


def load_rules(path: Union[str, Path]) -> RuleSet:
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise RulesError(f"Cannot read rules from {path}: {exc}") from exc
    try:
        return RuleSet.model_validate(payload)
    except ValidationError as exc:
        raise RulesError(f"Invalid rules in {path}: {exc}") from exc
