"""Core rules engine package for Ninety-Nine."""

__all__ = [
    "cards",
    "deck",
    "trick",
    "bidding",
    "declarations",
    "scoring",
    "rules_schema",
    "state",
    "resolver",
    "codec",
    "store",
    "service",
    "errors",
    "log",
]
