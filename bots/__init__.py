"""Bot strategies for Ninety-Nine."""

from .baseline_greedy import GreedyBot
from .random_bot import RandomBot

__all__ = ["GreedyBot", "RandomBot"]
